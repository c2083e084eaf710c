"""
Scan Debug Utilities

Functions for saving annotated debug images and managing debug output.
"""

from pathlib import Path
from typing import Iterable, Optional

from PIL import Image, ImageDraw, ImageFont

from .raster import Raster
from .result import BoardResult, Match, StoneColor


# Debug settings
DEBUG_DIR = Path("./debug")
MAX_DEBUG_IMAGES = 10

# Match marker colours and size
BLACK_MARKER = "#F44336"  # Red
WHITE_MARKER = "#03A9F4"  # Blue
MARKER_SIZE = 3
GRID_COLOR = "#4CAF50"


def draw_overlay(
    board: Raster,
    matches: Iterable[Match],
    result: Optional[BoardResult] = None
) -> Image.Image:
    """
    Paint matches (and optionally grid cell lines and counts) onto a copy of the board.

    Args:
        board: Board raster that was classified
        matches: Match stream, e.g. GridClassifier.iter_matches()
        result: Classification result, used for the grid and summary text

    Returns:
        RGB PIL image with annotations
    """
    debug_img = board.to_image().convert("RGB")
    draw = ImageDraw.Draw(debug_img)

    for match in matches:
        color = BLACK_MARKER if match.color is StoneColor.BLACK else WHITE_MARKER
        draw.rectangle(
            [match.x, match.y, match.x + MARKER_SIZE - 1, match.y + MARKER_SIZE - 1],
            fill=color
        )

    if result is not None:
        size = result.grid_size
        width, height = board.width, board.height

        # Cell i covers fractions ((i-1)/size, i/size]
        for i in range(1, size):
            x = round(width * i / size)
            y = round(height * i / size)
            draw.line([(x, 0), (x, height)], fill=GRID_COLOR, width=1)
            draw.line([(0, y), (width, y)], fill=GRID_COLOR, width=1)

        font = ImageFont.load_default()
        occupied = len(result.occupied_cells())
        summary = f"Matches: {result.total_matches()}, Occupied cells: {occupied}"
        draw.text((4, 4), summary, fill="yellow", font=font)

    return debug_img


def save_debug_image(
    board: Raster,
    matches: Iterable[Match],
    result: Optional[BoardResult],
    path: str
) -> None:
    """
    Save an annotated debug image of a scan.

    Args:
        board: Board raster
        matches: Match stream
        result: Classification result (can be None)
        path: Output file path
    """
    # Ensure debug directory exists
    DEBUG_DIR.mkdir(parents=True, exist_ok=True)

    debug_img = draw_overlay(board, matches, result)
    debug_img.save(path, "PNG")

    # Cleanup old debug images
    _cleanup_debug_images()


def _cleanup_debug_images() -> None:
    """Remove old debug images, keeping only the most recent MAX_DEBUG_IMAGES."""
    if not DEBUG_DIR.exists():
        return

    debug_files = sorted(
        DEBUG_DIR.glob("debug_*.png"),
        key=lambda p: p.stat().st_mtime,
        reverse=True
    )

    for old_file in debug_files[MAX_DEBUG_IMAGES:]:
        try:
            old_file.unlink()
        except OSError:
            pass
