"""
Grid Classifier

Classifies every pixel of a board raster against the black and white
thresholds and tallies the matches per board intersection.

Each row is classified with vectorised numpy masks. The per-pixel rule is:

    black: r <= black.r and g <= black.g and b <= black.b
    white: r >= white.r and g >= white.g and b >= white.b

Both predicates are evaluated independently, so with overlapping thresholds
one pixel can count for both colours.
"""

import logging
import time
from typing import Iterator, Optional, Tuple

import numpy as np

from .context import ScanContext
from .errors import ScanCancelled
from .projection import DEFAULT_POLICY, get_policy, project
from .raster import Raster
from .result import GRID_SIZE, BoardResult, ColorThreshold, Match, StoneColor


logger = logging.getLogger(__name__)

# Progress is reported roughly this many times per scan
PROGRESS_STEPS = 20


def _row_masks(line: np.ndarray, black: ColorThreshold, white: ColorThreshold) -> Tuple[np.ndarray, np.ndarray]:
    """Black and white match masks for one row of RGBA pixels."""
    r = line[:, 0]
    g = line[:, 1]
    b = line[:, 2]
    is_black = (r <= black.r) & (g <= black.g) & (b <= black.b)
    is_white = (r >= white.r) & (g >= white.g) & (b >= white.b)
    return is_black, is_white


class GridClassifier:
    """
    Pixel classifier and grid aggregator.

    Attributes:
        grid_size: Lines per board side (19 for a full Go board)
        rounding: Name of the rounding policy used for grid projection
    """

    def __init__(self, grid_size: int = GRID_SIZE, rounding: str = DEFAULT_POLICY):
        if grid_size < 1:
            raise ValueError(f"grid_size must be >= 1, got {grid_size}")
        get_policy(rounding)  # fail fast on unknown names
        self.grid_size = grid_size
        self.rounding = rounding

    def __repr__(self):
        return f"GridClassifier(grid_size={self.grid_size}, rounding={self.rounding!r})"

    def classify(
        self,
        board: Raster,
        black: ColorThreshold,
        white: ColorThreshold,
        context: Optional[ScanContext] = None
    ) -> BoardResult:
        """
        Scan a board raster and count matches per intersection.

        Matches projecting to column or row <= 0 (pixels in the first image
        column or row) are discarded.

        Args:
            board: Cropped board raster
            black: Upper bound for black stones
            white: Lower bound for white stones
            context: Optional cancellation/progress context, checked once per row

        Returns:
            BoardResult with every cell present

        Raises:
            ScanCancelled: If the context was cancelled mid-scan
        """
        start_time = time.perf_counter()
        size = self.grid_size
        width, height = board.width, board.height

        cols = project(np.arange(width), width, size, self.rounding)
        rows = project(np.arange(height), height, size, self.rounding)
        col_valid = cols > 0

        # [row][col], 0-based
        black_counts = np.zeros((size, size), dtype=np.int64)
        white_counts = np.zeros((size, size), dtype=np.int64)

        step = max(1, height // PROGRESS_STEPS)
        pixels = board.pixels

        for y in range(height):
            if context is not None:
                if context.is_cancelled():
                    logger.info(f"Scan cancelled at row {y}/{height}")
                    raise ScanCancelled(f"Scan cancelled at row {y} of {height}")
                if y % step == 0:
                    context.report_progress(y / height, f"Row {y}/{height}")

            row_idx = int(rows[y])
            if row_idx <= 0:
                continue

            is_black, is_white = _row_masks(pixels[y], black, white)
            black_counts[row_idx - 1] += np.bincount(
                cols[is_black & col_valid] - 1, minlength=size
            )
            white_counts[row_idx - 1] += np.bincount(
                cols[is_white & col_valid] - 1, minlength=size
            )

        if context is not None:
            context.report_progress(1.0, "Done")

        result = BoardResult.from_counts(black_counts, white_counts, size)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            f"Classified {width}x{height} raster: {int(black_counts.sum())} black, "
            f"{int(white_counts.sum())} white matches in {elapsed_ms:.1f}ms"
        )
        return result

    def iter_matches(self, board: Raster, black: ColorThreshold, white: ColorThreshold) -> Iterator[Match]:
        """
        Yield every match in row-major order.

        A pixel matching both colours yields a black match, then a white one.
        Boundary matches are included; discarding happens during aggregation.
        """
        pixels = board.pixels
        for y in range(board.height):
            is_black, is_white = _row_masks(pixels[y], black, white)
            for x in np.nonzero(is_black | is_white)[0]:
                if is_black[x]:
                    yield Match(int(x), y, StoneColor.BLACK)
                if is_white[x]:
                    yield Match(int(x), y, StoneColor.WHITE)

    def cell_for(self, x: int, y: int, width: int, height: int) -> Optional[Tuple[int, int]]:
        """
        Grid cell a pixel projects to.

        Returns:
            (col, row) or None if the pixel falls on the discarded boundary
        """
        col = int(project(x, width, self.grid_size, self.rounding))
        row = int(project(y, height, self.grid_size, self.rounding))
        if col <= 0 or row <= 0:
            return None
        return col, row


def classify(
    board: Raster,
    black: ColorThreshold,
    white: ColorThreshold,
    grid_size: int = GRID_SIZE,
    rounding: str = DEFAULT_POLICY,
    context: Optional[ScanContext] = None
) -> BoardResult:
    """
    Classify a board raster with a one-off GridClassifier.

    See GridClassifier.classify().
    """
    return GridClassifier(grid_size, rounding).classify(board, black, white, context)
