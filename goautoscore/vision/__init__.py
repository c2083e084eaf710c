"""
Vision Module for GoAutoScore

Stone detection by colour thresholds: calibrate a threshold from a reference
stone, then classify a board raster into per-intersection match counts.

Usage:
    from goautoscore.vision import Raster, calibrate, circular_sample, classify

    board = Raster.from_image(image)

    # Calibrate from circular samples over a known black and white stone
    black = calibrate(circular_sample(board, 40, 40, 8))
    white = calibrate(circular_sample(board, 120, 40, 8))

    # Count matches per intersection
    result = classify(board, black, white)
    cell = result[(1, 1)]
    print(cell.black_count, cell.white_count)

Example with another rounding policy:
    result = classify(board, black, white, rounding="round")
"""

# Public API - Errors
from .errors import (
    ScanError,
    EmptySample,
    InvalidRaster,
    ScanCancelled,
)

# Public API - Data types
from .raster import Raster, circular_sample
from .result import (
    GRID_SIZE,
    StoneColor,
    ColorThreshold,
    Match,
    CellAggregate,
    BoardResult,
)
from .context import ScanContext

# Public API - Calibration and classification
from .calibrator import calibrate
from .classifier import GridClassifier, classify
from .projection import (
    DEFAULT_POLICY,
    project,
    register_policy,
    get_policy_names,
)

# Presentation helpers
from .summary import CellState, BoardSummary, summarize, render_board

# Debug utilities
from .debug import DEBUG_DIR, save_debug_image, draw_overlay

__all__ = [
    # Errors
    "ScanError",
    "EmptySample",
    "InvalidRaster",
    "ScanCancelled",
    # Data types
    "Raster",
    "circular_sample",
    "GRID_SIZE",
    "StoneColor",
    "ColorThreshold",
    "Match",
    "CellAggregate",
    "BoardResult",
    "ScanContext",
    # Core
    "calibrate",
    "GridClassifier",
    "classify",
    "DEFAULT_POLICY",
    "project",
    "register_policy",
    "get_policy_names",
    # Presentation
    "CellState",
    "BoardSummary",
    "summarize",
    "render_board",
    # Debug
    "DEBUG_DIR",
    "save_debug_image",
    "draw_overlay",
]
