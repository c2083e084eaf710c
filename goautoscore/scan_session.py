"""
Scan Session Module for GoAutoScore

Holds the state of one scanning session: the current thresholds, the last
board raster and the last result. Recalibrating replaces a threshold;
scanning always builds a fresh result.
"""

import logging
from typing import Any, Dict, Optional

from goautoscore.vision import (
    BoardResult,
    ColorThreshold,
    GridClassifier,
    Raster,
    ScanContext,
    calibrate,
    circular_sample,
)


logger = logging.getLogger(__name__)


class ScanSession:
    """
    Explicit context for calibration and classification calls.

    Example:
        session = ScanSession()
        session.set_board(board)
        session.calibrate_black(circular_sample(board, 40, 40, 8))
        session.calibrate_white(circular_sample(board, 120, 40, 8))
        result = session.scan()
    """

    def __init__(self, classifier: Optional[GridClassifier] = None):
        """
        Initialize the session.

        Args:
            classifier: Classifier to use (default 19x19, "ceil" rounding)
        """
        self.classifier = classifier or GridClassifier()
        self.black: Optional[ColorThreshold] = None
        self.white: Optional[ColorThreshold] = None
        self.board: Optional[Raster] = None
        self.last_result: Optional[BoardResult] = None

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> 'ScanSession':
        """
        Create a session from a settings dictionary.

        Uses grid_size, rounding and the default thresholds.
        """
        classifier = GridClassifier(
            grid_size=int(settings["grid_size"]),
            rounding=settings["rounding"],
        )
        session = cls(classifier)
        session.black = ColorThreshold.from_sequence(settings["black_threshold"])
        session.white = ColorThreshold.from_sequence(settings["white_threshold"])
        return session

    @property
    def is_calibrated(self) -> bool:
        return self.black is not None and self.white is not None

    def set_board(self, board: Raster) -> None:
        """Replace the board raster; the previous result no longer applies."""
        self.board = board
        self.last_result = None

    def calibrate_black(self, sample: Raster) -> ColorThreshold:
        """Calibrate the black threshold from a stone sample."""
        self.black = calibrate(sample)
        logger.info(f"Black threshold: {self._fmt(self.black)}")
        return self.black

    def calibrate_white(self, sample: Raster) -> ColorThreshold:
        """Calibrate the white threshold from a stone sample."""
        self.white = calibrate(sample)
        logger.info(f"White threshold: {self._fmt(self.white)}")
        return self.white

    def pick_black(self, cx: int, cy: int, radius: int) -> ColorThreshold:
        """Calibrate black from a circle on the current board."""
        return self.calibrate_black(circular_sample(self._require_board(), cx, cy, radius))

    def pick_white(self, cx: int, cy: int, radius: int) -> ColorThreshold:
        """Calibrate white from a circle on the current board."""
        return self.calibrate_white(circular_sample(self._require_board(), cx, cy, radius))

    def scan(self, board: Optional[Raster] = None, context: Optional[ScanContext] = None) -> BoardResult:
        """
        Classify the board with the current thresholds.

        Args:
            board: Board to scan; replaces the session board if given
            context: Optional cancellation/progress context

        Returns:
            Fresh BoardResult

        Raises:
            RuntimeError: If a threshold or the board is missing
            ScanCancelled: If the context was cancelled
        """
        if board is not None:
            self.set_board(board)
        if not self.is_calibrated:
            raise RuntimeError("Both black and white thresholds must be calibrated before scanning")

        result = self.classifier.classify(self._require_board(), self.black, self.white, context)
        self.last_result = result

        logger.info(
            f"Scan complete: {result.total_matches()} matches, "
            f"{len(result.occupied_cells())} occupied cells"
        )
        return result

    def _require_board(self) -> Raster:
        if self.board is None:
            raise RuntimeError("No board raster loaded")
        return self.board

    @staticmethod
    def _fmt(threshold: ColorThreshold) -> str:
        return f"({threshold.r:.1f}, {threshold.g:.1f}, {threshold.b:.1f})"
