"""
Scan Worker Module for GoAutoScore

Provides a background QThread worker that runs one board scan off the UI
thread. Communicates with the caller via Qt signals and can be cancelled
between rows.
"""

import logging
import time
from typing import Optional

from PyQt5.QtCore import QThread, pyqtSignal

from goautoscore.scan_session import ScanSession
from goautoscore.vision import Raster, ScanCancelled, ScanContext


# Configure module logger
logger = logging.getLogger(__name__)


class ScanWorker(QThread):
    """
    Background worker thread for a single scan.

    Signals:
        progress_changed(float, str): Fraction of rows done and a status message
        scan_finished(object): Emitted with the BoardResult
        scan_cancelled(): Emitted when request_stop() interrupted the scan
        error_occurred(str): Emitted when the scan failed

    Example:
        worker = ScanWorker(session, board)
        worker.scan_finished.connect(ui.show_result)
        worker.start()
        # ...
        worker.request_stop()
        worker.wait()
    """

    # Signals for UI updates (thread-safe)
    progress_changed = pyqtSignal(float, str)
    scan_finished = pyqtSignal(object)
    scan_cancelled = pyqtSignal()
    error_occurred = pyqtSignal(str)

    def __init__(self, session: ScanSession, board: Optional[Raster] = None):
        """
        Initialize the scan worker.

        Args:
            session: Calibrated scan session
            board: Board to scan (default: the session's current board)
        """
        super().__init__()
        self.session = session
        self.board = board
        self._context = ScanContext(progress_callback=self._on_progress)

    def request_stop(self):
        """Ask the running scan to stop at the next row boundary."""
        logger.info("Scan stop requested")
        self._context.cancel()

    def is_stop_requested(self) -> bool:
        return self._context.is_cancelled()

    def run(self):
        """
        Run the scan. Called when the thread starts.

        Exactly one of scan_finished, scan_cancelled or error_occurred is
        emitted per run.
        """
        start = time.perf_counter()
        logger.info("Scan worker started")

        try:
            result = self.session.scan(self.board, context=self._context)
        except ScanCancelled:
            logger.info("Scan worker cancelled")
            self.scan_cancelled.emit()
            return
        except Exception as e:
            logger.exception("Error in scan worker")
            self.error_occurred.emit(str(e))
            return

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"Scan worker finished in {elapsed_ms:.1f}ms")
        self.scan_finished.emit(result)

    def _on_progress(self, percent: float, message: str):
        self.progress_changed.emit(percent, message)
