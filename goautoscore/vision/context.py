"""
Scan Context Module - Cancellation and progress for long scans.
"""

import threading
from dataclasses import dataclass, field
from typing import Callable, Optional


@dataclass
class ScanContext:
    """
    Context passed to a cancellable scan.

    The classifier checks is_cancelled() once per row and reports progress
    as the fraction of rows done.

    Attributes:
        cancel_flag: Threading event for cancellation
        progress_callback: Optional callback(percent, message)
    """
    cancel_flag: threading.Event = field(default_factory=threading.Event)
    progress_callback: Optional[Callable[[float, str], None]] = None

    def cancel(self) -> None:
        """Request cancellation."""
        self.cancel_flag.set()

    def is_cancelled(self) -> bool:
        return self.cancel_flag.is_set()

    def report_progress(self, percent: float, message: str = "") -> None:
        """
        Report progress to the caller.

        Args:
            percent: Progress from 0.0 to 1.0
            message: Optional status message
        """
        if self.progress_callback:
            self.progress_callback(percent, message)
