"""
Scan Errors

Exception types raised by calibration and classification.
"""


class ScanError(Exception):
    """Base class for all stone scanning errors."""


class EmptySample(ScanError):
    """Calibration sample contained no opaque pixels."""


class InvalidRaster(ScanError, ValueError):
    """Pixel buffer does not match its declared width and height."""


class ScanCancelled(ScanError):
    """Cancellable scan was stopped at a row boundary."""
