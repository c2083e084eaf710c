"""
GoAutoScore - Go stone detection from board photos.

Subpackages:
    - vision: calibration, classification and result types
"""

__version__ = "1.0.1"
