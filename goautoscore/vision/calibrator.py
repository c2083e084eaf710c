"""
Threshold Calibrator

Turns a reference stone sample into the RGB threshold used by the classifier.
"""

import logging

import numpy as np

from .errors import EmptySample
from .raster import Raster
from .result import ColorThreshold


logger = logging.getLogger(__name__)


def calibrate(sample: Raster) -> ColorThreshold:
    """
    Average the opaque pixels of a calibration sample.

    Fully transparent pixels (alpha == 0) come from masking the sample to a
    circle and are skipped. Averaging is done on raw RGB, with no outlier
    rejection or colour space conversion.

    Args:
        sample: Raster cropped from a single stone

    Returns:
        ColorThreshold with the per-channel mean

    Raises:
        EmptySample: If every pixel in the sample is transparent
    """
    pixels = sample.pixels
    opaque = pixels[..., 3] != 0
    count = int(np.count_nonzero(opaque))

    if count == 0:
        raise EmptySample(f"Calibration sample {sample.width}x{sample.height} has no opaque pixels")

    # int64 sums so large samples can't overflow
    sums = pixels[opaque][:, :3].sum(axis=0, dtype=np.int64)
    threshold = ColorThreshold(
        r=int(sums[0]) / count,
        g=int(sums[1]) / count,
        b=int(sums[2]) / count,
    )

    logger.debug(f"Calibrated {count} pixels -> ({threshold.r:.2f}, {threshold.g:.2f}, {threshold.b:.2f})")
    return threshold
