"""
Raster Module - Immutable RGBA pixel buffer.

Every image handed to the calibrator or classifier is first turned into a
Raster. Construction validates the buffer shape, so a malformed raster never
reaches the scanning code.
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Union

import cv2
import numpy as np
from PIL import Image

from .errors import InvalidRaster

logger = logging.getLogger(__name__)


CHANNELS = 4  # r, g, b, a


@dataclass(frozen=True, eq=False)
class Raster:
    """
    Row-major RGBA pixel buffer.

    Attributes:
        pixels: Read-only uint8 array of shape (height, width, 4)
    """
    pixels: np.ndarray

    def __post_init__(self):
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray):
            raise InvalidRaster(f"Expected numpy array, got {type(pixels).__name__}")
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise InvalidRaster(f"Expected shape (height, width, 4), got {pixels.shape}")
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise InvalidRaster(f"Raster must be at least 1x1, got {pixels.shape[1]}x{pixels.shape[0]}")
        if pixels.dtype != np.uint8:
            if not np.issubdtype(pixels.dtype, np.integer):
                raise InvalidRaster(f"Expected integer channel values, got dtype {pixels.dtype}")
            if pixels.min() < 0 or pixels.max() > 255:
                raise InvalidRaster("Channel values must be in [0, 255]")

        # Take a private read-only copy so callers can't mutate a live raster
        frozen = np.array(pixels, dtype=np.uint8, copy=True)
        frozen.setflags(write=False)
        object.__setattr__(self, "pixels", frozen)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: Union[bytes, bytearray, Sequence[int]]) -> 'Raster':
        """
        Create a Raster from a flat RGBA sequence.

        Args:
            width: Raster width in pixels
            height: Raster height in pixels
            data: Flat sequence of width * height * 4 channel values

        Returns:
            Raster instance

        Raises:
            InvalidRaster: If the length doesn't match width * height * 4
        """
        if width < 1 or height < 1:
            raise InvalidRaster(f"Raster must be at least 1x1, got {width}x{height}")

        if isinstance(data, (bytes, bytearray, memoryview)):
            flat = np.frombuffer(data, dtype=np.uint8)
        else:
            # Range and dtype are checked in __post_init__
            flat = np.asarray(data)

        expected = width * height * CHANNELS
        if flat.ndim != 1 or flat.size != expected:
            raise InvalidRaster(
                f"Expected {expected} values for {width}x{height} raster, got {flat.size}"
            )

        return cls(pixels=flat.reshape(height, width, CHANNELS))

    @classmethod
    def from_array(cls, array: np.ndarray) -> 'Raster':
        """
        Create a Raster from an RGB or RGBA array.

        RGB input is treated as fully opaque.

        Args:
            array: Integer array of shape (height, width, 3) or (height, width, 4)
                with channel values in [0, 255]

        Returns:
            Raster instance

        Raises:
            InvalidRaster: If the array is not integer or out of range
        """
        array = np.asarray(array)
        if array.ndim == 3 and array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            array = np.concatenate([array, alpha], axis=2)
        return cls(pixels=array)

    @classmethod
    def from_image(cls, image: Image.Image) -> 'Raster':
        """
        Create a Raster from a PIL image (any mode).

        Args:
            image: PIL Image

        Returns:
            Raster instance
        """
        return cls(pixels=np.array(image.convert("RGBA")))

    @property
    def width(self) -> int:
        """Width in pixels."""
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        """Height in pixels."""
        return self.pixels.shape[0]

    @property
    def size(self):
        """(width, height) tuple, PIL style."""
        return self.width, self.height

    def tobytes(self) -> bytes:
        """Flat row-major RGBA bytes."""
        return self.pixels.tobytes()

    def to_image(self) -> Image.Image:
        """Convert to an RGBA PIL image."""
        return Image.fromarray(np.ascontiguousarray(self.pixels), "RGBA")

    def crop(self, left: int, top: int, width: int, height: int) -> 'Raster':
        """
        Crop a rectangular region.

        The region is clipped to the raster bounds.

        Raises:
            InvalidRaster: If the clipped region is empty
        """
        x1 = max(0, left)
        y1 = max(0, top)
        x2 = min(self.width, left + width)
        y2 = min(self.height, top + height)
        if x2 <= x1 or y2 <= y1:
            raise InvalidRaster(f"Crop ({left}, {top}, {width}, {height}) is outside the raster")
        return Raster(pixels=self.pixels[y1:y2, x1:x2])

    def __eq__(self, other):
        if not isinstance(other, Raster):
            return NotImplemented
        return np.array_equal(self.pixels, other.pixels)

    def __repr__(self):
        return f"Raster({self.width}x{self.height})"


def circular_sample(raster: Raster, cx: int, cy: int, radius: int) -> Raster:
    """
    Cut a circular calibration sample out of a raster.

    Takes the square around (cx, cy) with side 2 * radius and clears the
    alpha channel of every pixel outside the inscribed circle, so the
    calibrator only averages the stone surface. Near the raster border the
    radius shrinks so the square stays centred on (cx, cy).

    Args:
        raster: Source raster (usually the cropped board)
        cx: Circle centre x
        cy: Circle centre y
        radius: Circle radius in pixels (>= 1)

    Returns:
        Square Raster with transparent corners

    Raises:
        InvalidRaster: If the radius is below 1 or the centre lies on or
            outside the raster border
    """
    if radius < 1:
        raise InvalidRaster(f"Sample radius must be >= 1, got {radius}")

    half = min(radius, cx, cy, raster.width - cx, raster.height - cy)
    if half < 1:
        raise InvalidRaster(f"Sample centre ({cx}, {cy}) is on or outside the raster border")
    if half < radius:
        logger.debug(f"Sample radius clipped from {radius} to {half} at ({cx}, {cy})")

    side = 2 * half
    square = raster.crop(cx - half, cy - half, side, side)

    mask = np.zeros((side, side), dtype=np.uint8)
    centre = side // 2
    cv2.circle(mask, (centre, centre), side // 2, 255, thickness=-1)

    pixels = square.pixels.copy()
    pixels[mask == 0, 3] = 0
    return Raster(pixels=pixels)
