"""
Capture Module for GoAutoScore

Loads board images from disk or grabs a single frame from a camera and
hands them to the scanner as Rasters.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
from PIL import Image

from goautoscore.vision import Raster


logger = logging.getLogger(__name__)


def fit_dimensions(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """
    Scale (width, height) down to fit inside a bounding box, keeping aspect ratio.

    Images already inside the box are returned unchanged.

    Returns:
        (new_width, new_height), each at least 1
    """
    if width <= max_width and height <= max_height:
        return width, height

    scale = min(max_width / width, max_height / height)
    return max(1, round(width * scale)), max(1, round(height * scale))


def load_raster(
    path: Union[str, Path],
    max_size: Optional[Tuple[int, int]] = None
) -> Raster:
    """
    Load an image file as a Raster.

    Args:
        path: Image file path
        max_size: Optional (max_width, max_height) to downscale large photos

    Returns:
        RGBA Raster

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")

    with Image.open(path) as image:
        image.load()
        if max_size is not None:
            new_size = fit_dimensions(image.width, image.height, *max_size)
            if new_size != image.size:
                logger.debug(f"Resizing {image.size} -> {new_size}")
                image = image.resize(new_size, Image.Resampling.BILINEAR)
        raster = Raster.from_image(image)

    logger.info(f"Loaded {path.name}: {raster.width}x{raster.height}")
    return raster


def grab_camera_frame(device: int = 0) -> Optional[Raster]:
    """
    Grab a single frame from a camera.

    Args:
        device: OpenCV camera index

    Returns:
        RGBA Raster, or None if the camera could not be read
    """
    capture = cv2.VideoCapture(device)
    try:
        if not capture.isOpened():
            logger.warning(f"Camera {device} could not be opened")
            return None

        ok, frame = capture.read()
        if not ok or frame is None:
            logger.warning(f"Camera {device} returned no frame")
            return None

        rgba = cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA)
        raster = Raster(pixels=rgba)
        logger.info(f"Captured camera frame: {raster.width}x{raster.height}")
        return raster
    finally:
        capture.release()
