"""
Tile extraction with replicate padding at image borders.
"""

from typing import Tuple

import cv2
import numpy as np

from ..errors import InvalidRegion
from .models import Rect


def border_padding(rect: Rect, width: int, height: int) -> Tuple[int, int, int, int]:
    """
    How far a rectangle sticks out of an image on each side.

    Args:
        rect: Sampling rectangle
        width: Image width
        height: Image height

    Returns:
        (top, bottom, left, right) padding in pixels, each >= 0
    """
    top = max(0, -rect.y)
    bottom = max(0, rect.y2 - height)
    left = max(0, -rect.x)
    right = max(0, rect.x2 - width)
    return top, bottom, left, right


def extract_tile(image: np.ndarray, rect: Rect) -> np.ndarray:
    """
    Sample a rectangle from an image, replicating edge pixels where the
    rectangle extends past the image.

    Rectangles fully inside the image return a view into the image.

    Args:
        image: Source image (H, W) or (H, W, C)
        rect: Sampling rectangle in image coordinates

    Returns:
        Array of exactly rect.height x rect.width pixels

    Raises:
        InvalidRegion: If the rectangle has no pixels in common with the image
    """
    height, width = image.shape[:2]
    bounds = Rect(0, 0, width, height)

    if rect.is_empty:
        raise InvalidRegion(f"cannot sample empty rectangle {rect.to_dict()}")

    if bounds.contains(rect):
        rows, cols = rect.to_slices()
        return image[rows, cols]

    valid = rect.intersection(bounds)
    if valid.is_empty:
        raise InvalidRegion(
            f"rectangle {rect.to_dict()} does not overlap the {width}x{height} image"
        )

    top, bottom, left, right = border_padding(rect, width, height)
    rows, cols = valid.to_slices()
    tile = cv2.copyMakeBorder(
        image[rows, cols], top, bottom, left, right, cv2.BORDER_REPLICATE
    )

    # OpenCV drops a trailing single-channel axis
    if tile.ndim < image.ndim:
        tile = tile[:, :, np.newaxis]
    return tile
