"""
Conversion between on-disk images and the engine's pixel representation.

The tiling engine works on three-channel RGB float32 in [0, 1]; files are
read and written by OpenCV as BGR with 8 or 16 bits per channel.
"""

from pathlib import Path
from typing import Union

import cv2
import numpy as np

PathLike = Union[str, Path]


def to_float_rgb(image: np.ndarray) -> np.ndarray:
    """
    Convert an OpenCV image to RGB float32 in [0, 1].

    Args:
        image: Grayscale, BGR or BGRA image, uint8, uint16 or float

    Returns:
        (H, W, 3) float32 array
    """
    if image.dtype not in (np.uint8, np.uint16):
        image = image.astype(np.float32)

    if image.ndim == 2 or (image.ndim == 3 and image.shape[2] == 1):
        rgb = cv2.cvtColor(image, cv2.COLOR_GRAY2RGB)
    elif image.shape[2] == 4:
        rgb = cv2.cvtColor(image, cv2.COLOR_BGRA2RGB)
    elif image.shape[2] == 3:
        rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    else:
        raise ValueError(f"unsupported channel count: {image.shape[2]}")

    if rgb.dtype == np.uint8:
        return rgb.astype(np.float32) / 255.0
    if rgb.dtype == np.uint16:
        return rgb.astype(np.float32) / 65535.0
    return np.clip(rgb.astype(np.float32), 0.0, 1.0)


def from_float_rgb(canvas: np.ndarray) -> np.ndarray:
    """
    Convert an RGB float canvas back to a BGR uint8 image.

    Args:
        canvas: (H, W, 3) float array in [0, 1]

    Returns:
        (H, W, 3) uint8 BGR image
    """
    scaled = np.clip(canvas, 0.0, 1.0) * 255.0
    bgr = np.rint(scaled).astype(np.uint8)
    return cv2.cvtColor(bgr, cv2.COLOR_RGB2BGR)


def read_image(path: PathLike) -> np.ndarray:
    """
    Load an image file with OpenCV, keeping its bit depth.

    Raises:
        FileNotFoundError: If the file does not exist
        OSError: If OpenCV cannot decode it
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")

    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise OSError(f"Could not load image: {path}")
    return image


def write_image(path: PathLike, image: np.ndarray) -> str:
    """
    Save an image with OpenCV, creating parent directories.

    Returns:
        Path the image was written to

    Raises:
        OSError: If OpenCV cannot encode or write it
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), image):
        raise OSError(f"Could not write image: {path}")
    return str(path)
