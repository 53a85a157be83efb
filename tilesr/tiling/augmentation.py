"""
Dihedral test-time augmentation.

Each of the 8 symmetries of the square is described by a sequence of
flip/rotate primitives and the sequence that undoes it. ``reverse`` is the
exact inverse of ``apply`` for every augmentation.
"""

from enum import Enum
from typing import Callable, Dict, Tuple, Union

import cv2
import numpy as np

# Number of dihedral variants averaged per tile
TTA_SIZE = 8

Primitive = Callable[[np.ndarray], np.ndarray]


def _flip_horizontal(tile: np.ndarray) -> np.ndarray:
    return cv2.flip(tile, 1)


def _flip_vertical(tile: np.ndarray) -> np.ndarray:
    return cv2.flip(tile, 0)


def _rotate_90(tile: np.ndarray) -> np.ndarray:
    return cv2.rotate(tile, cv2.ROTATE_90_CLOCKWISE)


def _rotate_180(tile: np.ndarray) -> np.ndarray:
    return cv2.rotate(tile, cv2.ROTATE_180)


def _rotate_270(tile: np.ndarray) -> np.ndarray:
    return cv2.rotate(tile, cv2.ROTATE_90_COUNTERCLOCKWISE)


class Augmentation(Enum):
    """The 8 dihedral transforms, indexed in batch step order."""
    IDENTITY = 0
    FLIP_HORIZONTAL = 1
    FLIP_VERTICAL = 2
    ROTATE_90 = 3
    ROTATE_180 = 4
    ROTATE_270 = 5
    FLIP_HORIZONTAL_ROTATE_90 = 6
    FLIP_VERTICAL_ROTATE_90 = 7

    @property
    def swaps_axes(self) -> bool:
        """True when the transform turns an h x w tile into a w x h tile."""
        return self in (
            Augmentation.ROTATE_90,
            Augmentation.ROTATE_270,
            Augmentation.FLIP_HORIZONTAL_ROTATE_90,
            Augmentation.FLIP_VERTICAL_ROTATE_90,
        )


# augmentation -> (forward primitives, inverse primitives), applied left to right
AUGMENTATION_TABLE: Dict[Augmentation, Tuple[Tuple[Primitive, ...], Tuple[Primitive, ...]]] = {
    Augmentation.IDENTITY: ((), ()),
    Augmentation.FLIP_HORIZONTAL: ((_flip_horizontal,), (_flip_horizontal,)),
    Augmentation.FLIP_VERTICAL: ((_flip_vertical,), (_flip_vertical,)),
    Augmentation.ROTATE_90: ((_rotate_90,), (_rotate_270,)),
    Augmentation.ROTATE_180: ((_rotate_180,), (_rotate_180,)),
    Augmentation.ROTATE_270: ((_rotate_270,), (_rotate_90,)),
    Augmentation.FLIP_HORIZONTAL_ROTATE_90: (
        (_flip_horizontal, _rotate_90),
        (_rotate_270, _flip_horizontal),
    ),
    Augmentation.FLIP_VERTICAL_ROTATE_90: (
        (_flip_vertical, _rotate_90),
        (_rotate_270, _flip_vertical),
    ),
}


def _run(tile: np.ndarray, primitives: Tuple[Primitive, ...]) -> np.ndarray:
    if not primitives:
        return tile.copy()

    result = tile
    for primitive in primitives:
        result = primitive(result)

    # OpenCV drops a trailing single-channel axis
    if result.ndim < tile.ndim:
        result = result[:, :, np.newaxis]
    return result


def apply_augmentation(tile: np.ndarray, augmentation: Union[int, Augmentation]) -> np.ndarray:
    """
    Transform a tile before inference.

    Args:
        tile: Tile (H, W) or (H, W, C)
        augmentation: Augmentation or its index 0..7

    Returns:
        New transformed array; rotations by 90/270 swap height and width
    """
    forward, _ = AUGMENTATION_TABLE[Augmentation(augmentation)]
    return _run(tile, forward)


def reverse_augmentation(tile: np.ndarray, augmentation: Union[int, Augmentation]) -> np.ndarray:
    """
    Undo apply_augmentation on an inference result.

    Args:
        tile: Transformed tile
        augmentation: The augmentation that was applied

    Returns:
        New array in the original orientation
    """
    _, inverse = AUGMENTATION_TABLE[Augmentation(augmentation)]
    return _run(tile, inverse)
