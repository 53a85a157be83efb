"""
Seam blending weights for overlapping output tiles.

A tile with a neighbour on some side is faded out linearly over the shared
overlap on that side. The ramps of two neighbours sum to exactly 1 at every
overlapped pixel, so tiles can simply be added into the canvas.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .models import Rect


@dataclass(frozen=True)
class BlendWeights:
    """
    Directional alpha ramps, each the size of one output tile (H, W).

    Attributes:
        top: Fades in over the first overlap rows
        bottom: ``top`` mirrored vertically
        left: Fades in over the first overlap columns
        right: ``left`` mirrored horizontally
        overlap: (x, y) overlap in pixels
    """
    top: np.ndarray
    bottom: np.ndarray
    left: np.ndarray
    right: np.ndarray
    overlap: Tuple[int, int]

    @property
    def tile_size(self) -> Tuple[int, int]:
        """(width, height) of the maps."""
        return self.top.shape[1], self.top.shape[0]

    @property
    def is_uniform(self) -> bool:
        """True when no blending takes place."""
        return self.overlap == (0, 0)


def build_blend_weights(overlap: Tuple[int, int], tile_size: Tuple[int, int]) -> BlendWeights:
    """
    Precompute the four blending ramps for a session.

    Row ``r < overlap_y`` of ``top`` is ``(r + 1) / (overlap_y + 1)``; all other
    rows are 1. ``left`` is the column-wise analog.

    Args:
        overlap: (x, y) overlap between neighbouring output tiles in pixels
        tile_size: (width, height) of an output tile

    Returns:
        BlendWeights
    """
    overlap_x, overlap_y = overlap
    width, height = tile_size

    top = np.ones((height, width), dtype=np.float32)
    rows = min(overlap_y, height)
    if rows > 0:
        ramp = np.arange(1, rows + 1, dtype=np.float32) / (overlap_y + 1)
        top[:rows, :] = ramp[:, np.newaxis]

    left = np.ones((height, width), dtype=np.float32)
    cols = min(overlap_x, width)
    if cols > 0:
        ramp = np.arange(1, cols + 1, dtype=np.float32) / (overlap_x + 1)
        left[:, :cols] = ramp[np.newaxis, :]

    for weights in (top, left):
        weights.setflags(write=False)

    bottom = np.flipud(top)
    right = np.fliplr(left)

    return BlendWeights(top=top, bottom=bottom, left=left, right=right, overlap=(overlap_x, overlap_y))


def apply_blending(
    tile: np.ndarray,
    tile_rect: Rect,
    canvas_rect: Rect,
    weights: BlendWeights,
) -> np.ndarray:
    """
    Fade a tile on every side where it has a neighbour.

    Sides are multiplied in sequence: left, top, right, bottom.

    Args:
        tile: Full output tile (H, W) or (H, W, C), float
        tile_rect: Where the tile lands on the canvas
        canvas_rect: The canvas rectangle
        weights: Session blend weights

    Returns:
        Weighted copy of the tile
    """
    result = np.array(tile, dtype=np.float32, copy=True)
    expand = result.ndim == 3

    def _multiply(mask: np.ndarray) -> None:
        result[...] *= mask[:, :, np.newaxis] if expand else mask

    if tile_rect.x > canvas_rect.x:
        _multiply(weights.left)
    if tile_rect.y > canvas_rect.y:
        _multiply(weights.top)
    if tile_rect.x2 < canvas_rect.x2:
        _multiply(weights.right)
    if tile_rect.y2 < canvas_rect.y2:
        _multiply(weights.bottom)

    return result
