"""
Model-free backend that scales tiles with OpenCV interpolation.
"""

import logging
from typing import List, Sequence

import cv2
import numpy as np

from .base import InferenceBackend, Shape

logger = logging.getLogger(__name__)

INTERPOLATIONS = {
    "nearest": cv2.INTER_NEAREST,
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "area": cv2.INTER_AREA,
    "lanczos": cv2.INTER_LANCZOS4,
}


class InterpolationBackend(InferenceBackend):
    """
    Resizes every tile by a fixed factor.

    Useful as a stand-in for a super-resolution model: smoke runs without
    model files, and a baseline to compare model output against.
    """

    name = "resize"

    def __init__(self, scale: float = 2.0, interpolation: str = "cubic"):
        """
        Initialize the backend.

        Args:
            scale: Resize factor applied to both axes
            interpolation: One of INTERPOLATIONS
        """
        super().__init__()
        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")
        if interpolation not in INTERPOLATIONS:
            raise ValueError(
                f"unknown interpolation {interpolation!r}, expected one of {sorted(INTERPOLATIONS)}"
            )
        self.scale = scale
        self.interpolation = interpolation

    def native_output_shape(self, input_tile_shape: Shape) -> Shape:
        height, width, channels = input_tile_shape
        return (int(round(height * self.scale)), int(round(width * self.scale)), channels)

    def configure(self, input_tile_shape: Shape, output_tile_shape: Shape, batch_size: int) -> bool:
        expected = self.native_output_shape(input_tile_shape)
        if tuple(output_tile_shape) != expected:
            logger.error(
                f"Output tile shape {tuple(output_tile_shape)} does not match "
                f"{self.scale}x resize of {tuple(input_tile_shape)} (expected {expected})"
            )
            return False
        if batch_size < 1:
            logger.error(f"Invalid batch size {batch_size}")
            return False

        self._store_shapes(input_tile_shape, output_tile_shape, batch_size)
        return True

    def run_batch(self, tiles: Sequence[np.ndarray]) -> List[np.ndarray]:
        self.validate_batch(tiles)

        out_h, out_w = self.output_tile_shape[:2]
        flag = INTERPOLATIONS[self.interpolation]

        outputs = []
        for tile in tiles:
            resized = cv2.resize(
                np.ascontiguousarray(tile, dtype=np.float32),
                (out_w, out_h),
                interpolation=flag,
            )
            if resized.ndim < tile.ndim:
                resized = resized[:, :, np.newaxis]
            outputs.append(resized)

        self.validate_outputs(outputs)
        return outputs
