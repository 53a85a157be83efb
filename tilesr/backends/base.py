"""
Inference backend boundary.

A backend runs one fixed-size batch of fixed-size tiles and returns one batch
of fixed-size output tiles in the same slot order. Shapes are numpy-style
(height, width, channels).
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..errors import InferenceFailure

logger = logging.getLogger(__name__)

Shape = Tuple[int, int, int]


class InferenceBackend(ABC):
    """
    Base class for inference backends.

    Backends own their runtime resources and release them in ``close()``;
    use them as context managers to guarantee release on every exit path.

    Example:
        >>> with InterpolationBackend(scale=2) as backend:
        ...     backend.configure((64, 64, 3), (128, 128, 3), batch_size=4)
        ...     outputs = backend.run_batch(tiles)
    """

    name = "base"

    def __init__(self):
        self.input_tile_shape: Optional[Shape] = None
        self.output_tile_shape: Optional[Shape] = None
        self.batch_size: Optional[int] = None

    @property
    def is_configured(self) -> bool:
        return self.batch_size is not None

    @abstractmethod
    def configure(self, input_tile_shape: Shape, output_tile_shape: Shape, batch_size: int) -> bool:
        """
        Fix the per-batch tensor shapes.

        Returns:
            False if the shapes are incompatible with the loaded model
        """

    @abstractmethod
    def run_batch(self, tiles: Sequence[np.ndarray]) -> List[np.ndarray]:
        """
        Run one batch.

        Args:
            tiles: batch_size tiles of input_tile_shape, float32 in [0, 1]

        Returns:
            batch_size tiles of output_tile_shape; slot i corresponds to input slot i

        Raises:
            InferenceFailure: On device errors, shape mismatches or backend faults
        """

    def native_output_shape(self, input_tile_shape: Shape) -> Shape:
        """Output tile shape the model produces for a given input tile shape."""
        return tuple(input_tile_shape)

    def _store_shapes(self, input_tile_shape: Shape, output_tile_shape: Shape, batch_size: int) -> None:
        self.input_tile_shape = tuple(input_tile_shape)
        self.output_tile_shape = tuple(output_tile_shape)
        self.batch_size = batch_size

    def validate_batch(self, tiles: Sequence[np.ndarray]) -> None:
        """
        Check a batch against the configured shapes.

        Raises:
            InferenceFailure: If the backend is not configured or the batch does not match
        """
        if not self.is_configured:
            raise InferenceFailure(f"{self.name} backend used before configure()")

        if len(tiles) != self.batch_size:
            raise InferenceFailure(
                f"input has invalid batch size: expected {self.batch_size}, got {len(tiles)}"
            )

        for tile in tiles:
            if tuple(tile.shape) != self.input_tile_shape:
                raise InferenceFailure(
                    f"input tile has invalid shape: expected {self.input_tile_shape}, "
                    f"got {tuple(tile.shape)}"
                )

    def validate_outputs(self, outputs: Sequence[np.ndarray]) -> None:
        """
        Check backend results against the configured output shape.

        Raises:
            InferenceFailure: On a wrong count or shape
        """
        if len(outputs) != self.batch_size:
            raise InferenceFailure(
                f"output has invalid batch size: expected {self.batch_size}, got {len(outputs)}"
            )

        for tile in outputs:
            if tuple(tile.shape) != self.output_tile_shape:
                raise InferenceFailure(
                    f"output tile has invalid shape: expected {self.output_tile_shape}, "
                    f"got {tuple(tile.shape)}"
                )

    def close(self) -> None:
        """Release runtime resources."""
        self.input_tile_shape = None
        self.output_tile_shape = None
        self.batch_size = None

    def __enter__(self) -> "InferenceBackend":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
