"""
Accumulation of drained output tiles into the destination canvas.
"""

from typing import Dict, Optional

import numpy as np

from .augmentation import TTA_SIZE, reverse_augmentation
from .blending import BlendWeights, apply_blending
from .models import PendingEntry, TileGrid


class AccumulationStage:
    """
    Turns drained backend outputs into canvas contributions.

    With TTA, the 8 variants of a tile are reversed and summed into a
    per-tile accumulator and averaged once the last variant arrives. The final
    tile estimate is blend-weighted and added into the canvas at its output
    rectangle.

    Example:
        >>> stage = AccumulationStage(canvas, grid, weights, tta=False)
        >>> stage.consume(PendingEntry(0, 0), output_tile)
    """

    def __init__(
        self,
        canvas: np.ndarray,
        grid: TileGrid,
        weights: Optional[BlendWeights] = None,
        tta: bool = False,
    ):
        """
        Initialize the stage.

        Args:
            canvas: Zero-initialized float canvas (H, W, C), written in place
            grid: Tile grid the entries refer to
            weights: Blend weights; None or uniform weights disable blending
            tta: Whether entries carry augmentation variants
        """
        self.canvas = canvas
        self.grid = grid
        self.weights = weights
        self.tta = tta

        self.tiles_written = 0
        self._accumulators: Dict[int, np.ndarray] = {}

    @property
    def blending(self) -> bool:
        return self.weights is not None and not self.weights.is_uniform

    @property
    def pending_tiles(self) -> int:
        """Tiles with some but not all augmentation variants received."""
        return len(self._accumulators)

    def consume(self, entry: PendingEntry, output_tile: np.ndarray) -> bool:
        """
        Take one drained output tile.

        Args:
            entry: Identity of the batch slot
            output_tile: Backend output for that slot

        Returns:
            True when the tile was finished and written to the canvas
        """
        tile = np.asarray(output_tile, dtype=np.float32)

        if self.tta:
            tile = self._accumulate(entry, tile)
            if tile is None:
                return False

        self._write(entry.tile_index, tile)
        return True

    def _accumulate(self, entry: PendingEntry, tile: np.ndarray) -> Optional[np.ndarray]:
        index = entry.augmentation_index

        if index == 0:
            self._accumulators[entry.tile_index] = tile.copy()
            return None

        accumulator = self._accumulators[entry.tile_index]
        accumulator += reverse_augmentation(tile, index)

        if index < TTA_SIZE - 1:
            return None

        del self._accumulators[entry.tile_index]
        accumulator /= TTA_SIZE
        return accumulator

    def _write(self, tile_index: int, tile: np.ndarray) -> None:
        rect = self.grid.output_rects[tile_index]

        if self.blending:
            tile = apply_blending(tile, rect, self.grid.output_rect, self.weights)

        rows, cols = rect.to_slices()
        self.canvas[rows, cols] += tile[:rect.height, :rect.width]
        self.tiles_written += 1
