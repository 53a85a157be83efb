"""
TileSession: renders full canvases through a fixed-size tile backend.

A session owns its configuration, tile geometry and blend weights. Nothing is
shared between sessions, so several sessions with different tile sizes can
coexist.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..backends.base import InferenceBackend
from ..config.render_config import RenderConfig
from ..errors import ConfigurationMismatch, InferenceFailure
from .accumulation import AccumulationStage
from .augmentation import apply_augmentation
from .blending import BlendWeights, build_blend_weights
from .geometry import GeometryPlanner
from .models import PendingEntry, TileGeometry, TileGrid
from .sampling import extract_tile
from .scheduler import BatchScheduler

logger = logging.getLogger(__name__)


@dataclass
class RenderProgress:
    """Progress information for one render call."""
    total_batches: int
    completed_batches: int
    status: str = "pending"  # pending, rendering, complete, error
    iterations_per_second: float = 0.0
    error_message: Optional[str] = None

    @property
    def progress_percent(self) -> float:
        """Get completion percentage."""
        if self.total_batches == 0:
            return 100.0
        return (self.completed_batches / self.total_batches) * 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_batches": self.total_batches,
            "completed_batches": self.completed_batches,
            "status": self.status,
            "progress_percent": self.progress_percent,
            "iterations_per_second": self.iterations_per_second,
            "error_message": self.error_message,
        }


@dataclass
class RenderStats:
    """Counters from the last finished render."""
    tile_count: int
    batch_count: int
    step_count: int
    tiles_written: int
    elapsed_ms: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "tile_count": self.tile_count,
            "batch_count": self.batch_count,
            "step_count": self.step_count,
            "tiles_written": self.tiles_written,
            "elapsed_ms": self.elapsed_ms,
        }


class TileSession:
    """
    Upscales images of any size with a backend that only accepts fixed tiles.

    Example:
        >>> backend = InterpolationBackend(scale=2)
        >>> with TileSession(backend, RenderConfig(tile_size=64, scale=2, batch_size=4)) as session:
        ...     canvas = session.render(image)
    """

    def __init__(
        self,
        backend: InferenceBackend,
        config: Optional[RenderConfig] = None,
        progress_callback: Optional[Callable[[RenderProgress], None]] = None,
    ):
        """
        Initialize the session.

        Args:
            backend: Inference backend, owned by the session from here on
            config: Render configuration
            progress_callback: Optional callback for per-batch progress updates
        """
        self.backend = backend
        self.config = config or RenderConfig()
        self.progress_callback = progress_callback

        self._planner: Optional[GeometryPlanner] = None
        self._weights: Optional[BlendWeights] = None
        self._output_shape: Optional[Tuple[int, int, int]] = None
        self._progress = RenderProgress(total_batches=0, completed_batches=0)
        self.last_stats: Optional[RenderStats] = None

    @property
    def is_configured(self) -> bool:
        return self._planner is not None

    @property
    def geometry(self) -> TileGeometry:
        if self._planner is None:
            self.configure()
        return self._planner.geometry

    @property
    def weights(self) -> BlendWeights:
        if self._weights is None:
            self.configure()
        return self._weights

    @property
    def progress(self) -> RenderProgress:
        """Get current render progress."""
        return self._progress

    def configure(self) -> TileGeometry:
        """
        Fix tile shapes with the backend and derive all geometry-dependent state.

        Returns:
            The session's TileGeometry

        Raises:
            ConfigurationMismatch: If the backend rejects the shapes, or TTA is
                requested for non-square tiles
            InvalidGeometry: If the tiling parameters are degenerate
        """
        self._planner = None
        self._weights = None
        self._output_shape = None

        config = self.config
        input_shape = config.input_tile_shape
        output_shape = config.output_tile_shape or tuple(self.backend.native_output_shape(input_shape))

        if output_shape[2] != config.channels:
            raise ConfigurationMismatch(
                f"backend produces {output_shape[2]} channels, session is configured for {config.channels}"
            )

        if config.tta and (input_shape[0] != input_shape[1] or output_shape[0] != output_shape[1]):
            raise ConfigurationMismatch(
                f"test-time augmentation needs square tiles, got input {input_shape[:2]} "
                f"and output {output_shape[:2]}"
            )

        planner = GeometryPlanner(
            input_tile_size=(input_shape[1], input_shape[0]),
            output_tile_size=(output_shape[1], output_shape[0]),
            scale=config.scale_xy,
            overlap=config.overlap_xy,
        )

        if not self.backend.configure(input_shape, output_shape, config.batch_size):
            raise ConfigurationMismatch(
                f"backend {self.backend.name!r} rejected input {input_shape}, output {output_shape}, "
                f"batch size {config.batch_size}"
            )

        geo = planner.geometry
        self._weights = build_blend_weights(geo.scaled_output_overlap, geo.output_tile_size)
        self._output_shape = tuple(output_shape)
        self._planner = planner

        logger.debug(f"Configured session: {geo.to_dict()}")
        return geo

    def reconfigure(self, config: RenderConfig) -> TileGeometry:
        """Replace the configuration; all previous geometry is discarded."""
        self.config = config
        return self.configure()

    def plan(self, width: int, height: int) -> TileGrid:
        """Plan the tile grid for an input of the given size."""
        if self._planner is None:
            self.configure()
        return self._planner.plan(width, height)

    def validate_image(self, image: np.ndarray) -> None:
        """
        Check an image against the session's pixel representation.

        Raises:
            ConfigurationMismatch: On wrong rank, channel count or dtype
        """
        if image.ndim != 3:
            raise ConfigurationMismatch(f"image must be (H, W, C), got shape {image.shape}")
        if image.shape[2] != self.config.channels:
            raise ConfigurationMismatch(
                f"image has {image.shape[2]} channels, expected {self.config.channels}"
            )
        if image.dtype != np.float32:
            raise ConfigurationMismatch(f"image must be float32 in [0, 1], got {image.dtype}")

    def render(self, image: np.ndarray) -> np.ndarray:
        """
        Upscale one image.

        Args:
            image: Float32 image (H, W, C) in [0, 1]

        Returns:
            Float32 canvas (round(H * sy), round(W * sx), C) in [0, 1]

        Raises:
            ConfigurationMismatch: Before any backend call, on an incompatible image
            InvalidGeometry: Before any backend call, on a degenerate tiling
            InferenceFailure: If any batch fails; the render is aborted
        """
        start_time = time.time()
        self.validate_image(image)

        height, width = image.shape[:2]
        grid = self.plan(width, height)
        config = self.config

        canvas = np.zeros(
            (grid.output_rect.height, grid.output_rect.width, config.channels),
            dtype=np.float32,
        )
        stage = AccumulationStage(
            canvas,
            grid,
            weights=self._weights if config.overlapping else None,
            tta=config.tta,
        )
        scheduler = BatchScheduler(
            tile_count=grid.tile_count,
            batch_size=config.batch_size,
            input_tile_shape=config.input_tile_shape,
            tta=config.tta,
        )

        def sample(entry: PendingEntry) -> np.ndarray:
            tile = extract_tile(image, grid.input_rects[entry.tile_index])
            if config.tta and entry.augmentation_index != 0:
                return apply_augmentation(tile, entry.augmentation_index)
            return tile

        batch_start = time.time()

        def on_batch(batch_number: int, batch_count: int) -> None:
            nonlocal batch_start
            elapsed = max(time.time() - batch_start, 1e-9)
            rate = 1.0 / elapsed
            logger.info(f"Rendered batch {batch_number}/{batch_count} @ {rate:.2f} it/s.")
            self._update_progress(batch_count, batch_number, "rendering", rate)
            batch_start = time.time()

        self._update_progress(scheduler.batch_count, 0, "rendering")
        try:
            scheduler.run(sample, self._infer, stage.consume, on_batch)
        except Exception as e:
            self._update_progress(
                scheduler.batch_count, self._progress.completed_batches, "error", error=str(e)
            )
            logger.error(f"Render failed: {e}")
            raise

        self._update_progress(scheduler.batch_count, scheduler.batch_count, "complete")
        self.last_stats = RenderStats(
            tile_count=grid.tile_count,
            batch_count=scheduler.batch_count,
            step_count=scheduler.step_count,
            tiles_written=stage.tiles_written,
            elapsed_ms=(time.time() - start_time) * 1000,
        )

        np.clip(canvas, 0.0, 1.0, out=canvas)
        return canvas

    def _infer(self, batch: List[np.ndarray]) -> Sequence[np.ndarray]:
        try:
            outputs = self.backend.run_batch(batch)
        except InferenceFailure:
            raise
        except Exception as e:
            raise InferenceFailure(f"{self.backend.name} backend failed: {e}") from e

        for tile in outputs:
            if tuple(tile.shape) != self._output_shape:
                raise InferenceFailure(
                    f"{self.backend.name} backend returned a {tuple(tile.shape)} tile, "
                    f"expected {self._output_shape}"
                )
        return outputs

    def _update_progress(
        self,
        total: int,
        completed: int,
        status: str,
        rate: float = 0.0,
        error: Optional[str] = None,
    ):
        """Update progress and notify callback."""
        self._progress = RenderProgress(
            total_batches=total,
            completed_batches=completed,
            status=status,
            iterations_per_second=rate,
            error_message=error,
        )

        if self.progress_callback:
            self.progress_callback(self._progress)

    def close(self) -> None:
        """Release the backend and drop geometry-dependent state."""
        self.backend.close()
        self._planner = None
        self._weights = None
        self._output_shape = None

    def __enter__(self) -> "TileSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
