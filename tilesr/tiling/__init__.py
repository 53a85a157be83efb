"""
Tile orchestration and blending engine.

Splits images too large for a fixed-size model input into overlapping tiles,
runs them through an inference backend in fixed-size batches (optionally under
8 dihedral augmentations), and blends the outputs back into one seamless canvas.
"""

from .models import Rect, TileGeometry, TileGrid, PendingEntry
from .geometry import GeometryPlanner, compute_geometry, plan_tiles
from .sampling import extract_tile, border_padding
from .augmentation import Augmentation, apply_augmentation, reverse_augmentation, TTA_SIZE
from .blending import BlendWeights, build_blend_weights, apply_blending
from .scheduler import BatchScheduler, PendingQueue, SchedulerState
from .accumulation import AccumulationStage
from .renderer import TileSession, RenderProgress, RenderStats

__all__ = [
    # Models
    "Rect",
    "TileGeometry",
    "TileGrid",
    "PendingEntry",
    # Geometry
    "GeometryPlanner",
    "compute_geometry",
    "plan_tiles",
    # Sampling
    "extract_tile",
    "border_padding",
    # Augmentation
    "Augmentation",
    "apply_augmentation",
    "reverse_augmentation",
    "TTA_SIZE",
    # Blending
    "BlendWeights",
    "build_blend_weights",
    "apply_blending",
    # Scheduling
    "BatchScheduler",
    "PendingQueue",
    "SchedulerState",
    # Accumulation
    "AccumulationStage",
    # Session
    "TileSession",
    "RenderProgress",
    "RenderStats",
]
