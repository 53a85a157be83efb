"""
Tiled Super-Resolution Package

Upscales images of any size with inference backends that only accept
fixed-size tiles: overlapping tile planning, fixed-size batching with
optional test-time augmentation, and seamless blending of the results.
"""

from .errors import (
    TilingError,
    InvalidGeometry,
    InvalidRegion,
    ConfigurationMismatch,
    InferenceFailure,
)
from .config import RenderConfig, ModelPreset
from .backends import InferenceBackend, InterpolationBackend, OnnxBackend
from .tiling import GeometryPlanner, TileSession, TileGrid, Rect

__all__ = [
    "TilingError",
    "InvalidGeometry",
    "InvalidRegion",
    "ConfigurationMismatch",
    "InferenceFailure",
    "RenderConfig",
    "ModelPreset",
    "InferenceBackend",
    "InterpolationBackend",
    "OnnxBackend",
    "GeometryPlanner",
    "TileSession",
    "TileGrid",
    "Rect",
]
