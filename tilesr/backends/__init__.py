"""
Inference backends for the tiling engine.
"""

from .base import InferenceBackend
from .interpolation import InterpolationBackend
from .onnx_backend import OnnxBackend, blob_from_tiles, tiles_from_blob

__all__ = [
    "InferenceBackend",
    "InterpolationBackend",
    "OnnxBackend",
    "blob_from_tiles",
    "tiles_from_blob",
]
