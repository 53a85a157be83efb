"""
Session configuration and model presets.
"""

from .render_config import RenderConfig
from .models import (
    ModelPreset,
    MODEL_CHOICES,
    SCALE_CHOICES,
    NOISE_CHOICES,
    TILE_SIZE_CHOICES,
    BLEND_CHOICES,
    resolve_model_path,
    output_suffix,
)

__all__ = [
    "RenderConfig",
    "ModelPreset",
    "MODEL_CHOICES",
    "SCALE_CHOICES",
    "NOISE_CHOICES",
    "TILE_SIZE_CHOICES",
    "BLEND_CHOICES",
    "resolve_model_path",
    "output_suffix",
]
