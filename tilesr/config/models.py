"""
Known super-resolution model presets and their on-disk layout.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Tuple

MODEL_CHOICES: Tuple[str, ...] = (
    "cunet/art",
    "swin_unet/art",
    "swin_unet/art_scan",
    "swin_unet/photo",
    "upconv_7/photo",
)
SCALE_CHOICES: Tuple[int, ...] = (1, 2, 4)
NOISE_CHOICES: Tuple[int, ...] = (-1, 0, 1, 2, 3)
TILE_SIZE_CHOICES: Tuple[int, ...] = (64, 256, 400, 640)
BLEND_CHOICES: Tuple[float, ...] = (1.0 / 8.0, 1.0 / 16.0, 1.0 / 32.0, 0.0)


@dataclass(frozen=True)
class ModelPreset:
    """
    A model variant selected by name, scale and noise level.

    Attributes:
        model: Model family and domain, e.g. "swin_unet/art"
        scale: Upscaling factor (1, 2 or 4)
        noise: Denoising level, -1 for none
    """
    model: str
    scale: int
    noise: int = -1

    def __post_init__(self):
        """Validate the combination."""
        if self.model not in MODEL_CHOICES:
            raise ValueError(f"model must be one of {', '.join(MODEL_CHOICES)}, got {self.model!r}")
        if self.scale not in SCALE_CHOICES:
            raise ValueError(f"scale must be one of {SCALE_CHOICES}, got {self.scale}")
        if self.noise not in NOISE_CHOICES:
            raise ValueError(f"noise must be one of {NOISE_CHOICES}, got {self.noise}")
        if self.model == "cunet/art" and self.scale == 4:
            raise ValueError("cunet/art does not support scale factor 4.")
        if self.noise == -1 and self.scale == 1:
            raise ValueError("Noise level -1 does not support scale factor 1.")

    @property
    def filename(self) -> str:
        """Model file name, e.g. ``noise1_scale2x.onnx``."""
        parts = []
        if self.noise != -1:
            parts.append(f"noise{self.noise}")
        if self.scale != 1:
            parts.append(f"scale{self.scale}x")
        return "_".join(parts) + ".onnx"

    def model_path(self, models_dir: str = "models") -> Path:
        """Path of the model file below a models directory."""
        return Path(models_dir) / self.model / self.filename

    def output_suffix(self, tta: bool = False) -> str:
        """
        Suffix appended to rendered file names.

        Example:
            >>> ModelPreset("swin_unet/art", 2, 1).output_suffix(tta=True)
            '(swin_unet_art)(noise1)(scale2)(tta)'
        """
        suffix = f"({self.model.replace('/', '_')})"
        if self.noise != -1:
            suffix += f"(noise{self.noise})"
        if self.scale != 1:
            suffix += f"(scale{self.scale})"
        if tta:
            suffix += "(tta)"
        return suffix

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "model": self.model,
            "scale": self.scale,
            "noise": self.noise,
            "filename": self.filename,
        }


def resolve_model_path(model: str, scale: int, noise: int = -1, models_dir: str = "models") -> Path:
    """Shorthand for ``ModelPreset(model, scale, noise).model_path(models_dir)``."""
    return ModelPreset(model, scale, noise).model_path(models_dir)


def output_suffix(model: str, scale: int, noise: int = -1, tta: bool = False) -> str:
    """Shorthand for ``ModelPreset(model, scale, noise).output_suffix(tta)``."""
    return ModelPreset(model, scale, noise).output_suffix(tta)
