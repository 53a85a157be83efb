"""
Render configuration for tiled upscaling sessions.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional, Tuple, Union

from ..errors import InvalidGeometry

SizeLike = Union[int, Tuple[int, int]]
PairLike = Union[float, Tuple[float, float]]


def _pair(value: Union[float, Tuple[float, float], list], name: str) -> Tuple[float, float]:
    if isinstance(value, (tuple, list)):
        if len(value) != 2:
            raise InvalidGeometry(f"{name} must be a scalar or an (x, y) pair, got {value!r}")
        return (value[0], value[1])
    return (value, value)


@dataclass
class RenderConfig:
    """
    Configuration for one tiling session.

    Attributes:
        tile_size: Backend input tile size, int or (width, height)
        output_tile_size: Backend output tile size; None asks the backend
        scale: Requested output scale, number or (sx, sy)
        overlap: Fraction of a tile shared with each neighbour, in [0, 0.5)
        tta: Average the 8 dihedral augmentations of every tile
        batch_size: Tiles per backend call
        channels: Channels of the internal pixel representation
    """
    tile_size: SizeLike = 256
    output_tile_size: Optional[SizeLike] = None
    scale: PairLike = 2.0
    overlap: PairLike = 1.0 / 16.0
    tta: bool = False
    batch_size: int = 1
    channels: int = 3

    def __post_init__(self):
        """Validate configuration values."""
        self._validate()

    def _validate(self):
        """Validate all configuration values."""
        if isinstance(self.tile_size, list):
            self.tile_size = tuple(self.tile_size)
        if isinstance(self.output_tile_size, list):
            self.output_tile_size = tuple(self.output_tile_size)
        if isinstance(self.scale, list):
            self.scale = tuple(self.scale)
        if isinstance(self.overlap, list):
            self.overlap = tuple(self.overlap)

        for w in self.tile_width, self.tile_height:
            if w < 1:
                raise InvalidGeometry(f"tile_size must be >= 1, got {self.tile_size}")

        if self.output_tile_size is not None:
            out_w, out_h = _pair(self.output_tile_size, "output_tile_size")
            if out_w < 1 or out_h < 1:
                raise InvalidGeometry(f"output_tile_size must be >= 1, got {self.output_tile_size}")

        sx, sy = self.scale_xy
        if sx <= 0 or sy <= 0:
            raise InvalidGeometry(f"scale must be > 0, got {self.scale}")

        ox, oy = self.overlap_xy
        if not (0.0 <= ox < 0.5 and 0.0 <= oy < 0.5):
            raise InvalidGeometry(f"overlap must be in [0, 0.5), got {self.overlap}")

        if self.batch_size < 1:
            raise InvalidGeometry(f"batch_size must be >= 1, got {self.batch_size}")

        if self.channels < 1:
            raise InvalidGeometry(f"channels must be >= 1, got {self.channels}")

    @property
    def tile_width(self) -> int:
        return int(_pair(self.tile_size, "tile_size")[0])

    @property
    def tile_height(self) -> int:
        return int(_pair(self.tile_size, "tile_size")[1])

    @property
    def input_tile_shape(self) -> Tuple[int, int, int]:
        """(height, width, channels) of a backend input tile."""
        return (self.tile_height, self.tile_width, self.channels)

    @property
    def output_tile_shape(self) -> Optional[Tuple[int, int, int]]:
        """(height, width, channels) of a backend output tile, if fixed by config."""
        if self.output_tile_size is None:
            return None
        out_w, out_h = _pair(self.output_tile_size, "output_tile_size")
        return (int(out_h), int(out_w), self.channels)

    @property
    def scale_xy(self) -> Tuple[float, float]:
        return _pair(self.scale, "scale")

    @property
    def overlap_xy(self) -> Tuple[float, float]:
        return _pair(self.overlap, "overlap")

    @property
    def overlapping(self) -> bool:
        return self.overlap_xy != (0.0, 0.0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        def _plain(value):
            return list(value) if isinstance(value, tuple) else value

        return {
            "tile_size": _plain(self.tile_size),
            "output_tile_size": _plain(self.output_tile_size),
            "scale": _plain(self.scale),
            "overlap": _plain(self.overlap),
            "tta": self.tta,
            "batch_size": self.batch_size,
            "channels": self.channels,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RenderConfig":
        """Create from dictionary (e.g., from YAML config)."""
        return cls(
            tile_size=data.get("tile_size", 256),
            output_tile_size=data.get("output_tile_size"),
            scale=data.get("scale", 2.0),
            overlap=data.get("overlap", 1.0 / 16.0),
            tta=data.get("tta", False),
            batch_size=data.get("batch_size", 1),
            channels=data.get("channels", 3),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "RenderConfig":
        """Load configuration from YAML file."""
        import yaml

        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data.get("render", data))

    @classmethod
    def default(cls) -> "RenderConfig":
        """Create default configuration."""
        return cls()
