"""
Data structures for tile planning and batch bookkeeping.
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Dict, Any, NamedTuple


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle in integer pixel coordinates.

    Input tile rectangles may start at negative coordinates or extend past
    the image they are sampled from; sampling resolves that with padding.

    Attributes:
        x: Left edge
        y: Top edge
        width: Width in pixels
        height: Height in pixels
    """
    x: int
    y: int
    width: int
    height: int

    @property
    def x2(self) -> int:
        """Right edge (exclusive)."""
        return self.x + self.width

    @property
    def y2(self) -> int:
        """Bottom edge (exclusive)."""
        return self.y + self.height

    @property
    def area(self) -> int:
        """Area in pixels (0 for empty rectangles)."""
        if self.width <= 0 or self.height <= 0:
            return 0
        return self.width * self.height

    @property
    def is_empty(self) -> bool:
        """True when the rectangle covers no pixels."""
        return self.width <= 0 or self.height <= 0

    def intersection(self, other: "Rect") -> "Rect":
        """
        Intersect with another rectangle.

        Returns:
            The overlapping rectangle; width/height are clamped to 0 when
            the rectangles do not overlap.
        """
        x1 = max(self.x, other.x)
        y1 = max(self.y, other.y)
        x2 = min(self.x2, other.x2)
        y2 = min(self.y2, other.y2)
        return Rect(x1, y1, max(0, x2 - x1), max(0, y2 - y1))

    def contains(self, other: "Rect") -> bool:
        """True when other lies fully inside this rectangle."""
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.x2 <= self.x2
            and other.y2 <= self.y2
        )

    def to_slices(self) -> Tuple[slice, slice]:
        """Numpy (row, column) slices for this rectangle."""
        return slice(self.y, self.y2), slice(self.x, self.x2)

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary."""
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class TileGeometry:
    """
    Per-session tile sizes and overlaps, fixed once the backend is configured.

    All sizes are (width, height) pairs.

    Attributes:
        input_tile_size: Size of every tile sent to the backend
        output_tile_size: Size of every tile returned by the backend
        scaled_output_tile_size: input_tile_size multiplied by the requested scale
        scaled_input_tile_size: Input-space extent whose scaled image exactly
            fills one output tile
        input_overlap: Overlap between neighbouring input tiles
        scaled_output_overlap: Overlap between neighbouring output tiles
        scale: Requested (sx, sy) scale factor
    """
    input_tile_size: Tuple[int, int]
    output_tile_size: Tuple[int, int]
    scaled_output_tile_size: Tuple[float, float]
    scaled_input_tile_size: Tuple[int, int]
    input_overlap: Tuple[int, int]
    scaled_output_overlap: Tuple[int, int]
    scale: Tuple[float, float]

    @property
    def overlapping(self) -> bool:
        """True when neighbouring output tiles share any pixels."""
        return self.scaled_output_overlap != (0, 0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "input_tile_size": list(self.input_tile_size),
            "output_tile_size": list(self.output_tile_size),
            "scaled_output_tile_size": list(self.scaled_output_tile_size),
            "scaled_input_tile_size": list(self.scaled_input_tile_size),
            "input_overlap": list(self.input_overlap),
            "scaled_output_overlap": list(self.scaled_output_overlap),
            "scale": list(self.scale),
        }


@dataclass
class TileGrid:
    """
    Planned tiles for one canvas.

    Tile ``i`` is sampled from ``input_rects[i]`` and written to
    ``output_rects[i]``. Tiles are enumerated column by column.

    Attributes:
        tiling: Number of tiles along (x, y)
        input_rect: Rectangle of the source image
        output_rect: Rectangle of the destination canvas
        input_rects: Per-tile sampling rectangles (always input_tile_size)
        output_rects: Per-tile destination rectangles, clipped to the canvas
    """
    tiling: Tuple[int, int]
    input_rect: Rect
    output_rect: Rect
    input_rects: List[Rect] = field(default_factory=list)
    output_rects: List[Rect] = field(default_factory=list)

    @property
    def tile_count(self) -> int:
        """Total number of tiles."""
        return len(self.output_rects)

    def __len__(self) -> int:
        return self.tile_count

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "tiling": list(self.tiling),
            "tile_count": self.tile_count,
            "input_rect": self.input_rect.to_dict(),
            "output_rect": self.output_rect.to_dict(),
            "tiles": [
                {
                    "index": i,
                    "input": in_rect.to_dict(),
                    "output": out_rect.to_dict(),
                }
                for i, (in_rect, out_rect) in enumerate(zip(self.input_rects, self.output_rects))
            ],
        }


class PendingEntry(NamedTuple):
    """Logical identity of one batch slot: which tile, which augmentation."""
    tile_index: int
    augmentation_index: int
