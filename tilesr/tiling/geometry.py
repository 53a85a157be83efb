"""
Tile geometry planning.

Computes how many tiles a canvas needs and where each tile is sampled from
and written to, for a backend with fixed input and output tile sizes.
"""

import logging
import math
from typing import Tuple, Union

from ..errors import InvalidGeometry
from .models import Rect, TileGeometry, TileGrid

logger = logging.getLogger(__name__)

Pair = Tuple[float, float]


def _lround(value: float) -> int:
    """Round half away from zero."""
    return int(math.floor(abs(value) + 0.5)) * (1 if value >= 0 else -1)


def _as_pair(value: Union[float, Tuple[float, float]]) -> Pair:
    if isinstance(value, (tuple, list)):
        if len(value) != 2:
            raise InvalidGeometry(f"expected an (x, y) pair, got {value!r}")
        return (value[0], value[1])
    return (value, value)


def compute_geometry(
    input_tile_size: Tuple[int, int],
    output_tile_size: Tuple[int, int],
    scale: Union[float, Pair],
    overlap: Union[float, Pair],
) -> TileGeometry:
    """
    Derive the per-session tile geometry.

    Args:
        input_tile_size: (width, height) of a backend input tile
        output_tile_size: (width, height) of a backend output tile
        scale: Requested output scale, scalar or (sx, sy)
        overlap: Overlap fraction in [0, 0.5), scalar or (ox, oy)

    Returns:
        TileGeometry

    Raises:
        InvalidGeometry: On non-positive sizes or scales, or overlap outside [0, 0.5)
    """
    sx, sy = _as_pair(scale)
    ox, oy = _as_pair(overlap)
    in_w, in_h = input_tile_size
    out_w, out_h = output_tile_size

    if min(in_w, in_h, out_w, out_h) <= 0:
        raise InvalidGeometry(
            f"tile sizes must be positive, got input {input_tile_size} and output {output_tile_size}"
        )
    if sx <= 0 or sy <= 0:
        raise InvalidGeometry(f"scale must be positive, got ({sx}, {sy})")
    if not (0 <= ox < 0.5 and 0 <= oy < 0.5):
        raise InvalidGeometry(f"overlap must be in [0, 0.5), got ({ox}, {oy})")

    scaled_output = (in_w * sx, in_h * sy)

    # Compensates for a model whose native scale differs from the requested one
    # (or that crops its output); rounding may shift tile boundaries by half a pixel.
    scaled_input = (
        _lround(out_w / scaled_output[0] * in_w),
        _lround(out_h / scaled_output[1] * in_h),
    )

    return TileGeometry(
        input_tile_size=(in_w, in_h),
        output_tile_size=(out_w, out_h),
        scaled_output_tile_size=scaled_output,
        scaled_input_tile_size=scaled_input,
        input_overlap=(_lround(in_w * ox), _lround(in_h * oy)),
        scaled_output_overlap=(_lround(scaled_output[0] * ox), _lround(scaled_output[1] * oy)),
        scale=(sx, sy),
    )


class GeometryPlanner:
    """
    Plans overlapping tiles for canvases of any size.

    The planner is immutable; a new one must be created whenever the tile
    size, scale or overlap changes.

    Example:
        >>> planner = GeometryPlanner((64, 64), (128, 128), scale=2, overlap=1 / 16)
        >>> grid = planner.plan(300, 200)
        >>> grid.tile_count
        20
    """

    def __init__(
        self,
        input_tile_size: Tuple[int, int],
        output_tile_size: Tuple[int, int],
        scale: Union[float, Pair] = 1.0,
        overlap: Union[float, Pair] = 0.0,
    ):
        """
        Initialize the planner.

        Args:
            input_tile_size: (width, height) of a backend input tile
            output_tile_size: (width, height) of a backend output tile
            scale: Requested output scale
            overlap: Overlap fraction in [0, 0.5)
        """
        self.geometry = compute_geometry(input_tile_size, output_tile_size, scale, overlap)

        geo = self.geometry
        for axis, name in ((0, "width"), (1, "height")):
            if geo.scaled_input_tile_size[axis] <= geo.input_overlap[axis]:
                raise InvalidGeometry(
                    f"scaled input tile {name} ({geo.scaled_input_tile_size[axis]}) must exceed "
                    f"input overlap ({geo.input_overlap[axis]})"
                )
            if geo.output_tile_size[axis] <= geo.scaled_output_overlap[axis]:
                raise InvalidGeometry(
                    f"output tile {name} ({geo.output_tile_size[axis]}) must exceed "
                    f"output overlap ({geo.scaled_output_overlap[axis]})"
                )

    def output_size(self, width: int, height: int) -> Tuple[int, int]:
        """
        Canvas size for an input of the given size.

        Returns:
            (width, height) of the output canvas
        """
        sx, sy = self.geometry.scale
        return (_lround(width * sx), _lround(height * sy))

    def tiling(self, width: int, height: int) -> Tuple[int, int]:
        """
        Number of tiles along each axis.

        Counted in output space, so the output rectangles reach the canvas edge
        even when the input and output overlaps do not round in the scale ratio.

        Args:
            width: Input canvas width
            height: Input canvas height

        Returns:
            (columns, rows), each at least 1
        """
        geo = self.geometry
        canvas_w, canvas_h = self.output_size(width, height)
        counts = []
        for size, tile, overlap in (
            (canvas_w, geo.output_tile_size[0], geo.scaled_output_overlap[0]),
            (canvas_h, geo.output_tile_size[1], geo.scaled_output_overlap[1]),
        ):
            counts.append(max(1, math.ceil((size - overlap) / (tile - overlap))))
        return counts[0], counts[1]

    def tile_count(self, width: int, height: int) -> int:
        """Total number of tiles for a canvas."""
        cols, rows = self.tiling(width, height)
        return cols * rows

    def plan(self, width: int, height: int) -> TileGrid:
        """
        Plan the tile grid for one canvas.

        Args:
            width: Input canvas width
            height: Input canvas height

        Returns:
            TileGrid with one input and one output rectangle per tile

        Raises:
            InvalidGeometry: If the canvas is empty or a tile falls outside the output canvas
        """
        if width <= 0 or height <= 0:
            raise InvalidGeometry(f"canvas must be non-empty, got {width}x{height}")

        geo = self.geometry
        in_w, in_h = geo.input_tile_size
        out_w, out_h = geo.output_tile_size
        scaled_w, scaled_h = geo.scaled_input_tile_size
        in_ov_x, in_ov_y = geo.input_overlap
        out_ov_x, out_ov_y = geo.scaled_output_overlap

        canvas_w, canvas_h = self.output_size(width, height)
        cols, rows = self.tiling(width, height)

        # Centre the scaled extent inside the (possibly larger) model input
        border_x = int((in_w - scaled_w) / 2)
        border_y = int((in_h - scaled_h) / 2)

        grid = TileGrid(
            tiling=(cols, rows),
            input_rect=Rect(0, 0, width, height),
            output_rect=Rect(0, 0, canvas_w, canvas_h),
        )

        for i in range(cols):
            for j in range(rows):
                grid.input_rects.append(Rect(
                    -border_x + i * (scaled_w - in_ov_x),
                    -border_y + j * (scaled_h - in_ov_y),
                    in_w,
                    in_h,
                ))

                x = i * (out_w - out_ov_x)
                y = j * (out_h - out_ov_y)
                rect = Rect(x, y, min(out_w, canvas_w - x), min(out_h, canvas_h - y))
                if rect.is_empty:
                    raise InvalidGeometry(
                        f"tile ({i}, {j}) at ({x}, {y}) falls outside the {canvas_w}x{canvas_h} canvas"
                    )
                grid.output_rects.append(rect)

        logger.debug(
            f"Planned {grid.tile_count} tiles ({cols}x{rows}) for {width}x{height} -> "
            f"{canvas_w}x{canvas_h}"
        )
        return grid


def plan_tiles(
    width: int,
    height: int,
    input_tile_size: Tuple[int, int],
    output_tile_size: Tuple[int, int],
    scale: Union[float, Pair] = 1.0,
    overlap: Union[float, Pair] = 0.0,
) -> TileGrid:
    """
    Convenience wrapper: plan a grid without keeping a planner around.
    """
    planner = GeometryPlanner(input_tile_size, output_tile_size, scale, overlap)
    return planner.plan(width, height)
