"""Tests for GeometryPlanner and tile geometry."""

import numpy as np
import pytest

from tilesr.errors import InvalidGeometry
from tilesr.tiling.geometry import GeometryPlanner, compute_geometry, plan_tiles
from tilesr.tiling.models import Rect


def _coverage(grid) -> np.ndarray:
    canvas = grid.output_rect
    counts = np.zeros((canvas.height, canvas.width), dtype=np.int32)
    for rect in grid.output_rects:
        assert canvas.contains(rect), f"{rect} exceeds {canvas}"
        rows, cols = rect.to_slices()
        counts[rows, cols] += 1
    return counts


class TestComputeGeometry:
    """Tests for compute_geometry."""

    def test_matching_model_scale(self):
        """Test geometry when the model scale equals the requested scale."""
        geo = compute_geometry((64, 64), (128, 128), 2.0, 1 / 16)
        assert geo.scaled_output_tile_size == (128.0, 128.0)
        assert geo.scaled_input_tile_size == (64, 64)
        assert geo.input_overlap == (4, 4)
        assert geo.scaled_output_overlap == (8, 8)
        assert geo.scale == (2.0, 2.0)

    def test_model_scale_larger_than_requested(self):
        """Test that a 2x model driven at 1x samples a larger input extent."""
        geo = compute_geometry((64, 64), (128, 128), 1.0, 0.0)
        assert geo.scaled_output_tile_size == (64.0, 64.0)
        assert geo.scaled_input_tile_size == (128, 128)

    def test_cropping_model(self):
        """Test a model whose output is smaller than its scaled input."""
        geo = compute_geometry((64, 64), (56, 56), 1.0, 1 / 16)
        assert geo.scaled_input_tile_size == (56, 56)
        assert geo.input_overlap == (4, 4)
        assert geo.scaled_output_overlap == (4, 4)

    def test_independent_axes(self):
        """Test per-axis scale and overlap."""
        geo = compute_geometry((64, 32), (128, 96), (2.0, 3.0), (1 / 8, 1 / 16))
        assert geo.scaled_output_tile_size == (128.0, 96.0)
        assert geo.scaled_input_tile_size == (64, 32)
        assert geo.input_overlap == (8, 2)
        assert geo.scaled_output_overlap == (16, 6)

    def test_rounds_half_away_from_zero(self):
        """Test overlap rounding of exact halves."""
        # 20 * 0.125 = 2.5 -> 3
        geo = compute_geometry((20, 20), (20, 20), 1.0, 0.125)
        assert geo.input_overlap == (3, 3)

    @pytest.mark.parametrize("overlap", [-0.1, 0.5, 0.9])
    def test_invalid_overlap(self, overlap):
        """Test overlap outside [0, 0.5) raises InvalidGeometry."""
        with pytest.raises(InvalidGeometry, match="overlap"):
            compute_geometry((64, 64), (64, 64), 1.0, overlap)

    def test_invalid_scale(self):
        """Test non-positive scale raises InvalidGeometry."""
        with pytest.raises(InvalidGeometry, match="scale"):
            compute_geometry((64, 64), (64, 64), 0.0, 0.0)

    def test_invalid_tile_size(self):
        """Test non-positive tile sizes raise InvalidGeometry."""
        with pytest.raises(InvalidGeometry, match="tile sizes"):
            compute_geometry((0, 64), (64, 64), 1.0, 0.0)

    def test_invalid_geometry_is_value_error(self):
        """Test that geometry errors are also ValueErrors."""
        with pytest.raises(ValueError):
            compute_geometry((64, 64), (64, 64), -1.0, 0.0)


class TestGeometryPlannerInit:
    """Tests for GeometryPlanner construction."""

    def test_degenerate_input_tiling(self):
        """Test that a scaled input extent not exceeding the overlap is rejected."""
        # A 4x model used at 1/4 requested scale gives a tiny scaled input
        with pytest.raises(InvalidGeometry, match="must exceed"):
            GeometryPlanner((8, 8), (2, 2), scale=4.0, overlap=0.4)

    def test_valid_planner(self):
        """Test geometry is exposed on the planner."""
        planner = GeometryPlanner((64, 64), (128, 128), scale=2, overlap=1 / 16)
        assert planner.geometry.output_tile_size == (128, 128)


class TestTiling:
    """Tests for tile count computation."""

    def test_end_to_end_counts(self):
        """Test 256x256 canvas with 64px tiles and 4px overlap."""
        planner = GeometryPlanner((64, 64), (64, 64), scale=1, overlap=1 / 16)
        # ceil((256 - 4) / (64 - 4)) = 5 per axis
        assert planner.tiling(256, 256) == (5, 5)
        assert planner.tile_count(256, 256) == 25

    def test_exact_fit_without_overlap(self):
        """Test canvas that is an exact multiple of the tile size."""
        planner = GeometryPlanner((64, 64), (64, 64))
        assert planner.tiling(256, 128) == (4, 2)

    def test_small_canvas_gets_one_tile(self):
        """Test canvas smaller than one tile."""
        planner = GeometryPlanner((64, 64), (128, 128), scale=2, overlap=1 / 16)
        assert planner.tiling(10, 3) == (1, 1)

    def test_output_size(self):
        """Test canvas size with fractional scale."""
        planner = GeometryPlanner((64, 64), (96, 96), scale=1.5)
        assert planner.output_size(101, 33) == (152, 50)


class TestPlan:
    """Tests for GeometryPlanner.plan."""

    def test_plan_example(self):
        """Test tile rectangles for a 300x200 image at 2x."""
        planner = GeometryPlanner((64, 64), (128, 128), scale=2, overlap=1 / 16)
        grid = planner.plan(300, 200)

        assert grid.tiling == (5, 4)
        assert grid.tile_count == 20
        assert grid.input_rect == Rect(0, 0, 300, 200)
        assert grid.output_rect == Rect(0, 0, 600, 400)

        # Column-major: the first rows entries walk down the first column
        assert grid.input_rects[0] == Rect(0, 0, 64, 64)
        assert grid.input_rects[1] == Rect(0, 60, 64, 64)
        assert grid.input_rects[4] == Rect(60, 0, 64, 64)
        assert grid.output_rects[1] == Rect(0, 120, 128, 128)
        assert grid.output_rects[4] == Rect(120, 0, 128, 128)

        # Last tile is clipped to the canvas
        assert grid.output_rects[-1] == Rect(480, 360, 120, 40)
        assert grid.input_rects[-1] == Rect(240, 180, 64, 64)

    def test_input_rects_have_tile_size(self):
        """Test every sampling rectangle is exactly one input tile."""
        grid = plan_tiles(333, 77, (64, 64), (128, 128), 2.0, 1 / 8)
        for rect in grid.input_rects:
            assert (rect.width, rect.height) == (64, 64)

    def test_cropping_model_centers_input(self):
        """Test that a cropping model samples a centered, negative-origin input."""
        grid = plan_tiles(200, 200, (64, 64), (56, 56), 1.0, 1 / 16)
        assert grid.input_rects[0] == Rect(-4, -4, 64, 64)
        # Step is scaled input (56) minus overlap (4)
        assert grid.input_rects[1].y == -4 + 52

    @pytest.mark.parametrize("width,height", [(1, 1), (63, 65), (256, 256), (300, 200), (517, 389)])
    @pytest.mark.parametrize("scale", [1.0, 2.0])
    @pytest.mark.parametrize("overlap", [0.0, 1 / 32, 0.037, 0.041, 1 / 16, 1 / 8])
    def test_output_rects_cover_canvas(self, width, height, scale, overlap):
        """Test the output rectangles cover the canvas with no gaps."""
        out = int(64 * scale)
        grid = plan_tiles(width, height, (64, 64), (out, out), scale, overlap)
        counts = _coverage(grid)
        assert counts.min() >= 1

    def test_uneven_overlap_reaches_canvas_edge(self):
        """Test overlaps that round to 2px in and 5px out still cover the last column."""
        grid = plan_tiles(126, 10, (64, 64), (128, 128), 2.0, 0.037)

        # Output stride 123 is one pixel short of twice the input stride 62
        assert grid.tiling == (3, 1)
        assert grid.output_rects[1] == Rect(123, 0, 128, 20)
        assert grid.output_rects[2] == Rect(246, 0, 6, 20)
        assert grid.input_rects[2] == Rect(124, 0, 64, 64)
        assert _coverage(grid).min() == 1

    def test_uneven_overlap_on_wide_canvas(self):
        """Test overlaps that round to 3px in and 5px out plan without empty tiles."""
        grid = plan_tiles(61 * 130 + 3, 10, (64, 64), (128, 128), 2.0, 0.041)

        assert grid.output_rect == Rect(0, 0, 15866, 20)
        assert grid.tiling == (129, 1)
        assert grid.output_rects[-1] == Rect(15744, 0, 122, 20)
        assert _coverage(grid).min() >= 1

    def test_overlap_width_between_neighbours(self):
        """Test neighbouring output tiles share exactly the output overlap."""
        planner = GeometryPlanner((64, 64), (128, 128), scale=2, overlap=1 / 16)
        grid = planner.plan(300, 200)
        rows = grid.tiling[1]
        left, right = grid.output_rects[0], grid.output_rects[rows]
        assert left.x2 - right.x == planner.geometry.scaled_output_overlap[0]

    def test_no_overlap_has_single_coverage(self):
        """Test that without overlap every pixel is written exactly once."""
        grid = plan_tiles(200, 130, (64, 64), (64, 64), 1.0, 0.0)
        counts = _coverage(grid)
        assert counts.min() == 1
        assert counts.max() == 1

    def test_empty_canvas(self):
        """Test that an empty canvas is rejected."""
        planner = GeometryPlanner((64, 64), (64, 64))
        with pytest.raises(InvalidGeometry, match="non-empty"):
            planner.plan(0, 10)

    def test_model_scale_smaller_than_requested(self):
        """Test a 2x model driven at 4x samples half-size, centered input extents."""
        planner = GeometryPlanner((64, 64), (128, 128), scale=4.0, overlap=0.0)
        grid = planner.plan(64, 64)
        assert grid.tile_count == 4
        assert grid.output_rect == Rect(0, 0, 256, 256)
        assert grid.input_rects[0] == Rect(-16, -16, 64, 64)
        assert grid.input_rects[1] == Rect(-16, 16, 64, 64)
