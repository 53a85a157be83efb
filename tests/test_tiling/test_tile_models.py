"""Tests for tiling data models."""

import pytest

from tilesr.tiling.models import Rect, TileGeometry, TileGrid, PendingEntry


class TestRect:
    """Tests for Rect dataclass."""

    def test_edges_and_area(self):
        """Test derived edges and area."""
        rect = Rect(x=10, y=20, width=30, height=40)
        assert rect.x2 == 40
        assert rect.y2 == 60
        assert rect.area == 1200
        assert rect.is_empty is False

    def test_empty_rect(self):
        """Test that zero or negative sizes are empty."""
        assert Rect(0, 0, 0, 10).is_empty
        assert Rect(0, 0, 10, -1).is_empty
        assert Rect(0, 0, -5, -5).area == 0

    def test_intersection_overlapping(self):
        """Test intersection of overlapping rectangles."""
        a = Rect(0, 0, 100, 100)
        b = Rect(50, 60, 100, 100)
        assert a.intersection(b) == Rect(50, 60, 50, 40)

    def test_intersection_with_negative_origin(self):
        """Test intersection of a rectangle starting left of the image."""
        image = Rect(0, 0, 64, 64)
        tile = Rect(-8, -8, 32, 32)
        assert tile.intersection(image) == Rect(0, 0, 24, 24)

    def test_intersection_disjoint(self):
        """Test that disjoint rectangles give an empty intersection."""
        a = Rect(0, 0, 10, 10)
        b = Rect(20, 20, 10, 10)
        assert a.intersection(b).is_empty

    def test_contains(self):
        """Test containment."""
        outer = Rect(0, 0, 100, 100)
        assert outer.contains(Rect(0, 0, 100, 100))
        assert outer.contains(Rect(10, 10, 20, 20))
        assert not outer.contains(Rect(90, 90, 20, 20))
        assert not outer.contains(Rect(-1, 0, 10, 10))

    def test_to_slices(self):
        """Test numpy slices are (rows, cols)."""
        rows, cols = Rect(5, 10, 20, 30).to_slices()
        assert rows == slice(10, 40)
        assert cols == slice(5, 25)

    def test_frozen(self):
        """Test that Rect is immutable."""
        rect = Rect(0, 0, 1, 1)
        with pytest.raises(AttributeError):
            rect.x = 5

    def test_to_dict(self):
        """Test serialization."""
        assert Rect(1, 2, 3, 4).to_dict() == {"x": 1, "y": 2, "width": 3, "height": 4}


class TestTileGeometry:
    """Tests for TileGeometry dataclass."""

    def _geometry(self, overlap):
        return TileGeometry(
            input_tile_size=(64, 64),
            output_tile_size=(128, 128),
            scaled_output_tile_size=(128.0, 128.0),
            scaled_input_tile_size=(64, 64),
            input_overlap=overlap,
            scaled_output_overlap=(overlap[0] * 2, overlap[1] * 2),
            scale=(2.0, 2.0),
        )

    def test_overlapping(self):
        """Test overlap detection."""
        assert self._geometry((4, 4)).overlapping is True
        assert self._geometry((0, 0)).overlapping is False

    def test_to_dict(self):
        """Test serialization uses lists."""
        data = self._geometry((4, 4)).to_dict()
        assert data["input_tile_size"] == [64, 64]
        assert data["scaled_output_overlap"] == [8, 8]
        assert data["scale"] == [2.0, 2.0]


class TestTileGrid:
    """Tests for TileGrid dataclass."""

    def test_tile_count(self):
        """Test tile count follows output rects."""
        grid = TileGrid(
            tiling=(2, 1),
            input_rect=Rect(0, 0, 100, 50),
            output_rect=Rect(0, 0, 200, 100),
            input_rects=[Rect(0, 0, 64, 64), Rect(48, 0, 64, 64)],
            output_rects=[Rect(0, 0, 128, 100), Rect(96, 0, 104, 100)],
        )
        assert grid.tile_count == 2
        assert len(grid) == 2

    def test_to_dict(self):
        """Test serialization pairs input and output rects."""
        grid = TileGrid(
            tiling=(1, 1),
            input_rect=Rect(0, 0, 10, 10),
            output_rect=Rect(0, 0, 20, 20),
            input_rects=[Rect(0, 0, 16, 16)],
            output_rects=[Rect(0, 0, 20, 20)],
        )
        data = grid.to_dict()
        assert data["tiling"] == [1, 1]
        assert data["tile_count"] == 1
        assert data["tiles"][0]["index"] == 0
        assert data["tiles"][0]["input"]["width"] == 16
        assert data["tiles"][0]["output"]["width"] == 20


class TestPendingEntry:
    """Tests for PendingEntry."""

    def test_fields(self):
        """Test named fields and tuple equality."""
        entry = PendingEntry(tile_index=3, augmentation_index=5)
        assert entry.tile_index == 3
        assert entry.augmentation_index == 5
        assert entry == (3, 5)
