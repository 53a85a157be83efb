"""Tests for tile extraction with replicate padding."""

import numpy as np
import pytest

from tilesr.errors import InvalidRegion
from tilesr.tiling.models import Rect
from tilesr.tiling.sampling import border_padding, extract_tile


@pytest.fixture
def image():
    """100x100 RGB float image with a distinct value per pixel."""
    ys, xs = np.mgrid[0:100, 0:100].astype(np.float32)
    img = np.zeros((100, 100, 3), dtype=np.float32)
    img[:, :, 0] = xs / 100
    img[:, :, 1] = ys / 100
    img[:, :, 2] = (xs + ys) / 200
    return img


class TestBorderPadding:
    """Tests for border_padding."""

    def test_inside(self):
        """Test no padding for a rectangle inside the image."""
        assert border_padding(Rect(10, 10, 20, 20), 100, 100) == (0, 0, 0, 0)

    def test_all_sides(self):
        """Test padding on every side."""
        assert border_padding(Rect(-3, -4, 110, 120), 100, 100) == (4, 16, 3, 7)


class TestExtractTile:
    """Tests for extract_tile."""

    def test_inside_returns_region(self, image):
        """Test a rectangle fully inside the image."""
        tile = extract_tile(image, Rect(10, 20, 30, 40))
        assert tile.shape == (40, 30, 3)
        np.testing.assert_array_equal(tile, image[20:60, 10:40])

    def test_right_edge_replicates_last_column(self, image):
        """Test a rectangle extending 5px past the right edge."""
        tile = extract_tile(image, Rect(98, 0, 7, 100))
        assert tile.shape == (100, 7, 3)
        np.testing.assert_array_equal(tile[:, :2], image[:, 98:100])
        for col in range(2, 7):
            np.testing.assert_array_equal(tile[:, col], image[:, 99])

    def test_full_width_tile_past_right_edge(self, image):
        """Test a 100-wide tile whose last 5 columns fall outside the image."""
        tile = extract_tile(image, Rect(5, 0, 100, 100))
        assert tile.shape == (100, 100, 3)
        np.testing.assert_array_equal(tile[:, :95], image[:, 5:])
        for col in range(95, 100):
            np.testing.assert_array_equal(tile[:, col], image[:, 99])

    def test_negative_origin(self, image):
        """Test replicate padding above and left of the image."""
        tile = extract_tile(image, Rect(-4, -4, 16, 16))
        assert tile.shape == (16, 16, 3)
        np.testing.assert_array_equal(tile[4:, 4:], image[:12, :12])
        # Corner padding repeats the corner pixel
        np.testing.assert_array_equal(tile[0, 0], image[0, 0])
        np.testing.assert_array_equal(tile[2, 7], image[0, 3])
        np.testing.assert_array_equal(tile[7, 2], image[3, 0])

    def test_tile_larger_than_image(self):
        """Test a tile bigger than the whole image on every side."""
        small = np.arange(12, dtype=np.float32).reshape(2, 2, 3)
        tile = extract_tile(small, Rect(-3, -3, 8, 8))
        assert tile.shape == (8, 8, 3)
        np.testing.assert_array_equal(tile[0, 0], small[0, 0])
        np.testing.assert_array_equal(tile[7, 7], small[1, 1])

    def test_single_channel_keeps_channel_axis(self):
        """Test that padded single-channel tiles stay 3-D."""
        gray = np.ones((10, 10, 1), dtype=np.float32)
        tile = extract_tile(gray, Rect(5, 5, 10, 10))
        assert tile.shape == (10, 10, 1)

    def test_uint8_image(self):
        """Test that integral images are padded too."""
        img = np.full((10, 10, 3), 200, dtype=np.uint8)
        tile = extract_tile(img, Rect(-2, 0, 12, 10))
        assert tile.dtype == np.uint8
        assert (tile == 200).all()

    def test_no_overlap_raises(self, image):
        """Test a rectangle entirely outside the image."""
        with pytest.raises(InvalidRegion, match="does not overlap"):
            extract_tile(image, Rect(100, 0, 10, 10))

    def test_empty_rect_raises(self, image):
        """Test an empty rectangle."""
        with pytest.raises(InvalidRegion, match="empty"):
            extract_tile(image, Rect(0, 0, 0, 10))
