"""Tests for RenderConfig."""

import pytest

from tilesr.config.render_config import RenderConfig
from tilesr.errors import InvalidGeometry


class TestRenderConfigDefaults:
    """Tests for default values."""

    def test_default_values(self):
        """Test that defaults are correct."""
        config = RenderConfig()
        assert config.tile_size == 256
        assert config.output_tile_size is None
        assert config.scale == 2.0
        assert config.overlap == pytest.approx(1 / 16)
        assert config.tta is False
        assert config.batch_size == 1
        assert config.channels == 3

    def test_default_classmethod(self):
        """Test default() matches the constructor."""
        assert RenderConfig.default() == RenderConfig()


class TestRenderConfigProperties:
    """Tests for derived properties."""

    def test_square_tile(self):
        """Test scalar tile size."""
        config = RenderConfig(tile_size=64)
        assert (config.tile_width, config.tile_height) == (64, 64)
        assert config.input_tile_shape == (64, 64, 3)
        assert config.output_tile_shape is None

    def test_rectangular_tile(self):
        """Test (width, height) tile size gives an (H, W, C) shape."""
        config = RenderConfig(tile_size=(64, 32), output_tile_size=(128, 64))
        assert config.input_tile_shape == (32, 64, 3)
        assert config.output_tile_shape == (64, 128, 3)

    def test_pairs(self):
        """Test scale and overlap expand to (x, y) pairs."""
        config = RenderConfig(scale=(2.0, 3.0), overlap=0.125)
        assert config.scale_xy == (2.0, 3.0)
        assert config.overlap_xy == (0.125, 0.125)

    def test_overlapping(self):
        """Test overlapping flag."""
        assert RenderConfig().overlapping
        assert not RenderConfig(overlap=0).overlapping

    def test_lists_become_tuples(self):
        """Test YAML-style lists are normalized."""
        config = RenderConfig(tile_size=[64, 32], scale=[2, 2])
        assert config.tile_size == (64, 32)
        assert config.scale == (2, 2)


class TestRenderConfigValidation:
    """Tests for validation."""

    @pytest.mark.parametrize("overlap", [-0.01, 0.5, 1.0, (0.1, 0.6)])
    def test_invalid_overlap(self, overlap):
        """Test overlap must be in [0, 0.5)."""
        with pytest.raises(InvalidGeometry, match="overlap"):
            RenderConfig(overlap=overlap)

    def test_invalid_tile_size(self):
        """Test tile size must be positive."""
        with pytest.raises(InvalidGeometry, match="tile_size"):
            RenderConfig(tile_size=0)

    def test_invalid_output_tile_size(self):
        """Test output tile size must be positive."""
        with pytest.raises(InvalidGeometry, match="output_tile_size"):
            RenderConfig(output_tile_size=(0, 10))

    def test_invalid_scale(self):
        """Test scale must be positive."""
        with pytest.raises(InvalidGeometry, match="scale"):
            RenderConfig(scale=-2)

    def test_invalid_batch_size(self):
        """Test batch size must be at least one."""
        with pytest.raises(InvalidGeometry, match="batch_size"):
            RenderConfig(batch_size=0)

    def test_invalid_pair_length(self):
        """Test pairs must have two values."""
        with pytest.raises(InvalidGeometry, match="pair"):
            RenderConfig(scale=(1.0, 2.0, 3.0))


class TestRenderConfigSerialization:
    """Tests for dict and YAML round trips."""

    def test_to_dict(self):
        """Test tuples serialize as lists."""
        data = RenderConfig(tile_size=(64, 32), tta=True, batch_size=4).to_dict()
        assert data["tile_size"] == [64, 32]
        assert data["tta"] is True
        assert data["batch_size"] == 4

    def test_from_dict_partial(self):
        """Test missing keys fall back to defaults."""
        config = RenderConfig.from_dict({"tile_size": 64, "tta": True})
        assert config.tile_size == 64
        assert config.tta is True
        assert config.scale == 2.0

    def test_from_yaml_render_section(self, tmp_path):
        """Test loading a YAML file with a render section."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "render:\n"
            "  tile_size: 64\n"
            "  scale: 4\n"
            "  overlap: 0.125\n"
            "  batch_size: 8\n"
            "  tta: true\n"
        )
        config = RenderConfig.from_yaml(str(path))
        assert config.tile_size == 64
        assert config.scale == 4
        assert config.overlap == 0.125
        assert config.batch_size == 8
        assert config.tta is True

    def test_from_yaml_flat(self, tmp_path):
        """Test loading a flat YAML file."""
        path = tmp_path / "config.yaml"
        path.write_text("tile_size: [64, 32]\n")
        config = RenderConfig.from_yaml(str(path))
        assert config.input_tile_shape == (32, 64, 3)

    def test_from_yaml_empty(self, tmp_path):
        """Test an empty YAML file gives defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert RenderConfig.from_yaml(str(path)) == RenderConfig()

    def test_from_yaml_invalid_values(self, tmp_path):
        """Test invalid values in YAML are rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("render:\n  overlap: 0.75\n")
        with pytest.raises(InvalidGeometry):
            RenderConfig.from_yaml(str(path))
