"""Tests for configuration loading and validation."""

import os

import pytest
import yaml


class TestLoadConfig:
    """Tests for YAML loading and merging."""

    def test_defaults_without_file(self):
        from voromosaic.config import load_config

        config = load_config(None)

        assert config.seed.density == 100.0
        assert config.seed.value == "12345"
        assert config.seed.strategy == "aspect"
        assert config.color.mode == "seedPoint"
        assert config.cell_render.algorithm == "none"
        assert config.svg.show_cells is True

    def test_missing_file_uses_defaults(self, temp_dir):
        from voromosaic.config import load_config

        config = load_config(os.path.join(temp_dir, "nope.yaml"))

        assert config.seed.density == 100.0

    def test_partial_override(self, temp_dir):
        from voromosaic.config import load_config

        path = os.path.join(temp_dir, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump({
                "seed": {"density": 250, "value": "abc"},
                "cell_render": {"combine_same_color_cells": True, "algorithm": "vw"},
                "unknown_section": {"x": 1},
            }, f)

        config = load_config(path)

        assert config.seed.density == 250
        assert config.seed.value == "abc"
        assert config.seed.strategy == "aspect"
        assert config.cell_render.combine_same_color_cells is True
        assert config.cell_render.algorithm == "vw"
        assert config.cell_render.strength == 0.0

    def test_unknown_keys_ignored(self, temp_dir):
        from voromosaic.config import load_config

        path = os.path.join(temp_dir, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump({"svg": {"scale": 2.0, "bogus": True}}, f)

        config = load_config(path)

        assert config.svg.scale == 2.0
        assert not hasattr(config.svg, "bogus")

    def test_empty_file(self, temp_dir):
        from voromosaic.config import load_config

        path = os.path.join(temp_dir, "empty.yaml")
        open(path, "w").close()

        assert load_config(path).seed.density == 100.0

    def test_save_default_round_trip(self, temp_dir):
        from voromosaic.config import PipelineConfig, load_config, save_default_config

        path = os.path.join(temp_dir, "default.yaml")
        save_default_config(path)

        assert load_config(path) == PipelineConfig()


class TestValidateConfig:
    """Tests for validate_config."""

    def test_defaults_are_valid(self, default_config):
        from voromosaic.config import validate_config

        assert validate_config(default_config) is default_config

    @pytest.mark.parametrize("section,attr,value", [
        ("seed", "density", 0),
        ("seed", "density", -10),
        ("seed", "strategy", "square"),
        ("color", "mode", "median"),
        ("color", "render_scale", 0),
        ("color", "render_scale", 1.5),
        ("cell_render", "algorithm", "douglas"),
        ("cell_render", "strength", 1.5),
        ("cell_render", "strength", -0.1),
        ("cell_render", "min_path_size01", 2),
        ("cell_render", "merge_tolerance", 0),
        ("svg", "seed_point_radius_fraction", 1.1),
        ("svg", "voronoi_line_width_fraction", -0.5),
        ("svg", "scale", 0),
    ])
    def test_invalid_values(self, default_config, section, attr, value):
        from voromosaic.config import ConfigError, validate_config

        setattr(getattr(default_config, section), attr, value)

        with pytest.raises(ConfigError):
            validate_config(default_config)

    def test_error_is_value_error(self, default_config):
        from voromosaic.config import validate_config

        default_config.seed.density = 0

        with pytest.raises(ValueError, match="density"):
            validate_config(default_config)

    def test_accepts_enum_members(self, default_config):
        from voromosaic.config import validate_config
        from voromosaic.models import SeedStrategy, SimplifyAlgorithm

        default_config.seed.strategy = SeedStrategy.MAX_ASPECT
        default_config.cell_render.algorithm = SimplifyAlgorithm.RW

        validate_config(default_config)

    def test_sampling_checks_skip_render_and_svg(self, default_config):
        from voromosaic.config import ConfigError, validate_sampling_config

        default_config.cell_render.min_path_size01 = 1.5
        default_config.svg.scale = 0
        assert validate_sampling_config(default_config) is default_config

        default_config.color.render_scale = 0
        with pytest.raises(ConfigError, match="render scale"):
            validate_sampling_config(default_config)
