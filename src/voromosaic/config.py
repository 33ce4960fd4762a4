"""
Configuration management for voromosaic.

Loads YAML configuration with sensible defaults for every pipeline stage and
validates it before any geometry work starts.
"""

import os
from dataclasses import asdict, dataclass, field, fields

import yaml

from voromosaic.models import ColorMode, SeedStrategy, SimplifyAlgorithm


class ConfigError(ValueError):
    """Raised when a configuration value is out of range or unknown."""


@dataclass
class SeedConfig:
    """Configuration for seed generation."""
    density: float = 100.0  # seeds per normalized area unit
    value: str = "12345"
    strategy: str = "aspect"  # "aspect" or "maxAspect"


@dataclass
class ColorConfig:
    """Configuration for cell color sampling."""
    mode: str = "seedPoint"  # "seedPoint" or "cellAverage"
    render_scale: float = 1.0  # cellAverage samples every round(1/scale) pixels


@dataclass
class CellRenderConfig:
    """Configuration for the cell render filter, merge and simplification."""
    black_and_white_cells: bool = False
    skip_white_cells: bool = False
    combine_same_color_cells: bool = False
    algorithm: str = "none"  # "none", "rdp", "vw" or "rw"
    strength: float = 0.0
    size_compensation: bool = False
    min_path_size01: float = 0.0  # fraction of min(image width, height)
    merge_tolerance: float = 1e-6


@dataclass
class SvgConfig:
    """Configuration for SVG export. Fractions are of min(image width, height)."""
    show_original: bool = False
    show_cells: bool = True
    show_voronoi: bool = True
    show_seeds: bool = False
    voronoi_line_color: str = "#000000"
    voronoi_line_width_fraction: float = 0.002
    seed_point_color: str = "#ff0000"
    seed_point_radius_fraction: float = 0.002
    scale: float = 1.0


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class PipelineConfig:
    """Complete pipeline configuration."""
    seed: SeedConfig = field(default_factory=SeedConfig)
    color: ColorConfig = field(default_factory=ColorConfig)
    cell_render: CellRenderConfig = field(default_factory=CellRenderConfig)
    svg: SvgConfig = field(default_factory=SvgConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)


def load_config(config_path=None):
    """
    Load configuration from YAML file.

    Falls back to defaults for any missing values. Unknown keys are ignored.
    """
    config = PipelineConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into config dataclass."""
    for section in fields(config):
        values = yaml_data.get(section.name)
        if not isinstance(values, dict):
            continue
        target = getattr(config, section.name)
        for key, value in values.items():
            if hasattr(target, key):
                setattr(target, key, value)

    return config


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    yaml_data = asdict(PipelineConfig())

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)


def _check_token(value, enum_cls, name):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = "|".join(m.value for m in enum_cls)
        raise ConfigError(f"Invalid {name}: {value!r} (expected {allowed})") from None


def _check_fraction(value, name):
    if not 0 <= value <= 1:
        raise ConfigError(f"{name} must be in [0, 1], got {value}")


def validate_sampling_config(config):
    """
    Check the seed and color sections, the only ones run_pipeline reads.

    Raises ConfigError describing the first offending value.
    """
    if config.seed.density <= 0:
        raise ConfigError(f"seed density must be > 0, got {config.seed.density}")
    _check_token(config.seed.strategy, SeedStrategy, "seed strategy")

    _check_token(config.color.mode, ColorMode, "color mode")
    if not 0 < config.color.render_scale <= 1:
        raise ConfigError(f"render scale must be in (0, 1], got {config.color.render_scale}")

    return config


def validate_config(config):
    """
    Reject invalid configuration before any geometry work begins.

    Covers every section; the CLI runs this before loading the image.
    Raises ConfigError describing the first offending value.
    """
    validate_sampling_config(config)

    render = config.cell_render
    _check_token(render.algorithm, SimplifyAlgorithm, "path simplification algorithm")
    _check_fraction(render.strength, "path simplification strength")
    _check_fraction(render.min_path_size01, "path simplification min path size")
    if render.merge_tolerance <= 0:
        raise ConfigError(f"merge tolerance must be > 0, got {render.merge_tolerance}")

    _check_fraction(config.svg.seed_point_radius_fraction, "seed point radius")
    _check_fraction(config.svg.voronoi_line_width_fraction, "voronoi line width")
    if config.svg.scale <= 0:
        raise ConfigError(f"output scale must be > 0, got {config.svg.scale}")

    return config
