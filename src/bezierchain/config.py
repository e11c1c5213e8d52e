"""
Configuration management for bezierchain.

Loads YAML configuration with defaults for sampling, hit-testing, the update
debouncer and tracing. Share-string precision is fixed by the wire format.
"""

import os
from dataclasses import asdict, dataclass, field

import yaml


@dataclass
class GeometryConfig:
    """Sample counts for the approximate geometry queries."""
    length_samples: int = 100
    nearest_samples: int = 100
    render_samples: int = 50


@dataclass
class HitTestConfig:
    """Pointer tolerances, in drawing units."""
    tolerance: float = 5.0
    anchor_radius: float = 8.0


@dataclass
class SchedulerConfig:
    """Configuration for the update debouncer."""
    delay_seconds: float = 0.3


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class AppConfig:
    """Complete configuration."""
    geometry: GeometryConfig = field(default_factory=GeometryConfig)
    hit_test: HitTestConfig = field(default_factory=HitTestConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)


SECTIONS = ("geometry", "hit_test", "scheduler", "tracing")


def load_config(config_path=None):
    """
    Load configuration from YAML file.

    Falls back to defaults for any missing values.
    """
    config = AppConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into config dataclass, ignoring unknown keys."""
    for section_name in SECTIONS:
        values = yaml_data.get(section_name)
        if not values:
            continue
        section = getattr(config, section_name)
        for key, value in values.items():
            if hasattr(section, key):
                setattr(section, key, value)

    return config


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    yaml_data = asdict(AppConfig())
    yaml_data["tracing"].pop("file_path")

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
