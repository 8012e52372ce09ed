"""YAML configuration loading for the schedule import pipeline."""

from .loader import SCHEMA_PATH, ConfigError, default_config, load_config

__all__ = [
    "SCHEMA_PATH",
    "ConfigError",
    "default_config",
    "load_config",
]
