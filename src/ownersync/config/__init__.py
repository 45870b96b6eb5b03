"""Configuration loading, schema, and defaults."""

from ownersync.config.loader import ConfigError, load_config, validate_config
from ownersync.config.schema import OwnersyncConfig

__all__ = [
    "ConfigError",
    "OwnersyncConfig",
    "load_config",
    "validate_config",
]
