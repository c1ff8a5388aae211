"""Configuration loading."""

from tandem.config.loader import CONFIG_FILENAME, find_config, load_config
from tandem.config.schema import CommandDefaults, ScriptConfig, TandemConfig

__all__ = [
    "CONFIG_FILENAME",
    "CommandDefaults",
    "ScriptConfig",
    "TandemConfig",
    "find_config",
    "load_config",
]
