"""Shared utilities for the internet monitor."""

from .config import ConfigError, load_keyvalue_config, load_yaml_config
from .mqtt import MQTTConfig
from .logging import setup_logging

__all__ = [
    "ConfigError",
    "load_keyvalue_config",
    "load_yaml_config",
    "MQTTConfig",
    "setup_logging",
]
