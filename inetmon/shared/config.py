"""Configuration loading utilities."""

import os
from pathlib import Path
from typing import Dict, Optional, Union

import yaml
from dotenv import dotenv_values

# Characters a shell would interpret; values are later passed to external tools.
UNSAFE_CHARACTERS = set(";&|<>")


class ConfigError(ValueError):
    """Raised when a configuration file or value is invalid."""

    pass


def is_yaml_path(config_path: Union[str, Path]) -> bool:
    """Return True if the path names a YAML file."""
    return Path(config_path).suffix.lower() in (".yaml", ".yml")


def load_yaml_config(config_path: Union[str, Path]) -> dict:
    """Load YAML configuration file.

    Args:
        config_path: Path to config file.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigError: If config file is invalid YAML or not a mapping.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a mapping: {config_path}")
    return data


def load_keyvalue_config(config_path: Union[str, Path]) -> Dict[str, str]:
    """Load a ``KEY=VALUE`` configuration file.

    Blank lines and ``#`` comments are ignored and surrounding quotes are
    stripped. Values containing shell metacharacters are rejected.

    Args:
        config_path: Path to config file.

    Returns:
        Dictionary of raw string values keyed by upper-case name.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigError: If a value contains unsafe characters.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    values = {}
    for key, value in dotenv_values(config_path).items():
        if value is None:
            continue
        if UNSAFE_CHARACTERS & set(value):
            raise ConfigError(f"Invalid characters in configuration file: {config_path} ({key})")
        values[key.strip().upper()] = value.strip()
    return values


def get_log_level(config: dict) -> str:
    """Extract log level from config, with sensible default.

    Args:
        config: Configuration dictionary.

    Returns:
        Log level string (e.g., 'INFO', 'DEBUG').
    """
    return str(config.get("log_level", "INFO")).upper()


def resolve_config_path(
    config_path: Optional[Union[str, Path]],
    env_var: str,
    default: Union[str, Path],
) -> Path:
    """Pick the config file: explicit path, then environment variable, then default."""
    if config_path is None:
        config_path = os.environ.get(env_var) or default
    return Path(config_path)
