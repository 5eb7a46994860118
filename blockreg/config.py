"""Configuration loading and dotted-key access for blockreg."""

from pathlib import Path
from typing import Any

from .core.settings import find_config_file, load_settings

__all__ = [
    "config_get",
    "find_config_file",
    "load_config",
]


def _get_nested(d: dict, key: str, default=None):
    """Get a nested key like 'registry.url'."""
    parts = key.split(".")
    for part in parts:
        if isinstance(d, dict) and part in d:
            d = d[part]
        else:
            return default
    return d


def load_config(config_path: Path | None = None, start_dir: str | None = None) -> dict:
    """
    Load configuration from file.

    Args:
        config_path: Explicit path to config file
        start_dir: Directory to start searching from (if config_path not given)

    Returns:
        Configuration dict with defaults applied
    """
    settings = load_settings(config_path=config_path, start_dir=start_dir)
    return settings.to_dict()


def config_get(key: str, start_dir: str | None = None, default: Any = None) -> Any:
    """Get a config value."""
    config = load_config(start_dir=start_dir)
    return _get_nested(config, key, default)
