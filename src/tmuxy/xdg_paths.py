"""XDG-compliant path management for tmuxy."""

import os
from pathlib import Path

from xdg_base_dirs import xdg_config_home

APP_NAME = "tmuxy"
CONFIG_ENV_VAR = "TMUXY_CONFIG"


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    return xdg_config_home() / APP_NAME


def get_config_file_path() -> Path:
    """Get the config.yaml file path.

    The ``TMUXY_CONFIG`` environment variable takes precedence over the XDG location.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return get_config_dir() / "config.yaml"
