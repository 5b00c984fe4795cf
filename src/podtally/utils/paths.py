"""Filesystem locations for Podtally configuration and data."""

import os
from pathlib import Path

import platformdirs

APP_NAME = "podtally"
CONFIG_DIR_ENV = "PODTALLY_CONFIG_DIR"


def get_config_dir() -> Path:
    """Return the configuration directory.

    ``PODTALLY_CONFIG_DIR`` takes precedence over the XDG config location.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path(platformdirs.user_config_dir(APP_NAME))


def get_data_dir() -> Path:
    """Return the data directory (episode database lives here by default)."""
    return Path(platformdirs.user_data_dir(APP_NAME))


def get_config_file() -> Path:
    return get_config_dir() / "config.yaml"


def get_shows_file() -> Path:
    return get_config_dir() / "shows.yaml"


def get_default_database_path() -> Path:
    return get_data_dir() / "podtally.db"
