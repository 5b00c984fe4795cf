"""Utility functions and helpers for Podtally."""

from podtally.utils.errors import (
    ConfigError,
    ConfigNotFoundError,
    DuplicateShowError,
    FeedError,
    FeedParseError,
    FeedUnavailableError,
    InvalidConfigError,
    PodtallyError,
    ShowError,
    ShowNotFoundError,
    StoreError,
)
from podtally.utils.paths import (
    get_config_dir,
    get_config_file,
    get_data_dir,
    get_default_database_path,
    get_shows_file,
)

__all__ = [
    # Errors
    "ConfigError",
    "ConfigNotFoundError",
    "DuplicateShowError",
    "FeedError",
    "FeedParseError",
    "FeedUnavailableError",
    "InvalidConfigError",
    "PodtallyError",
    "ShowError",
    "ShowNotFoundError",
    "StoreError",
    # Paths
    "get_config_dir",
    "get_config_file",
    "get_data_dir",
    "get_default_database_path",
    "get_shows_file",
]
