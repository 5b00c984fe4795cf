"""Configuration for Podtally."""

from podtally.config.manager import ConfigManager
from podtally.config.schema import (
    FetchConfig,
    GlobalConfig,
    NumberingStrategy,
    ShowConfig,
    Shows,
)

__all__ = [
    "ConfigManager",
    "FetchConfig",
    "GlobalConfig",
    "NumberingStrategy",
    "ShowConfig",
    "Shows",
]
