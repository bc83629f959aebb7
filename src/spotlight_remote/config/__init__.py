"""Spotlight Remote configuration system."""

from spotlight_remote.config.manager import ConfigManager
from spotlight_remote.config.schema import SpotlightConfig

__all__ = ["ConfigManager", "SpotlightConfig"]
