"""Configuration manager for reading/writing Spotlight Remote config files."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from spotlight_remote.config.defaults import DEFAULT_CONFIG
from spotlight_remote.config.schema import SpotlightConfig

logger = logging.getLogger(__name__)

_CONFIG_DIR = Path("~/.config/spotlight").expanduser()
_CONFIG_FILE = "config.toml"


class ConfigManager:
    """Manages reading, writing, and locating the Spotlight Remote config file.

    The config lives at ``~/.config/spotlight/config.toml``.  If the file
    does not exist, :meth:`load` returns a :class:`SpotlightConfig`
    populated entirely from defaults (plus any environment overrides).
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        self._config_dir = config_dir or _CONFIG_DIR

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self) -> SpotlightConfig:
        """Load configuration from disk, falling back to defaults.

        Returns:
            Fully populated :class:`SpotlightConfig` instance.

        Raises:
            pydantic.ValidationError: If the file holds out-of-range values.
        """
        path = self.get_config_path()
        if not path.is_file():
            logger.debug("Config file not found at %s, using defaults", path)
            return SpotlightConfig()

        try:
            with open(path, "rb") as fh:
                raw = tomllib.load(fh)
        except (tomllib.TOMLDecodeError, OSError) as exc:
            logger.warning("Failed to read config at %s: %s (using defaults)", path, exc)
            return SpotlightConfig()

        merged = _deep_merge(DEFAULT_CONFIG, raw)
        return SpotlightConfig(**merged)

    def save(self, config: SpotlightConfig) -> None:
        """Persist configuration to disk as TOML.

        Args:
            config: The configuration to write.
        """
        path = self.get_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "wb") as fh:
            tomli_w.dump(config.model_dump(), fh)

        logger.debug("Config saved to %s", path)

    def exists(self) -> bool:
        """Return ``True`` if the config file exists on disk."""
        return self.get_config_path().is_file()

    def get_config_path(self) -> Path:
        """Return the full path to the config TOML file."""
        return self._config_dir / _CONFIG_FILE


# ------------------------------------------------------------------
# Dotted-key helpers (used by ``spotlight config get/set``)
# ------------------------------------------------------------------


def get_value(config: SpotlightConfig, key: str) -> Any:
    """Return the value at dotted *key* (e.g. ``client.ease``).

    Raises:
        KeyError: If the section or field does not exist.
    """
    section_name, _, field_name = key.partition(".")
    data = config.model_dump()
    if section_name not in data or field_name not in data[section_name]:
        raise KeyError(key)
    return data[section_name][field_name]


def set_value(config: SpotlightConfig, key: str, value: str) -> SpotlightConfig:
    """Return a new config with dotted *key* set to *value*.

    *value* is coerced by pydantic validation, so ``"3002"`` becomes an
    int for ``relay.port`` and ``"false"`` a bool for boolean fields.

    Raises:
        KeyError: If the section or field does not exist.
        pydantic.ValidationError: If *value* is invalid for the field.
    """
    get_value(config, key)
    section_name, _, field_name = key.partition(".")
    data = config.model_dump()
    data[section_name][field_name] = value
    return SpotlightConfig(**data)


def _deep_merge(base: dict[str, object], override: dict[str, object]) -> dict[str, object]:
    """Recursively merge *override* into a copy of *base*.

    Keys in *override* take precedence.  Nested dicts are merged rather
    than replaced so that partial TOML sections work correctly.
    """
    merged: dict[str, object] = {}
    for key in {*base, *override}:
        base_val = base.get(key)
        over_val = override.get(key)
        if isinstance(base_val, dict) and isinstance(over_val, dict):
            merged[key] = _deep_merge(base_val, over_val)  # type: ignore[arg-type]
        elif key in override:
            merged[key] = over_val
        else:
            merged[key] = base_val
    return merged
