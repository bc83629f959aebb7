"""Pydantic models for Spotlight Remote configuration.

Nested section models use plain ``BaseModel``; only the top-level
:class:`SpotlightConfig` extends ``BaseSettings`` so that environment
variables such as ``SPOTLIGHT_RELAY__PORT`` can override file values.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


class RelaySection(BaseModel):
    """Broadcast relay server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=3001, ge=1, le=65535)
    path: str = "/"
    send_queue_size: int = Field(default=32, ge=1)


class ClientSection(BaseModel):
    """Controller / presentation client settings."""

    relay_url: str = "ws://localhost:3001/"
    sensor_mode: Literal["orientation", "acceleration"] = "orientation"
    sensitivity: float = Field(default=2.0, gt=0)
    ease: float = Field(default=0.15, gt=0, lt=1)
    sample_interval_ms: int = Field(default=32, gt=0)
    publish_interval_ms: int = Field(default=100, gt=0)
    frame_rate: int = Field(default=60, gt=0)
    calibration_attempts: int = Field(default=3, ge=1)
    send_queue_size: int = Field(default=64, ge=1)
    include_diagnostics: bool = True

    @property
    def sample_interval(self) -> float:
        """Sampling throttle interval in seconds."""
        return self.sample_interval_ms / 1000

    @property
    def publish_interval(self) -> float:
        """Publish throttle interval in seconds."""
        return self.publish_interval_ms / 1000


class DisplaySection(BaseModel):
    """Size of the display this client renders on."""

    width: int = Field(default=1920, gt=0)
    height: int = Field(default=1080, gt=0)


class LoggingSection(BaseModel):
    """Logging settings."""

    level: str = "info"
    file: str = ""

    def get_log_path(self) -> Path | None:
        """Return the resolved log file path, or ``None`` when disabled."""
        return Path(self.file).expanduser() if self.file else None


class SpotlightConfig(BaseSettings):
    """Top-level Spotlight Remote configuration model.

    Maps to the TOML structure:
        [relay] / [client] / [display] / [logging]

    All fields are optional with sensible defaults. Config file lives at
    ``~/.config/spotlight/config.toml``.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPOTLIGHT_",
        env_nested_delimiter="__",
    )

    relay: RelaySection = Field(default_factory=RelaySection)
    client: ClientSection = Field(default_factory=ClientSection)
    display: DisplaySection = Field(default_factory=DisplaySection)
    logging: LoggingSection = Field(default_factory=LoggingSection)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment wins over values loaded from the TOML file.
        return env_settings, init_settings, file_secret_settings
