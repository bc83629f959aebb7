"""Tests for configuration schema, defaults, and the TOML-backed manager."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from spotlight_remote.config import ConfigManager, SpotlightConfig
from spotlight_remote.config.defaults import DEFAULT_CONFIG
from spotlight_remote.config.manager import _deep_merge, get_value, set_value
from spotlight_remote.config.schema import ClientSection, LoggingSection


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("SPOTLIGHT_RELAY__PORT", "SPOTLIGHT_CLIENT__EASE"):
        monkeypatch.delenv(key, raising=False)


class TestSchema:
    def test_defaults_match_default_config(self) -> None:
        assert SpotlightConfig().model_dump() == DEFAULT_CONFIG

    def test_interval_properties(self) -> None:
        client = ClientSection()
        assert client.sample_interval == pytest.approx(0.032)
        assert client.publish_interval == pytest.approx(0.1)

    @pytest.mark.parametrize(
        "client",
        [
            {"ease": 1.5},
            {"ease": 0},
            {"sensitivity": -1},
            {"sensor_mode": "gps"},
            {"calibration_attempts": 0},
        ],
    )
    def test_invalid_client_values(self, client: dict) -> None:
        with pytest.raises(ValidationError):
            SpotlightConfig(client=client)

    def test_invalid_port(self) -> None:
        with pytest.raises(ValidationError):
            SpotlightConfig(relay={"port": 70000})

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPOTLIGHT_RELAY__PORT", "4001")
        assert SpotlightConfig().relay.port == 4001

    def test_env_beats_file_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPOTLIGHT_CLIENT__EASE", "0.2")
        config = SpotlightConfig(**_deep_merge(DEFAULT_CONFIG, {"client": {"ease": 0.1}}))
        assert config.client.ease == 0.2

    def test_log_path(self) -> None:
        assert LoggingSection().get_log_path() is None
        assert LoggingSection(file="~/spot.log").get_log_path() == Path("~/spot.log").expanduser()


class TestConfigManager:
    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        manager = ConfigManager(tmp_path)
        assert not manager.exists()
        assert manager.load() == SpotlightConfig()

    def test_partial_section_merged(self, tmp_path: Path) -> None:
        (tmp_path / "config.toml").write_text("[client]\nease = 0.2\n")
        config = ConfigManager(tmp_path).load()
        assert config.client.ease == 0.2
        assert config.client.sensitivity == 2.0
        assert config.relay.port == 3001

    def test_bad_toml_falls_back(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        (tmp_path / "config.toml").write_text("[client\nease = ")
        with caplog.at_level("WARNING", logger="spotlight_remote.config.manager"):
            config = ConfigManager(tmp_path).load()
        assert config == SpotlightConfig()
        assert "using defaults" in caplog.text

    def test_invalid_values_raise(self, tmp_path: Path) -> None:
        (tmp_path / "config.toml").write_text("[client]\nease = 3.0\n")
        with pytest.raises(ValidationError):
            ConfigManager(tmp_path).load()

    def test_save_and_reload(self, tmp_path: Path) -> None:
        manager = ConfigManager(tmp_path / "nested")
        config = SpotlightConfig(relay={"port": 4100}, display={"width": 1280, "height": 720})
        manager.save(config)

        assert manager.exists()
        loaded = manager.load()
        assert loaded.relay.port == 4100
        assert loaded.display.width == 1280

    def test_config_path(self, tmp_path: Path) -> None:
        assert ConfigManager(tmp_path).get_config_path() == tmp_path / "config.toml"


class TestDottedKeys:
    def test_get_value(self) -> None:
        assert get_value(SpotlightConfig(), "client.sensitivity") == 2.0

    @pytest.mark.parametrize("key", ["client.nope", "nope.port", "relay", ""])
    def test_get_unknown(self, key: str) -> None:
        with pytest.raises(KeyError):
            get_value(SpotlightConfig(), key)

    def test_set_value_coerces(self) -> None:
        config = set_value(SpotlightConfig(), "relay.port", "3002")
        assert config.relay.port == 3002

    def test_set_bool(self) -> None:
        config = set_value(SpotlightConfig(), "client.include_diagnostics", "false")
        assert config.client.include_diagnostics is False

    def test_set_value_leaves_original(self) -> None:
        original = SpotlightConfig()
        set_value(original, "client.ease", "0.1")
        assert original.client.ease == 0.15

    def test_set_invalid(self) -> None:
        with pytest.raises(ValidationError):
            set_value(SpotlightConfig(), "client.ease", "2")

    def test_set_unknown(self) -> None:
        with pytest.raises(KeyError):
            set_value(SpotlightConfig(), "client.colour", "red")


def test_deep_merge_nested() -> None:
    base = {"a": {"x": 1, "y": 2}, "b": 3}
    merged = _deep_merge(base, {"a": {"y": 9}, "c": 4})
    assert merged == {"a": {"x": 1, "y": 9}, "b": 3, "c": 4}
    assert base == {"a": {"x": 1, "y": 2}, "b": 3}
