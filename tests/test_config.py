"""Tests for spendeasy.config."""

import stat
from pathlib import Path

import pytest

from spendeasy.config import (
    DEFAULT_CONFIG,
    Settings,
    create_default_config,
    get_config_path,
    load_config,
    load_settings,
    save_config,
)


class TestLoadConfig:
    """Tests for load_config and create_default_config."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """Should fall back to the defaults."""
        assert load_config(tmp_path / "config.toml") == DEFAULT_CONFIG

    def test_default_file_is_private(self, tmp_path: Path) -> None:
        """Should create the file readable only by its owner."""
        path = tmp_path / "nested" / "config.toml"

        create_default_config(path)

        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert load_config(path) == DEFAULT_CONFIG

    def test_partial_file_is_merged(self, tmp_path: Path) -> None:
        """Should keep defaults for keys the file leaves out."""
        path = tmp_path / "config.toml"
        path.write_text('[display]\ncurrency = "£"\n\n[notifications]\ndaily_hour = 21\n', encoding="utf-8")

        config = load_config(path)

        assert config["display"]["currency"] == "£"
        assert config["notifications"]["daily_hour"] == 21
        assert config["notifications"]["daily_minute"] == 0
        assert config["reminders"]["flag_retention_months"] == 0

    def test_invalid_toml_raises_value_error(self, tmp_path: Path) -> None:
        """Should surface parse errors as ValueError subclasses."""
        path = tmp_path / "config.toml"
        path.write_text("[display\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_config(path)


class TestSettings:
    """Tests for Settings.from_config and load_settings."""

    def test_defaults(self, tmp_path: Path) -> None:
        """Should mirror the default config."""
        settings = load_settings(tmp_path / "config.toml")

        assert settings == Settings()
        assert settings.currency == "₹"
        assert (settings.daily_hour, settings.daily_minute) == (20, 0)

    def test_round_trip_through_file(self, tmp_path: Path) -> None:
        """Should read back saved values."""
        path = tmp_path / "config.toml"
        config = load_config(path)
        config["notifications"]["webhook_url"] = "https://hooks.example.com/spend"
        config["logging"]["level"] = "debug"
        save_config(config, path)

        settings = load_settings(path)

        assert settings.webhook_url == "https://hooks.example.com/spend"
        assert settings.log_level == "DEBUG"

    def test_invalid_time(self) -> None:
        """Should reject an impossible reminder time."""
        with pytest.raises(ValueError, match="daily reminder time"):
            Settings.from_config({"notifications": {"daily_hour": 24}})

    def test_negative_retention(self) -> None:
        """Should reject negative retention."""
        with pytest.raises(ValueError):
            Settings.from_config({"reminders": {"flag_retention_months": -1}})


class TestConfigPath:
    """Tests for get_config_path."""

    def test_respects_xdg(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should live under XDG_CONFIG_HOME."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert get_config_path() == tmp_path / "spendeasy" / "config.toml"
