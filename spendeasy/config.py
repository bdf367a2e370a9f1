"""Configuration file management for spendeasy."""

import copy
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w

DEFAULT_CONFIG: dict[str, Any] = {
    "display": {
        "currency": "₹",
    },
    "notifications": {
        "enabled": True,
        "webhook_url": "",
        "daily_hour": 20,
        "daily_minute": 0,
    },
    "reminders": {
        # 0 keeps reminder flags forever
        "flag_retention_months": 0,
    },
    "logging": {
        "level": "INFO",
    },
}


@dataclass(frozen=True)
class Settings:
    """Typed view of the configuration file."""

    currency: str = "₹"
    notifications_enabled: bool = True
    webhook_url: str = ""
    daily_hour: int = 20
    daily_minute: int = 0
    flag_retention_months: int = 0
    log_level: str = "INFO"

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "Settings":
        """Build settings from a loaded config dictionary.

        Raises:
            ValueError: If a value is out of range.
        """
        display = config.get("display", {})
        notifications = config.get("notifications", {})
        reminders = config.get("reminders", {})
        logging_config = config.get("logging", {})

        settings = cls(
            currency=str(display.get("currency", cls.currency)),
            notifications_enabled=bool(notifications.get("enabled", cls.notifications_enabled)),
            webhook_url=str(notifications.get("webhook_url", cls.webhook_url)),
            daily_hour=int(notifications.get("daily_hour", cls.daily_hour)),
            daily_minute=int(notifications.get("daily_minute", cls.daily_minute)),
            flag_retention_months=int(reminders.get("flag_retention_months", cls.flag_retention_months)),
            log_level=str(logging_config.get("level", cls.log_level)).upper(),
        )

        if not 0 <= settings.daily_hour <= 23 or not 0 <= settings.daily_minute <= 59:
            raise ValueError(f"Invalid daily reminder time {settings.daily_hour:02d}:{settings.daily_minute:02d}")
        if settings.flag_retention_months < 0:
            raise ValueError("flag_retention_months must not be negative")
        return settings


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_xdg_state_home() -> Path:
    """Get XDG state directory, with fallback to ~/.local/state."""
    xdg_state = os.environ.get("XDG_STATE_HOME")
    if xdg_state:
        return Path(xdg_state)
    return Path.home() / ".local" / "state"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "spendeasy" / "config.toml"


def get_log_dir() -> Path:
    """Get the log directory (XDG compliant)."""
    return get_xdg_state_home() / "spendeasy" / "logs"


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    save_config(copy.deepcopy(DEFAULT_CONFIG), config_path)


def _merge(defaults: dict[str, Any], loaded: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in loaded.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file, filling in defaults.

    A missing file yields the defaults.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(config_path, "rb") as f:
        return _merge(DEFAULT_CONFIG, tomllib.load(f))


def load_settings(config_path: Path | None = None) -> Settings:
    """Load configuration and return typed settings."""
    return Settings.from_config(load_config(config_path))


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)
