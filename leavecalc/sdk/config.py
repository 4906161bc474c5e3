"""Configuration management for Leave Calc.

Configuration lives in a single settings.json file:
   - data_dir: custom directory for employee and leave data
   - default_output_format: "text" or "json" for CLI output

Config directory resolution:
1. LEAVE_CALC_CONFIG_PATH environment variable (if set)
2. ~/.config/leave-calc/ (XDG_CONFIG_HOME fallback)

Data directory resolution:
1. settings.json "data_dir" key (if set via CLI)
2. XDG_DATA_HOME/leave-calc/ or ~/.local/share/leave-calc/
"""

import json
import os
from pathlib import Path
from typing import Any


APP_NAME = "leave-calc"
SETTINGS_FILENAME = "settings.json"
OUTPUT_FORMATS = ("text", "json")


class SettingsError(Exception):
    """Raised when settings.json holds an unusable value."""
    pass


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. LEAVE_CALC_CONFIG_PATH environment variable
    2. ~/.config/leave-calc/ (XDG_CONFIG_HOME)

    Returns:
        Path to the configuration directory
    """
    env_path = os.environ.get("LEAVE_CALC_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)

    Raises:
        SettingsError: If the file exists but is not a JSON object
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        try:
            settings = json.load(f)
        except json.JSONDecodeError as e:
            raise SettingsError(f"Cannot parse {settings_file}: {e}")

    if not isinstance(settings, dict):
        raise SettingsError(f"{settings_file} must contain a JSON object")
    return settings


def save_settings(settings: dict) -> Path:
    """Save settings to settings.json.

    Args:
        settings: Settings dictionary to save

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json.

    Args:
        key: Setting key (e.g., "data_dir", "default_output_format")
        default: Default value if key not found
    """
    settings = load_settings()
    return settings.get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json.

    Returns:
        Path to the saved settings file
    """
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def get_output_format() -> str:
    """Default CLI output format ("text" unless overridden in settings)."""
    value = get_setting("default_output_format", "text")
    if value not in OUTPUT_FORMATS:
        raise SettingsError(
            f"default_output_format must be one of {OUTPUT_FORMATS}, got: {value!r}"
        )
    return value


def get_data_path() -> Path:
    """Get the data directory path.

    Uses settings.json "data_dir" if set, else XDG_DATA_HOME/leave-calc/.

    Returns:
        Path to the data directory (created if doesn't exist)
    """
    custom = get_setting("data_dir")
    if custom:
        data_path = Path(custom).expanduser()
    else:
        xdg_data_home = os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
        data_path = Path(xdg_data_home) / APP_NAME
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path
