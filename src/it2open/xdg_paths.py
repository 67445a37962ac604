"""XDG-compliant path management for it2open."""

from pathlib import Path

from xdg_base_dirs import xdg_config_home

APP_NAME = "it2open"


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    return xdg_config_home() / APP_NAME


def get_config_file_path() -> Path:
    """Get the config.yaml file path."""
    return get_config_dir() / "config.yaml"


def ensure_directories() -> None:
    """Create the config directory if it doesn't exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
