"""XDG-compliant path management for heft.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and data storage.

XDG defaults:
- Config: ~/.config/heft/
- Data: ~/.local/share/heft/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "heft"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/heft/ (or XDG_CONFIG_HOME/heft/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_data_dir() -> Path:
    """Get the data directory path.

    Data includes the snapshot database, which must survive cache
    clean-ups (heft itself reports ~/.cache contents as reclaimable).

    Returns:
        Path to ~/.local/share/heft/ (or XDG_DATA_HOME/heft/).
    """
    return _get_xdg_dir("XDG_DATA_HOME", ".local/share")


def get_config_path() -> Path:
    """Get the config file path.

    Returns:
        Path to ~/.config/heft/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/heft/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_db_path() -> Path:
    """Get the snapshot database path.

    Returns:
        Path to ~/.local/share/heft/heft.db.
    """
    return get_data_dir() / "heft.db"


def ensure_data_dir() -> Path:
    """Create the data directory if it doesn't exist.

    Returns:
        Path to the data directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    path = get_data_dir()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        msg = f"Failed to create data directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
