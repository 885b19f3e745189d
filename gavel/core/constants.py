"""Global paths for gavel."""

from pathlib import Path

GAVEL_DIR_NAME = ".gavel"
CONFIG_FILE_NAME = "config.json"


def get_gavel_dir() -> Path:
    """Get ~/.gavel (global config directory)."""
    return Path.home() / GAVEL_DIR_NAME


def get_default_config_path() -> Path:
    """Get default config file path."""
    return get_gavel_dir() / CONFIG_FILE_NAME
