"""Configuration loading with layered merging.

Layers, later ones overriding earlier ones:
1. Global user config (~/.gavel/config.json)
2. Project local config (cwd/.gavel/config.json)

A layer only needs the keys it changes. The ``methods`` table is merged
key by key, so a project file can rename one node method and keep the rest.
With no files at all, the pydantic defaults apply.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from gavel.config.schema import Config
from gavel.core.constants import CONFIG_FILE_NAME, GAVEL_DIR_NAME, get_default_config_path
from gavel.core.errors import ConfigError

logger = logging.getLogger(__name__)


def load_config(path: Path | None = None, cwd: Path | None = None) -> Config:
    """Load configuration from file with layered merging.

    Args:
        path: Explicit config file path. If provided, skips layered loading
            and the file must exist.
        cwd: Working directory for the local layer. Defaults to Path.cwd().

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If any config file contains invalid JSON or the merged
            config fails validation.
    """
    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        return _validate(_read_layer(path), str(path))

    effective_cwd = cwd or Path.cwd()
    global_config = get_default_config_path()
    local_config = effective_cwd / GAVEL_DIR_NAME / CONFIG_FILE_NAME

    layers = [global_config]
    if local_config.resolve() != global_config.resolve():
        layers.append(local_config)

    merged: dict[str, Any] = {}
    loaded_from: list[str] = []
    for layer in layers:
        if not layer.is_file():
            continue
        data = _read_layer(layer)
        if data:
            _apply_layer(merged, data)
            loaded_from.append(str(layer))

    if not loaded_from:
        logger.debug("No config files found, using defaults")
        return Config()

    logger.debug("Config loaded from: %s", loaded_from)
    return _validate(merged, ", ".join(loaded_from))


def _read_layer(path: Path) -> dict[str, Any]:
    """Read one config file. An empty file counts as an empty object."""
    try:
        content = path.read_text(encoding="utf-8-sig").strip()
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    if not content:
        return {}

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(
            f"Expected object in config file {path}, got {type(data).__name__}"
        )
    return data


def _apply_layer(merged: dict[str, Any], layer: dict[str, Any]) -> None:
    for key, value in layer.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = {**current, **value}
        else:
            merged[key] = value


def _validate(data: dict[str, Any], source: str) -> Config:
    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed ({source}): {e}") from e
