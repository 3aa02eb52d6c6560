"""
Persistent user settings for xmi2conll.

Settings live in ``config.json`` inside ``~/.xmi2conll/`` unless the
``XMI2CONLL_CONFIG_DIR`` environment variable points elsewhere.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "XMI2CONLL_CONFIG_DIR"

# Known settings and their types
SETTINGS: Dict[str, type] = {
    "default_format": str,
    "context_chars": int,
}


def get_config_dir(create: bool = True) -> Path:
    """Return the configuration directory, optionally creating it."""
    if CONFIG_DIR_ENV in os.environ:
        config_dir = Path(os.environ[CONFIG_DIR_ENV])
    else:
        config_dir = Path.home() / ".xmi2conll"
    if create:
        config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file(create_dir: bool = True) -> Path:
    return get_config_dir(create=create_dir) / "config.json"


def read_config() -> dict:
    """
    Read the configuration file.

    Returns:
        Dictionary with configuration values (empty dict if the file doesn't exist
        or cannot be parsed)
    """
    config_file = get_config_file(create_dir=False)
    if not config_file.exists():
        return {}
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable configuration file %s: %s", config_file, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring configuration file %s: not a JSON object", config_file)
        return {}
    return data


def write_config(config: dict) -> None:
    """Merge *config* into the configuration file."""
    config_file = get_config_file()
    existing_config = read_config()
    existing_config.update(config)
    with open(config_file, "w", encoding="utf-8") as f:
        json.dump(existing_config, f, indent=2, ensure_ascii=False)


def coerce_setting(key: str, value: str) -> Any:
    """Convert a ``--set KEY=VALUE`` string to the type of the setting."""
    if key not in SETTINGS:
        raise ValueError(f"Unknown setting '{key}'. Known settings: {', '.join(sorted(SETTINGS))}")
    try:
        return SETTINGS[key](value)
    except ValueError as exc:
        raise ValueError(f"Invalid value '{value}' for setting '{key}'") from exc
