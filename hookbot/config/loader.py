"""Configuration loading utilities."""

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from hookbot.config.schema import EventsConfig, ListenerConfig

CONFIG_NAME = "github-listener"


def get_data_dir() -> Path:
    """Get the hookbot data directory (``HOOKBOT_HOME`` or ``~/.hookbot``)."""
    base = os.environ.get("HOOKBOT_HOME")
    path = Path(base).expanduser() if base else Path.home() / ".hookbot"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_path(name: str = CONFIG_NAME) -> Path:
    """Get the path of a named configuration resource."""
    return get_data_dir() / "config" / f"{name}.json"


def load_config(config_path: Path | None = None) -> ListenerConfig:
    """
    Load the listener configuration.

    If the file does not exist, defaults are generated and persisted.
    Legacy files are migrated and written back once.

    Args:
        config_path: Optional path to the config file. Uses the default if not provided.

    Returns:
        The loaded configuration.
    """
    path = config_path or get_config_path()

    if not path.exists():
        logger.info("GitHub listener: No config specified. Generating defaults.")
        config = ListenerConfig()
        save_config(config, path)
        return config

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid config file {path}: {e}") from e

    data, migrated = _migrate_config(data)
    config = ListenerConfig.model_validate(data)
    if migrated:
        save_config(config, path)
    return config


def save_config(config: ListenerConfig, config_path: Path | None = None) -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Optional path to save to. Uses the default if not provided.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(by_alias=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _migrate_config(data: dict[str, Any]) -> tuple[dict[str, Any], bool]:
    """Back-fill settings missing from older config files."""
    if not isinstance(data, dict):
        raise ValueError("Config root must be a JSON object")

    migrated = False
    if data.get("events") is None:
        # Legacy configs had no per-event switches: everything was on.
        logger.debug("GitHub listener: Legacy config without events, enabling all alerts.")
        data["events"] = EventsConfig().model_dump(by_alias=True)
        migrated = True
    return data, migrated
