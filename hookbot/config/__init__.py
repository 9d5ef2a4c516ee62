"""Configuration module for hookbot."""

from hookbot.config.loader import get_config_path, load_config, save_config
from hookbot.config.schema import EventsConfig, ListenerConfig

__all__ = ["EventsConfig", "ListenerConfig", "get_config_path", "load_config", "save_config"]
