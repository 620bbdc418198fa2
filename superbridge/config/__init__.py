"""Configuration module for superbridge."""

from superbridge.config.loader import load_config, get_config_path, save_config
from superbridge.config.schema import Config
from superbridge.config.access import clear_config_cache, get_config, update_config

__all__ = ["Config", "load_config", "save_config", "get_config_path", "get_config", "update_config", "clear_config_cache"]
