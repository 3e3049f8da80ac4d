"""Configuration module for wifictl."""

from wifictl.config.loader import get_config_path, load_config
from wifictl.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
