"""Configuration loading utilities."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

from loguru import logger

from wifictl.config.schema import Config

CONFIG_ENV = "WIFICTL_CONFIG"


def get_config_path() -> Path:
    """Get the configuration file path, honouring WIFICTL_CONFIG."""
    override = str(os.environ.get(CONFIG_ENV) or "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".wifictl" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or create default.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    path = (config_path or get_config_path()).expanduser()
    if path.exists():
        try:
            with path.open() as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("config root must be a JSON object")
            return Config.model_validate(convert_keys(data))
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Failed to load config from {path}: {e}; using defaults")
    return Config()


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case for Pydantic."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", str(name)).lower()
