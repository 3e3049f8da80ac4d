"""Wi-Fi adapter manager backends."""

from wifictl.config.schema import WifiConfig
from wifictl.wifi.base import (
    AdapterError,
    AdapterManager,
    AdapterTimeoutError,
    WpaConnection,
    WpaCredentials,
    WpaNetwork,
)
from wifictl.wifi.mock_manager import MockAdapterManager
from wifictl.wifi.wpa_cli import WpaCliManager


def create_manager_from_config(config: WifiConfig) -> AdapterManager:
    """Factory helper to build the selected adapter manager."""
    backend = (config.backend or "wpa_cli").strip().lower()
    if backend == "mock":
        return MockAdapterManager()
    if backend != "wpa_cli":
        raise ValueError(f"unknown wifi backend: {config.backend}")
    return WpaCliManager(
        interface=config.interface,
        wpa_cli_path=config.wpa_cli_path,
        command_timeout_seconds=config.command_timeout_seconds,
        connect_wait_seconds=config.connect_wait_seconds,
    )


__all__ = [
    "AdapterError",
    "AdapterManager",
    "AdapterTimeoutError",
    "MockAdapterManager",
    "WpaCliManager",
    "WpaConnection",
    "WpaCredentials",
    "WpaNetwork",
    "create_manager_from_config",
]
