"""In-memory adapter manager used for local simulation and tests."""

from __future__ import annotations

import threading
from typing import Iterable

from wifictl.wifi.base import (
    AdapterError,
    AdapterManager,
    WpaConnection,
    WpaCredentials,
    WpaNetwork,
)

DEFAULT_NETWORKS = [
    WpaNetwork(bssid="02:00:00:00:00:01", frequency="2437", signal_level="-42", flags="[WPA2-PSK-CCMP][ESS]", ssid="home-net"),
    WpaNetwork(bssid="02:00:00:00:00:02", frequency="5180", signal_level="-67", flags="[ESS]", ssid="cafe-open"),
]


class MockAdapterManager(AdapterManager):
    """Simulated supplicant with a fixed set of visible networks.

    Networks listed in ``passwords`` require that psk; any other visible
    network accepts an empty psk.
    """

    name = "mock"

    def __init__(
        self,
        networks: Iterable[WpaNetwork] | None = None,
        *,
        passwords: dict[str, str] | None = None,
    ) -> None:
        self._networks = {n.ssid: n for n in (networks if networks is not None else DEFAULT_NETWORKS)}
        self._passwords = dict(passwords if passwords is not None else {"home-net": "secret123"})
        self._lock = threading.Lock()
        self._ssid = ""
        self.monitor_cycles = 0

    def status(self) -> dict[str, str]:
        with self._lock:
            if not self._ssid:
                return {"wpa_state": "DISCONNECTED"}
            return {"wpa_state": "COMPLETED", "ssid": self._ssid, "ip_address": "192.168.1.50"}

    def disconnect(self) -> None:
        with self._lock:
            self._ssid = ""

    def connect_network(self, creds: WpaCredentials) -> WpaConnection:
        if not creds.ssid:
            raise AdapterError("ssid must not be empty")
        if creds.ssid not in self._networks:
            raise AdapterError(f"unable to connect to {creds.ssid}: network not found")
        if self._passwords.get(creds.ssid, "") != creds.psk:
            raise AdapterError(f"unable to connect to {creds.ssid}: authentication failed")
        with self._lock:
            self._ssid = creds.ssid
        return WpaConnection(ssid=creds.ssid, state="COMPLETED", ip="192.168.1.50", message="Connection established")

    def scan_networks(self) -> dict[str, WpaNetwork]:
        return dict(self._networks)

    def monitor(self) -> None:
        self.monitor_cycles += 1
