"""Adapter manager contract for Wi-Fi supplicant integrations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict


class AdapterError(RuntimeError):
    """Raised when the adapter manager cannot complete an operation."""


class AdapterTimeoutError(AdapterError):
    """Raised when an adapter call does not finish within its timeout."""


class WpaCredentials(BaseModel):
    """Credentials submitted to join a network. ``psk`` is empty for open networks."""

    model_config = ConfigDict(strict=True)

    ssid: str
    psk: str = ""


@dataclass(slots=True)
class WpaNetwork:
    """One scan result row."""

    bssid: str
    frequency: str
    signal_level: str
    flags: str
    ssid: str


@dataclass(slots=True)
class WpaConnection:
    """Outcome of a connect attempt."""

    ssid: str
    state: str
    ip: str = ""
    message: str = ""


class AdapterManager(ABC):
    """Synchronous contract the HTTP gateway requires from a Wi-Fi backend.

    Calls block until the underlying radio/supplicant operation finishes and
    may raise :class:`AdapterError`. Implementations must be safe to call from
    several request threads at once.
    """

    name: str = "base"

    @abstractmethod
    def status(self) -> dict[str, str]:
        """Return current supplicant status fields."""

    @abstractmethod
    def disconnect(self) -> None:
        """Drop the current association."""

    @abstractmethod
    def connect_network(self, creds: WpaCredentials) -> WpaConnection:
        """Join the network described by ``creds``."""

    @abstractmethod
    def scan_networks(self) -> dict[str, WpaNetwork]:
        """Scan and return visible networks keyed by ssid."""

    def monitor(self) -> None:
        """Optional periodic hook run by the background worker."""
