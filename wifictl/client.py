"""HTTP client for a running wifictl gateway."""

from __future__ import annotations

from typing import Any

import httpx


class GatewayClientError(RuntimeError):
    """Raised when the gateway cannot be reached or returns a non-envelope body."""


class GatewayClient:
    """Thin synchronous wrapper over the gateway's envelope endpoints."""

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8080",
        *,
        timeout_seconds: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = str(base_url or "").rstrip("/")
        self.timeout_seconds = max(0.2, float(timeout_seconds))
        self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout_seconds, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GatewayClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def status(self) -> dict[str, Any]:
        return self._request("GET", "/status")

    def scan(self) -> dict[str, Any]:
        return self._request("GET", "/scan")

    def connect(self, ssid: str, psk: str = "") -> dict[str, Any]:
        return self._request("POST", "/connect", json={"ssid": ssid, "psk": psk})

    def disconnect(self) -> dict[str, Any]:
        return self._request("POST", "/disconnect")

    def kill(self) -> dict[str, Any]:
        return self._request("GET", "/kill")

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise GatewayClientError(f"{method} {path} failed: {e}") from e
        try:
            data = resp.json()
        except ValueError as e:
            raise GatewayClientError(f"{method} {path} returned non-JSON body (HTTP {resp.status_code})") from e
        if not isinstance(data, dict) or "status" not in data:
            raise GatewayClientError(f"{method} {path} returned unexpected body (HTTP {resp.status_code})")
        return data
