"""Adapter manager backed by the ``wpa_cli`` control utility."""

from __future__ import annotations

import subprocess
import threading
import time
from typing import Callable, Sequence

from loguru import logger

from wifictl.utils.redaction import redact_command
from wifictl.wifi.base import (
    AdapterError,
    AdapterManager,
    WpaConnection,
    WpaCredentials,
    WpaNetwork,
)

CommandRunner = Callable[[Sequence[str], float], str]


def _run_subprocess(args: Sequence[str], timeout: float) -> str:
    try:
        completed = subprocess.run(
            list(args),
            check=True,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise AdapterError(f"{args[0]} command unavailable") from exc
    except subprocess.TimeoutExpired as exc:
        raise AdapterError(f"{args[0]} command timed out") from exc
    except subprocess.CalledProcessError as exc:
        error_output = (exc.stderr or "").strip() or (exc.stdout or "").strip() or str(exc)
        raise AdapterError(error_output) from exc
    return completed.stdout


def parse_status(output: str) -> dict[str, str]:
    """Parse ``key=value`` lines of ``wpa_cli status``."""
    fields: dict[str, str] = {}
    for line in output.splitlines():
        key, sep, value = line.partition("=")
        if not sep or not key.strip():
            continue
        fields[key.strip()] = value.strip()
    return fields


def parse_scan_results(output: str) -> dict[str, WpaNetwork]:
    """Parse tab separated ``wpa_cli scan_results`` rows, keeping the strongest BSS per ssid."""
    networks: dict[str, WpaNetwork] = {}
    for line in output.splitlines():
        parts = line.split("\t")
        if len(parts) < 5:
            continue
        bssid, frequency, signal_level, flags = (p.strip() for p in parts[:4])
        ssid = "\t".join(parts[4:]).strip()
        if not ssid or bssid.lower() == "bssid":
            continue
        current = networks.get(ssid)
        if current is not None and _to_int(current.signal_level) >= _to_int(signal_level):
            continue
        networks[ssid] = WpaNetwork(
            bssid=bssid,
            frequency=frequency,
            signal_level=signal_level,
            flags=flags,
            ssid=ssid,
        )
    return networks


def _to_int(value: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return -1000


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


class WpaCliManager(AdapterManager):
    """Drives wpa_supplicant through ``wpa_cli -i <interface>``."""

    name = "wpa_cli"

    def __init__(
        self,
        *,
        interface: str = "wlan0",
        wpa_cli_path: str = "wpa_cli",
        command_timeout_seconds: float = 10.0,
        connect_wait_seconds: float = 20.0,
        poll_interval_seconds: float = 1.0,
        runner: CommandRunner | None = None,
        sleep_fn: Callable[[float], None] = time.sleep,
    ) -> None:
        self.interface = interface
        self.wpa_cli_path = wpa_cli_path
        self.command_timeout_seconds = max(0.5, float(command_timeout_seconds))
        self.connect_wait_seconds = max(0.0, float(connect_wait_seconds))
        self.poll_interval_seconds = max(0.05, float(poll_interval_seconds))
        self._runner = runner or _run_subprocess
        self._sleep = sleep_fn
        # wpa_cli network ids are allocated per add_network; keep connect attempts apart.
        self._connect_lock = threading.Lock()
        self._last_state: str | None = None

    def _wpa(self, *args: str, secrets: Sequence[str] = ()) -> str:
        cmd = [self.wpa_cli_path, "-i", self.interface, *args]
        logger.debug(f"wpa_cli exec: {' '.join(redact_command(cmd, list(secrets)))}")
        return self._runner(cmd, self.command_timeout_seconds).strip()

    def _wpa_ok(self, *args: str, secrets: Sequence[str] = ()) -> None:
        reply = self._wpa(*args, secrets=secrets)
        if reply != "OK":
            shown = " ".join(redact_command(list(args), list(secrets)))
            raise AdapterError(f"wpa_cli {shown} failed: {reply or 'no reply'}")

    def status(self) -> dict[str, str]:
        return parse_status(self._wpa("status"))

    def disconnect(self) -> None:
        self._wpa_ok("disconnect")

    def scan_networks(self) -> dict[str, WpaNetwork]:
        self._wpa_ok("scan")
        return parse_scan_results(self._wpa("scan_results"))

    def connect_network(self, creds: WpaCredentials) -> WpaConnection:
        with self._connect_lock:
            net_id = self._wpa("add_network")
            if not net_id.isdigit():
                raise AdapterError(f"wpa_cli add_network failed: {net_id or 'no reply'}")
            try:
                self._wpa_ok("set_network", net_id, "ssid", _quote(creds.ssid))
                if creds.psk:
                    self._wpa_ok("set_network", net_id, "psk", _quote(creds.psk), secrets=[creds.psk])
                else:
                    self._wpa_ok("set_network", net_id, "key_mgmt", "NONE")
                self._wpa_ok("select_network", net_id)
            except AdapterError:
                self._remove_network(net_id)
                raise
            return self._await_association(net_id, creds.ssid)

    def _await_association(self, net_id: str, ssid: str) -> WpaConnection:
        deadline = time.monotonic() + self.connect_wait_seconds
        state = ""
        while True:
            try:
                fields = self.status()
            except AdapterError:
                self._remove_network(net_id)
                raise
            state = fields.get("wpa_state", "")
            if state == "COMPLETED" and fields.get("ssid") == ssid:
                self._wpa_ok("save_config")
                return WpaConnection(
                    ssid=ssid,
                    state=state,
                    ip=fields.get("ip_address", ""),
                    message="Connection established",
                )
            if time.monotonic() >= deadline:
                break
            self._sleep(self.poll_interval_seconds)
        self._remove_network(net_id)
        raise AdapterError(f"unable to connect to {ssid}: last state {state or 'unknown'}")

    def _remove_network(self, net_id: str) -> None:
        try:
            self._wpa("remove_network", net_id)
        except AdapterError as e:
            logger.warning(f"wpa_cli remove_network {net_id} failed: {e}")

    def monitor(self) -> None:
        state = self.status().get("wpa_state", "")
        if state != self._last_state:
            logger.info(f"wifi {self.interface} state {self._last_state or '-'} -> {state or '-'}")
            self._last_state = state
