from typing import Sequence

import pytest

from wifictl.wifi.base import AdapterError, WpaCredentials
from wifictl.wifi.wpa_cli import WpaCliManager, parse_scan_results, parse_status

SCAN_OUTPUT = (
    "bssid / frequency / signal level / flags / ssid\n"
    "02:00:00:00:00:01\t2437\t-60\t[WPA2-PSK-CCMP][ESS]\thome-net\n"
    "02:00:00:00:00:03\t5180\t-41\t[WPA2-PSK-CCMP][ESS]\thome-net\n"
    "02:00:00:00:00:02\t2412\t-70\t[ESS]\tcafe open\n"
    "02:00:00:00:00:04\t2412\t-80\t[ESS]\t\n"
)


class _ScriptedRunner:
    """Answers wpa_cli invocations from a table keyed by the sub-command."""

    def __init__(self, replies: dict[str, list[str] | str | Exception]) -> None:
        self.replies = replies
        self.commands: list[list[str]] = []

    def __call__(self, args: Sequence[str], timeout: float) -> str:
        cmd = list(args)
        self.commands.append(cmd)
        key = cmd[3]
        reply = self.replies.get(key, "OK")
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, list):
            return reply.pop(0) if len(reply) > 1 else reply[0]
        return reply


def _manager(runner: _ScriptedRunner, **kwargs) -> WpaCliManager:  # type: ignore[no-untyped-def]
    return WpaCliManager(interface="wlan0", runner=runner, sleep_fn=lambda _s: None, **kwargs)


def test_parse_status_reads_key_value_lines() -> None:
    fields = parse_status("bssid=02:00:00:00:00:01\nssid=home-net\nwpa_state=COMPLETED\nip_address=10.0.0.7\ngarbage\n")
    assert fields == {
        "bssid": "02:00:00:00:00:01",
        "ssid": "home-net",
        "wpa_state": "COMPLETED",
        "ip_address": "10.0.0.7",
    }


def test_parse_scan_results_keeps_strongest_bss_and_skips_hidden() -> None:
    networks = parse_scan_results(SCAN_OUTPUT)
    assert sorted(networks) == ["cafe open", "home-net"]
    assert networks["home-net"].bssid == "02:00:00:00:00:03"
    assert networks["home-net"].signal_level == "-41"
    assert networks["cafe open"].flags == "[ESS]"


def test_scan_networks_triggers_scan_then_reads_results() -> None:
    runner = _ScriptedRunner({"scan": "OK", "scan_results": SCAN_OUTPUT})
    networks = _manager(runner).scan_networks()
    assert [c[3] for c in runner.commands] == ["scan", "scan_results"]
    assert runner.commands[0][:3] == ["wpa_cli", "-i", "wlan0"]
    assert "home-net" in networks


def test_scan_networks_raises_on_fail_reply() -> None:
    runner = _ScriptedRunner({"scan": "FAIL-BUSY"})
    with pytest.raises(AdapterError, match="FAIL-BUSY"):
        _manager(runner).scan_networks()


def test_connect_network_configures_and_waits_for_completed() -> None:
    runner = _ScriptedRunner(
        {
            "add_network": "3",
            "status": [
                "wpa_state=ASSOCIATING\nssid=home-net\n",
                "wpa_state=COMPLETED\nssid=home-net\nip_address=192.168.1.20\n",
            ],
        }
    )
    connection = _manager(runner).connect_network(WpaCredentials(ssid="home-net", psk="secret123"))

    assert connection.ssid == "home-net"
    assert connection.state == "COMPLETED"
    assert connection.ip == "192.168.1.20"
    subcommands = [c[3:] for c in runner.commands]
    assert subcommands[:4] == [
        ["add_network"],
        ["set_network", "3", "ssid", '"home-net"'],
        ["set_network", "3", "psk", '"secret123"'],
        ["select_network", "3"],
    ]
    assert subcommands[-1] == ["save_config"]


def test_connect_open_network_sets_key_mgmt_none() -> None:
    runner = _ScriptedRunner(
        {"add_network": "0", "status": "wpa_state=COMPLETED\nssid=cafe\n"}
    )
    _manager(runner).connect_network(WpaCredentials(ssid="cafe"))
    assert ["set_network", "0", "key_mgmt", "NONE"] in [c[3:] for c in runner.commands]


def test_connect_times_out_and_removes_network() -> None:
    runner = _ScriptedRunner({"add_network": "5", "status": "wpa_state=SCANNING\n"})
    manager = _manager(runner, connect_wait_seconds=0)
    with pytest.raises(AdapterError, match="unable to connect to home-net: last state SCANNING"):
        manager.connect_network(WpaCredentials(ssid="home-net", psk="secret123"))
    assert runner.commands[-1][3:] == ["remove_network", "5"]


def test_connect_rejected_parameter_removes_network_and_hides_psk() -> None:
    runner = _ScriptedRunner({"add_network": "1", "set_network": ["OK", "FAIL"]})
    with pytest.raises(AdapterError) as exc:
        _manager(runner).connect_network(WpaCredentials(ssid="home-net", psk="short"))
    assert "short" not in str(exc.value)
    assert runner.commands[-1][3:] == ["remove_network", "1"]


def test_connect_removes_network_when_status_poll_fails() -> None:
    runner = _ScriptedRunner({"add_network": "2", "status": AdapterError("wpa_supplicant socket gone")})
    with pytest.raises(AdapterError, match="wpa_supplicant socket gone"):
        _manager(runner).connect_network(WpaCredentials(ssid="home-net", psk="secret123"))
    assert runner.commands[-1][3:] == ["remove_network", "2"]


def test_monitor_tracks_state_changes() -> None:
    runner = _ScriptedRunner({"status": ["wpa_state=DISCONNECTED\n", "wpa_state=COMPLETED\nssid=x\n"]})
    manager = _manager(runner)
    manager.monitor()
    manager.monitor()
    assert manager._last_state == "COMPLETED"
