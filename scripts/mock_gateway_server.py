"""Mock gateway for smoke tests (no radio, no wpa_supplicant required)."""

from __future__ import annotations

import argparse

from wifictl.config.schema import Config
from wifictl.gateway import install_signal_handlers, run_gateway
from wifictl.runtime.context import AppContext
from wifictl.wifi.base import WpaNetwork
from wifictl.wifi.mock_manager import MockAdapterManager


def _parse_network(value: str) -> tuple[WpaNetwork, str]:
    ssid, _, psk = value.partition(":")
    flags = "[WPA2-PSK-CCMP][ESS]" if psk else "[ESS]"
    return WpaNetwork(bssid="02:00:00:00:00:ff", frequency="2437", signal_level="-50", flags=flags, ssid=ssid), psk


def main() -> None:
    parser = argparse.ArgumentParser(description="Mock wifictl gateway for smoke scripts")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument(
        "--network",
        action="append",
        default=[],
        help="Visible network as ssid[:psk]; repeatable",
    )
    args = parser.parse_args()

    manager = MockAdapterManager()
    if args.network:
        parsed = [_parse_network(item) for item in args.network]
        manager = MockAdapterManager(
            [net for net, _ in parsed],
            passwords={net.ssid: psk for net, psk in parsed if psk},
        )

    cfg = Config(host=str(args.host), port=int(args.port))
    cfg.wifi.backend = "mock"
    cfg.wifi.monitor_interval_seconds = 1.0
    ctx = AppContext.build(cfg, manager=manager)
    install_signal_handlers(ctx)
    print(f"mock wifictl gateway ready on http://{args.host}:{args.port}", flush=True)
    raise SystemExit(run_gateway(ctx))


if __name__ == "__main__":
    main()
