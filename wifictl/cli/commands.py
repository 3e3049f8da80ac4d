"""CLI commands for wifictl."""

import json
import sys
import time
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from wifictl import __logo__, __version__

app = typer.Typer(
    name="wifictl",
    help=f"{__logo__} wifictl - Wi-Fi adapter control gateway",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} wifictl v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """wifictl - Wi-Fi adapter control gateway."""
    pass


# ============================================================================
# Config Commands
# ============================================================================

config_app = typer.Typer(help="Manage wifictl config")
app.add_typer(config_app, name="config")


def _load_json_file(path: Path) -> dict[str, Any]:
    with path.open() as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must be a JSON object")
    return data


@config_app.command("check")
def config_check(
    config: Path | None = typer.Option(None, "--config", help="Config path to validate"),
):
    """Validate config JSON structure and schema."""
    from wifictl.config.loader import convert_keys, get_config_path
    from wifictl.config.schema import Config

    config_path = (config or get_config_path()).expanduser()
    if not config_path.exists():
        console.print(f"[red]Config file not found:[/red] {config_path}")
        raise typer.Exit(2)

    try:
        raw = _load_json_file(config_path)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid JSON:[/red] {exc}")
        raise typer.Exit(2) from exc
    except Exception as exc:
        console.print(f"[red]Failed to read config:[/red] {exc}")
        raise typer.Exit(2) from exc

    try:
        cfg = Config.model_validate(convert_keys(raw))
    except Exception as exc:
        console.print(f"[red]Schema validation failed:[/red] {exc}")
        raise typer.Exit(1) from exc

    if cfg.wifi.backend not in {"wpa_cli", "mock"}:
        console.print(f"[red]Unknown wifi backend:[/red] {cfg.wifi.backend}")
        raise typer.Exit(1)

    console.print("[green]✓[/green] Config validation passed")
    console.print(f"path={config_path}")
    console.print(f"listen={cfg.host}:{cfg.port}")
    console.print(
        f"wifi=backend={cfg.wifi.backend} interface={cfg.wifi.interface} "
        f"call_timeout={cfg.call_timeout_seconds:g}s"
    )
    console.print(f"cors_origins={','.join(cfg.cors.allowed_origins)}")


# ============================================================================
# Gateway Commands
# ============================================================================


@app.command()
def serve(
    config: Path | None = typer.Option(None, "--config", help="Config file path"),
    host: str | None = typer.Option(None, "--host", help="HTTP listen host override"),
    port: int | None = typer.Option(None, "--port", help="HTTP listen port override"),
    backend: str | None = typer.Option(None, "--backend", help="Adapter backend override: wpa_cli/mock"),
    interface: str | None = typer.Option(None, "--interface", help="Wireless interface override"),
    boot_delay: float | None = typer.Option(None, "--boot-delay", help="Seconds to wait before starting"),
    logs: bool = typer.Option(True, "--logs/--no-logs", help="Show gateway logs"),
    log_level: str = typer.Option("DEBUG", "--log-level", help="Minimum log level when logs are on"),
):
    """Start the adapter worker and the HTTP control gateway."""
    from loguru import logger

    from wifictl.config.loader import load_config
    from wifictl.gateway import install_signal_handlers, run_gateway
    from wifictl.runtime.context import AppContext

    if logs:
        logger.enable("wifictl")
        logger.remove()
        logger.add(sys.stderr, level=log_level.upper())
    else:
        logger.disable("wifictl")

    cfg = load_config(config)
    if host:
        cfg.host = host
    if port is not None:
        cfg.port = port
    if backend:
        cfg.wifi.backend = backend
    if interface:
        cfg.wifi.interface = interface
    if boot_delay is not None:
        cfg.boot_delay_seconds = boot_delay

    console.print(f"{__logo__} Starting wifictl gateway on {cfg.host}:{cfg.port}...")
    console.print(f"backend={cfg.wifi.backend} interface={cfg.wifi.interface}")

    if cfg.boot_delay_seconds > 0:
        console.print(f"[dim]Boot delay {cfg.boot_delay_seconds:g}s[/dim]")
        time.sleep(cfg.boot_delay_seconds)

    try:
        ctx = AppContext.build(cfg)
    except ValueError as exc:
        console.print(f"[red]Failed to start:[/red] {exc}")
        raise typer.Exit(2) from exc

    install_signal_handlers(ctx)
    code = run_gateway(ctx)
    if code == 0:
        console.print(f"[green]✓[/green] Gateway stopped ({ctx.lifecycle.reason})")
    else:
        console.print("[red]Gateway failed to start[/red]")
    raise typer.Exit(code)


# ============================================================================
# Client Commands
# ============================================================================

client_app = typer.Typer(help="Call a running gateway")
app.add_typer(client_app, name="client")

URL_OPTION = typer.Option("http://127.0.0.1:8080", "--url", envvar="WIFICTL_URL", help="Gateway base URL")


def _call(url: str, action: str, *args: Any) -> dict[str, Any]:
    from wifictl.client import GatewayClient, GatewayClientError

    try:
        with GatewayClient(url) as client:
            return getattr(client, action)(*args)
    except GatewayClientError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(2) from exc


def _finish(envelope: dict[str, Any]) -> None:
    if envelope.get("status") != "OK":
        console.print(f"[red]FAIL:[/red] {envelope.get('message', '')}")
        raise typer.Exit(1)


@client_app.command("status")
def client_status(url: str = URL_OPTION):
    """Show supplicant status."""
    envelope = _call(url, "status")
    _finish(envelope)
    console.print_json(data=envelope.get("payload") or {})


@client_app.command("scan")
def client_scan(url: str = URL_OPTION):
    """List visible networks."""
    envelope = _call(url, "scan")
    _finish(envelope)
    networks = envelope.get("payload") or {}
    table = Table(title="Networks")
    table.add_column("SSID", style="cyan")
    table.add_column("Signal")
    table.add_column("Freq")
    table.add_column("Flags", style="dim")
    for ssid, net in sorted(networks.items()):
        table.add_row(ssid, str(net.get("signal_level", "")), str(net.get("frequency", "")), str(net.get("flags", "")))
    console.print(table)


@client_app.command("connect")
def client_connect(
    ssid: str = typer.Option(..., "--ssid", help="Network name"),
    psk: str = typer.Option("", "--psk", help="Pre-shared key, empty for open networks"),
    url: str = URL_OPTION,
):
    """Join a network."""
    envelope = _call(url, "connect", ssid, psk)
    _finish(envelope)
    payload = envelope.get("payload") or {}
    console.print(f"[green]✓[/green] {payload.get('ssid', ssid)} state={payload.get('state', '')} ip={payload.get('ip', '')}")


@client_app.command("disconnect")
def client_disconnect(url: str = URL_OPTION):
    """Drop the current association."""
    _finish(_call(url, "disconnect"))
    console.print("[green]✓[/green] Disconnected")


@client_app.command("kill")
def client_kill(url: str = URL_OPTION):
    """Ask the gateway process to shut down."""
    envelope = _call(url, "kill")
    _finish(envelope)
    console.print(f"[green]✓[/green] {envelope.get('message', '')}")


if __name__ == "__main__":
    app()
