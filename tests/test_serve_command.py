from typer.testing import CliRunner

from wifictl.cli.commands import app
from wifictl.config.schema import Config

runner = CliRunner()


def test_serve_applies_overrides_and_runs_gateway(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    cfg = Config()
    captured: dict = {}

    def _fake_run_gateway(ctx) -> int:  # type: ignore[no-untyped-def]
        captured["ctx"] = ctx
        ctx.lifecycle.request_shutdown("kill command")
        return 0

    monkeypatch.setattr("wifictl.config.loader.load_config", lambda path=None: cfg)
    monkeypatch.setattr("wifictl.gateway.run_gateway", _fake_run_gateway)
    monkeypatch.setattr("wifictl.gateway.install_signal_handlers", lambda ctx: None)

    result = runner.invoke(
        app,
        ["serve", "--no-logs", "--port", "9191", "--backend", "mock", "--interface", "wlan9", "--boot-delay", "0"],
    )

    assert result.exit_code == 0
    assert "Gateway stopped (kill command)" in result.stdout
    ctx = captured["ctx"]
    assert ctx.config.port == 9191
    assert ctx.config.wifi.interface == "wlan9"
    assert ctx.manager.name == "mock"


def test_serve_rejects_unknown_backend(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setattr("wifictl.config.loader.load_config", lambda path=None: Config())
    result = runner.invoke(app, ["serve", "--no-logs", "--backend", "nmcli"])
    assert result.exit_code == 2
    assert "unknown wifi backend" in result.stdout


def test_version_option() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "wifictl v" in result.stdout
