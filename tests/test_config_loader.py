import json

from typer.testing import CliRunner

from wifictl.cli.commands import app
from wifictl.config.loader import get_config_path, load_config
from wifictl.config.schema import Config

runner = CliRunner()


def test_load_config_accepts_camel_case_keys(tmp_path) -> None:  # type: ignore[no-untyped-def]
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "port": 9090,
                "callTimeoutSeconds": 12,
                "wifi": {"backend": "mock", "interface": "wlan1", "wpaCliPath": "/sbin/wpa_cli"},
                "cors": {"allowedOrigins": ["http://panel.local"]},
            }
        )
    )
    cfg = load_config(path)
    assert cfg.port == 9090
    assert cfg.call_timeout_seconds == 12
    assert cfg.wifi.backend == "mock"
    assert cfg.wifi.wpa_cli_path == "/sbin/wpa_cli"
    assert cfg.cors.allowed_origins == ["http://panel.local"]
    assert "Authorization" in cfg.cors.allowed_headers


def test_load_config_falls_back_to_defaults(tmp_path) -> None:  # type: ignore[no-untyped-def]
    assert load_config(tmp_path / "missing.json").port == 8080

    broken = tmp_path / "broken.json"
    broken.write_text("{nope")
    assert load_config(broken).port == 8080


def test_config_path_env_override(monkeypatch, tmp_path) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("WIFICTL_CONFIG", str(tmp_path / "cfg.json"))
    assert get_config_path() == tmp_path / "cfg.json"


def test_settings_read_environment(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setenv("WIFICTL_PORT", "8181")
    monkeypatch.setenv("WIFICTL_WIFI__INTERFACE", "wlp2s0")
    cfg = Config()
    assert cfg.port == 8181
    assert cfg.wifi.interface == "wlp2s0"


def test_config_check_passes_for_valid_config(tmp_path) -> None:  # type: ignore[no-untyped-def]
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"wifi": {"backend": "mock"}, "port": 8088}))
    result = runner.invoke(app, ["config", "check", "--config", str(path)])
    assert result.exit_code == 0
    assert "Config validation passed" in result.stdout
    assert "backend=mock" in result.stdout


def test_config_check_fails_when_missing(tmp_path) -> None:  # type: ignore[no-untyped-def]
    result = runner.invoke(app, ["config", "check", "--config", str(tmp_path / "missing.json")])
    assert result.exit_code == 2
    assert "Config file not found" in result.stdout


def test_config_check_fails_on_bad_schema(tmp_path) -> None:  # type: ignore[no-untyped-def]
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"port": "not-a-port"}))
    result = runner.invoke(app, ["config", "check", "--config", str(path)])
    assert result.exit_code == 1
    assert "Schema validation failed" in result.stdout


def test_config_check_fails_on_unknown_backend(tmp_path) -> None:  # type: ignore[no-untyped-def]
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"wifi": {"backend": "nmcli"}}))
    result = runner.invoke(app, ["config", "check", "--config", str(path)])
    assert result.exit_code == 1
    assert "Unknown wifi backend" in result.stdout
