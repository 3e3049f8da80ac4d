"""Configuration schema using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings

DEFAULT_CORS_HEADERS = [
    "Content-Type",
    "Authorization",
    "Content-Length",
    "X-Requested-With",
    "Accept",
    "Origin",
]
DEFAULT_CORS_METHODS = ["GET", "HEAD", "POST", "PUT", "OPTIONS", "DELETE"]


class WifiConfig(BaseModel):
    """Adapter manager backend configuration."""

    backend: str = "wpa_cli"  # wpa_cli | mock
    interface: str = "wlan0"
    wpa_cli_path: str = "wpa_cli"
    command_timeout_seconds: float = 10.0  # Per wpa_cli invocation
    connect_wait_seconds: float = 20.0  # How long connect polls for COMPLETED
    monitor_interval_seconds: float = 5.0  # Background worker cycle


class CorsConfig(BaseModel):
    """CORS policy applied to every route."""

    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])
    allowed_headers: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_HEADERS))
    allowed_methods: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_METHODS))


class ChannelConfig(BaseModel):
    """Command channel between HTTP handlers and the background worker."""

    capacity: int = 1


class Config(BaseSettings):
    """Root configuration for wifictl."""

    host: str = "0.0.0.0"
    port: int = 8080
    boot_delay_seconds: float = 0.0
    call_timeout_seconds: float = 30.0  # Upper bound for any adapter call made by a handler
    kill_send_timeout_seconds: float = 2.0
    shutdown_grace_seconds: float = 5.0
    max_request_body_bytes: int = 64 * 1024
    wifi: WifiConfig = Field(default_factory=WifiConfig)
    cors: CorsConfig = Field(default_factory=CorsConfig)
    channel: ChannelConfig = Field(default_factory=ChannelConfig)

    model_config = ConfigDict(
        env_prefix="WIFICTL_",
        env_nested_delimiter="__"
    )
