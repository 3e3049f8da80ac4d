"""Application context shared by the HTTP server, handlers and worker."""

from __future__ import annotations

from dataclasses import dataclass

from wifictl.config.schema import Config
from wifictl.runtime.commands import CommandChannel, Lifecycle
from wifictl.wifi import create_manager_from_config
from wifictl.wifi.base import AdapterManager
from wifictl.wifi.calls import BoundedCaller


@dataclass(slots=True)
class AppContext:
    """Process-wide state, built once at startup and passed explicitly."""

    config: Config
    manager: AdapterManager
    channel: CommandChannel
    lifecycle: Lifecycle
    caller: BoundedCaller

    @classmethod
    def build(cls, config: Config, manager: AdapterManager | None = None) -> "AppContext":
        return cls(
            config=config,
            manager=manager or create_manager_from_config(config.wifi),
            channel=CommandChannel(capacity=config.channel.capacity),
            lifecycle=Lifecycle(),
            caller=BoundedCaller(timeout=config.call_timeout_seconds, max_workers=16),
        )

    def close(self) -> None:
        self.caller.shutdown()
