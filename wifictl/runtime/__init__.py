"""Command channel, lifecycle and background worker."""

from wifictl.runtime.commands import (
    CommandChannel,
    CommandChannelFull,
    CommandId,
    CommandMessage,
    Lifecycle,
    LifecycleState,
)
from wifictl.runtime.context import AppContext
from wifictl.runtime.worker import AdapterWorker

__all__ = [
    "AdapterWorker",
    "AppContext",
    "CommandChannel",
    "CommandChannelFull",
    "CommandId",
    "CommandMessage",
    "Lifecycle",
    "LifecycleState",
]
