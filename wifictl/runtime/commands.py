"""Lifecycle commands sent from the HTTP layer to the background worker."""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from enum import StrEnum

from loguru import logger


class CommandId(StrEnum):
    """Lifecycle command identifiers."""

    KILL = "kill"


@dataclass(frozen=True, slots=True)
class CommandMessage:
    id: CommandId


class CommandChannelFull(RuntimeError):
    """Raised when no slot frees up within the send timeout."""


class CommandChannel:
    """Bounded single-consumer mailbox.

    Any number of request threads may ``send``; only the background worker
    calls ``receive``.
    """

    def __init__(self, capacity: int = 1) -> None:
        self.capacity = max(1, int(capacity))
        self._queue: queue.Queue[CommandMessage] = queue.Queue(maxsize=self.capacity)

    def send(self, message: CommandMessage, *, timeout: float) -> None:
        try:
            self._queue.put(message, timeout=max(0.0, float(timeout)))
        except queue.Full:
            raise CommandChannelFull(f"command channel full, dropped {message.id}") from None

    def receive(self, *, timeout: float) -> CommandMessage | None:
        try:
            return self._queue.get(timeout=max(0.0, float(timeout)))
        except queue.Empty:
            return None

    def pending(self) -> int:
        return self._queue.qsize()


class LifecycleState(StrEnum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"


class Lifecycle:
    """Two-state process lifecycle with a shared cancellation token."""

    def __init__(self) -> None:
        self._token = threading.Event()
        self._lock = threading.Lock()
        self.reason = ""

    @property
    def state(self) -> LifecycleState:
        return LifecycleState.SHUTTING_DOWN if self._token.is_set() else LifecycleState.RUNNING

    @property
    def shutting_down(self) -> bool:
        return self._token.is_set()

    def request_shutdown(self, reason: str) -> bool:
        """Flip to SHUTTING_DOWN. Returns False when already shutting down."""
        with self._lock:
            if self._token.is_set():
                return False
            self.reason = reason
            self._token.set()
        logger.info(f"shutdown requested: {reason}")
        return True

    def wait(self, timeout: float | None = None) -> bool:
        return self._token.wait(timeout)
