"""Background adapter worker that drains the command channel."""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future

from loguru import logger

from wifictl.runtime.commands import CommandChannel, CommandId, CommandMessage, Lifecycle
from wifictl.wifi.base import AdapterError, AdapterManager
from wifictl.wifi.calls import BoundedCaller


class AdapterWorker:
    """Runs the adapter monitor cycle and reacts to lifecycle commands.

    The worker is the sole consumer of the command channel. ``monitor()`` runs
    through the bounded caller and is never waited on, so a slow supplicant
    cannot delay a ``kill``. A ``kill`` command moves the lifecycle to
    SHUTTING_DOWN; the serve loop watching the same token then drains and
    exits the process.
    """

    def __init__(
        self,
        *,
        manager: AdapterManager,
        channel: CommandChannel,
        lifecycle: Lifecycle,
        interval_seconds: float = 5.0,
        caller: BoundedCaller | None = None,
    ) -> None:
        self.manager = manager
        self.channel = channel
        self.lifecycle = lifecycle
        self.interval_seconds = max(0.01, float(interval_seconds))
        self.caller = caller or BoundedCaller(timeout=30.0, max_workers=1)
        self.handled_count = 0
        self.last_command: CommandMessage | None = None
        self._monitor: Future[None] | None = None
        self._monitor_started = 0.0
        self._monitor_overdue = False
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self.run, name="adapter-worker", daemon=True)
        self._thread.start()
        logger.info(f"adapter worker started backend={self.manager.name}")

    def join(self, timeout: float | None = None) -> None:
        if self._thread:
            self._thread.join(timeout=timeout)

    @property
    def alive(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def run(self) -> None:
        while not self.lifecycle.shutting_down:
            self.run_cycle()
        logger.info("adapter worker stopped")

    def run_cycle(self) -> None:
        self._poll_monitor()
        message = self.channel.receive(timeout=self.interval_seconds)
        if message is not None:
            self.handle(message)

    def _poll_monitor(self) -> None:
        running = self._monitor
        if running is not None and not running.done():
            if not self._monitor_overdue and time.monotonic() - self._monitor_started > self.caller.timeout:
                logger.warning(f"adapter monitor timed out after {self.caller.timeout:g}s")
                self._monitor_overdue = True
            return
        if running is not None and running.exception() is not None:
            logger.warning(f"adapter monitor failed: {running.exception()}")
        try:
            self._monitor = self.caller.submit("monitor", self.manager.monitor, slot_timeout=0)
        except AdapterError as e:
            logger.warning(f"adapter monitor not started: {e}")
            self._monitor = None
            return
        self._monitor_started = time.monotonic()
        self._monitor_overdue = False

    def handle(self, message: CommandMessage) -> None:
        self.handled_count += 1
        self.last_command = message
        if message.id == CommandId.KILL:
            self.lifecycle.request_shutdown("kill command")
            return
        logger.warning(f"ignoring unknown command id={message.id}")
