"""Gateway process wiring: worker, HTTP listener and shutdown drain."""

from __future__ import annotations

import signal
import threading
from typing import Callable

from loguru import logger

from wifictl.api.gateway_server import GatewayServer
from wifictl.runtime.context import AppContext
from wifictl.runtime.worker import AdapterWorker


def install_signal_handlers(ctx: AppContext) -> None:
    """Route SIGINT/SIGTERM into the lifecycle token. Main thread only."""
    if threading.current_thread() is not threading.main_thread():
        return

    def _request_stop(signum: int, _frame: object) -> None:
        ctx.lifecycle.request_shutdown(f"signal {signal.Signals(signum).name}")

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)


def run_gateway(
    ctx: AppContext,
    *,
    host: str | None = None,
    port: int | None = None,
    on_ready: Callable[[GatewayServer], None] | None = None,
) -> int:
    """Run until the lifecycle leaves RUNNING, then drain and return an exit code."""
    worker = AdapterWorker(
        manager=ctx.manager,
        channel=ctx.channel,
        lifecycle=ctx.lifecycle,
        interval_seconds=ctx.config.wifi.monitor_interval_seconds,
        caller=ctx.caller,
    )
    server = GatewayServer(ctx, host=host, port=port)
    worker.start()
    try:
        server.start()
    except OSError as e:
        logger.error(f"failed to bind http://{server.host}:{server.port}: {e}")
        ctx.lifecycle.request_shutdown("bind failure")
        worker.join(timeout=ctx.config.wifi.monitor_interval_seconds + 1)
        ctx.close()
        return 1
    if on_ready is not None:
        on_ready(server)
    try:
        while not ctx.lifecycle.wait(timeout=0.5):
            pass
    finally:
        logger.info(f"draining in-flight requests (grace {ctx.config.shutdown_grace_seconds:g}s)")
        drained = server.stop(grace_seconds=ctx.config.shutdown_grace_seconds)
        worker.join(timeout=ctx.config.wifi.monitor_interval_seconds + 1)
        ctx.close()
        logger.info(f"gateway stopped reason={ctx.lifecycle.reason or 'unknown'} drained={drained}")
    return 0
