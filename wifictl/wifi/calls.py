"""Bounded execution of blocking adapter calls."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, TypeVar

from wifictl.wifi.base import AdapterError, AdapterTimeoutError

T = TypeVar("T")


class BoundedCaller:
    """Runs adapter calls on daemon threads and waits at most ``timeout`` seconds.

    A timed out call keeps running on its thread; the caller just stops
    waiting for it. Daemon threads never hold the interpreter open, so a hung
    supplicant cannot keep the process alive after shutdown. At most
    ``max_workers`` calls run at once.
    """

    def __init__(self, *, timeout: float, max_workers: int = 4) -> None:
        self.timeout = max(0.1, float(timeout))
        self.max_workers = max(1, int(max_workers))
        self._slots = threading.BoundedSemaphore(self.max_workers)
        self._closed = False

    def submit(
        self, name: str, fn: Callable[..., T], *args: Any, slot_timeout: float | None = None
    ) -> Future[T]:
        """Start ``fn`` on a daemon thread and return its future without waiting.

        ``slot_timeout`` bounds the wait for a free slot; it defaults to ``timeout``.
        """
        if self._closed:
            raise AdapterError(f"{name} rejected: adapter caller closed")
        wait = self.timeout if slot_timeout is None else max(0.0, slot_timeout)
        if not self._slots.acquire(timeout=wait):
            raise AdapterTimeoutError(f"{name} timed out after {self.timeout:g}s waiting for a free call slot")
        future: Future[T] = Future()
        future.set_running_or_notify_cancel()

        def _run() -> None:
            try:
                future.set_result(fn(*args))
            except Exception as e:
                future.set_exception(e)
            finally:
                self._slots.release()

        threading.Thread(target=_run, name=f"adapter-call-{name}", daemon=True).start()
        return future

    def call(self, name: str, fn: Callable[..., T], *args: Any) -> T:
        future = self.submit(name, fn, *args)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError:
            raise AdapterTimeoutError(f"{name} timed out after {self.timeout:g}s") from None
        except AdapterError:
            raise
        except Exception as e:
            raise AdapterError(f"{name} failed: {e}") from e

    def shutdown(self) -> None:
        self._closed = True
