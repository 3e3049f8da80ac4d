import threading
import time

import pytest

from wifictl.wifi.base import AdapterError, AdapterTimeoutError
from wifictl.wifi.calls import BoundedCaller


def test_bounded_caller_returns_result() -> None:
    caller = BoundedCaller(timeout=1)
    try:
        assert caller.call("status", lambda: {"wpa_state": "COMPLETED"}) == {"wpa_state": "COMPLETED"}
        assert caller.call("echo", lambda value: value, "x") == "x"
    finally:
        caller.shutdown()


def test_bounded_caller_times_out() -> None:
    caller = BoundedCaller(timeout=0.1)
    try:
        started = time.monotonic()
        with pytest.raises(AdapterTimeoutError, match="scan timed out after 0.1s"):
            caller.call("scan", time.sleep, 0.5)
        assert time.monotonic() - started < 0.4
    finally:
        caller.shutdown()


def test_bounded_caller_keeps_adapter_errors_and_wraps_others() -> None:
    caller = BoundedCaller(timeout=1)

    def _adapter_fail() -> None:
        raise AdapterError("no such interface")

    def _crash() -> None:
        raise OSError("socket closed")

    try:
        with pytest.raises(AdapterError, match="^no such interface$"):
            caller.call("status", _adapter_fail)
        with pytest.raises(AdapterError, match="status failed: socket closed"):
            caller.call("status", _crash)
    finally:
        caller.shutdown()


def test_bounded_caller_runs_calls_on_daemon_threads() -> None:
    caller = BoundedCaller(timeout=1)
    seen: list[bool] = []
    try:
        caller.call("status", lambda: seen.append(threading.current_thread().daemon))
    finally:
        caller.shutdown()
    assert seen == [True]


def test_bounded_caller_limits_concurrent_calls() -> None:
    caller = BoundedCaller(timeout=0.1, max_workers=1)
    release = threading.Event()
    try:
        with pytest.raises(AdapterTimeoutError):
            caller.call("scan", release.wait, 2)
        with pytest.raises(AdapterTimeoutError, match="waiting for a free call slot"):
            caller.call("status", lambda: {})
        release.set()
        time.sleep(0.05)
        assert caller.call("status", lambda: {"wpa_state": "COMPLETED"}) == {"wpa_state": "COMPLETED"}
    finally:
        release.set()
        caller.shutdown()


def test_bounded_caller_rejects_calls_after_shutdown() -> None:
    caller = BoundedCaller(timeout=1)
    caller.shutdown()
    with pytest.raises(AdapterError, match="status rejected: adapter caller closed"):
        caller.call("status", lambda: {})
