"""HTTP gateway exposing adapter control as JSON envelope endpoints."""

from __future__ import annotations

import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable
from urllib.parse import urlparse

from loguru import logger

from wifictl.api.envelope import DecodeError, decode_body, encode_failure, encode_success
from wifictl.api.middleware import CorsPolicy, access_log_middleware, cors_middleware
from wifictl.api.transport import GatewayRequest, GatewayResponse, Handler, chain
from wifictl.config.schema import Config
from wifictl.runtime.commands import CommandChannelFull, CommandId, CommandMessage
from wifictl.runtime.context import AppContext
from wifictl.utils.redaction import mask_value
from wifictl.wifi.base import AdapterError, WpaCredentials


class RouteNotFound(LookupError):
    pass


class MethodNotAllowed(LookupError):
    def __init__(self, method: str, allowed: list[str]) -> None:
        super().__init__(f"method {method} not allowed")
        self.allowed = allowed


class ServiceShuttingDown(RuntimeError):
    pass


class RequestTooLarge(ValueError):
    pass


def error_response(err: BaseException) -> GatewayResponse:
    """Translate any handler failure into a FAIL envelope with its HTTP status."""
    if isinstance(err, AdapterError):
        logger.error(f"adapter call failed: {err}")
        return GatewayResponse(HTTPStatus.OK, encode_failure(err))
    if isinstance(err, DecodeError):
        logger.error(str(err))
        return GatewayResponse(HTTPStatus.INTERNAL_SERVER_ERROR, encode_failure(err))
    if isinstance(err, RouteNotFound):
        return GatewayResponse(HTTPStatus.NOT_FOUND, encode_failure(err))
    if isinstance(err, MethodNotAllowed):
        return GatewayResponse(
            HTTPStatus.METHOD_NOT_ALLOWED,
            encode_failure(err),
            headers={"Allow": ", ".join(err.allowed)},
        )
    if isinstance(err, RequestTooLarge):
        return GatewayResponse(HTTPStatus.REQUEST_ENTITY_TOO_LARGE, encode_failure(err))
    if isinstance(err, (CommandChannelFull, ServiceShuttingDown)):
        logger.warning(str(err))
        return GatewayResponse(HTTPStatus.SERVICE_UNAVAILABLE, encode_failure(err))
    logger.opt(exception=err).error(f"unhandled gateway error: {err}")
    return GatewayResponse(HTTPStatus.INTERNAL_SERVER_ERROR, encode_failure(err))


def body_limit(config: Config) -> int:
    return max(1024, int(config.max_request_body_bytes))


def _ok(message: str, payload: Any = None) -> GatewayResponse:
    return GatewayResponse(HTTPStatus.OK, encode_success(message, payload))


class GatewayRouter:
    """Static (method, path) table dispatching to the adapter handlers."""

    def __init__(self, ctx: AppContext) -> None:
        self.ctx = ctx
        self.routes: dict[str, dict[str, Callable[[GatewayRequest], GatewayResponse]]] = {
            "/status": {"GET": self.status},
            "/connect": {"POST": self.connect},
            "/disconnect": {"POST": self.disconnect},
            "/scan": {"GET": self.scan},
            "/kill": {"GET": self.kill},
        }

    def resolve(self, method: str, path: str) -> Callable[[GatewayRequest], GatewayResponse]:
        methods = self.routes.get(path)
        if methods is None:
            raise RouteNotFound(f"unknown endpoint {path}")
        handler = methods.get(method)
        if handler is None:
            raise MethodNotAllowed(method, sorted(methods))
        return handler

    def dispatch(self, request: GatewayRequest) -> GatewayResponse:
        try:
            handler = self.resolve(request.method, request.path)
            if self.ctx.lifecycle.shutting_down:
                raise ServiceShuttingDown("service shutting down")
            if request.body_too_large:
                raise RequestTooLarge(f"request body too large (max {body_limit(self.ctx.config)} bytes)")
            return handler(request)
        except Exception as e:
            return error_response(e)

    def status(self, request: GatewayRequest) -> GatewayResponse:
        result = self.ctx.caller.call("status", self.ctx.manager.status)
        return _ok("status", result)

    def disconnect(self, request: GatewayRequest) -> GatewayResponse:
        # Best effort; the body is ignored and failures never reach the caller.
        try:
            self.ctx.caller.call("disconnect", self.ctx.manager.disconnect)
        except AdapterError as e:
            logger.warning(f"disconnect failed: {e}")
        return _ok("status", {})

    def connect(self, request: GatewayRequest) -> GatewayResponse:
        creds = decode_body(request.body, WpaCredentials)
        logger.info(f"connect requested ssid={creds.ssid!r} psk={mask_value(creds.psk)!r}")
        connection = self.ctx.caller.call("connect", self.ctx.manager.connect_network, creds)
        return _ok("Connection", connection)

    def scan(self, request: GatewayRequest) -> GatewayResponse:
        logger.info("scan requested")
        networks = self.ctx.caller.call("scan", self.ctx.manager.scan_networks)
        return _ok("Networks", networks)

    def kill(self, request: GatewayRequest) -> GatewayResponse:
        self.ctx.channel.send(
            CommandMessage(CommandId.KILL),
            timeout=self.ctx.config.kill_send_timeout_seconds,
        )
        return _ok("Killing service.")


def build_gateway_app(ctx: AppContext) -> Handler:
    """Compose CORS -> access log -> dispatcher."""
    router = GatewayRouter(ctx)
    return chain(
        router.dispatch,
        cors_middleware(CorsPolicy.from_config(ctx.config.cors)),
        access_log_middleware,
    )


class InflightTracker:
    """Counts requests between body read and response write."""

    def __init__(self) -> None:
        self._count = 0
        self._cond = threading.Condition()

    @property
    def count(self) -> int:
        with self._cond:
            return self._count

    def enter(self) -> None:
        with self._cond:
            self._count += 1

    def exit(self) -> None:
        with self._cond:
            self._count -= 1
            if self._count <= 0:
                self._cond.notify_all()

    def wait_idle(self, timeout: float) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: self._count <= 0, timeout=max(0.0, timeout))


class _GatewayRequestHandler(BaseHTTPRequestHandler):
    """Thread-per-request adapter from http.server to the gateway app."""

    app: Handler | None = None
    inflight: InflightTracker | None = None
    max_request_body_bytes: int = 64 * 1024

    server_version = "wifictl/0.1"

    def do_GET(self) -> None:  # noqa: N802
        self._serve()

    def do_POST(self) -> None:  # noqa: N802
        self._serve()

    def do_PUT(self) -> None:  # noqa: N802
        self._serve()

    def do_DELETE(self) -> None:  # noqa: N802
        self._serve()

    def do_HEAD(self) -> None:  # noqa: N802
        self._serve()

    def do_OPTIONS(self) -> None:  # noqa: N802
        self._serve()

    def log_message(self, fmt: str, *args: Any) -> None:
        logger.debug("gateway " + fmt % args)

    def _serve(self) -> None:
        tracker = self.inflight
        if tracker:
            tracker.enter()
        try:
            request = self._build_request()
            response = self.app(request) if self.app else error_response(RuntimeError("gateway not bound"))
            self._write(response)
        finally:
            if tracker:
                tracker.exit()

    def _build_request(self) -> GatewayRequest:
        try:
            length = int(self.headers.get("Content-Length", "0"))
        except ValueError:
            length = 0
        too_large = length > self.max_request_body_bytes
        if too_large:
            self._discard_body(length)
            body = b""
        else:
            body = self.rfile.read(length) if length > 0 else b""
        path = urlparse(self.path).path or "/"
        if len(path) > 1:
            path = path.rstrip("/")
        return GatewayRequest(
            method=self.command,
            path=path,
            url=self.path,
            remote=f"{self.client_address[0]}:{self.client_address[1]}" if self.client_address else "unknown",
            headers={k: v for k, v in self.headers.items()},
            body=body,
            body_too_large=too_large,
        )

    def _discard_body(self, length: int) -> None:
        # Unread request bytes turn the close into a reset before the client reads the reply.
        remaining = min(length, 1024 * 1024)
        while remaining > 0:
            chunk = self.rfile.read(min(remaining, 64 * 1024))
            if not chunk:
                break
            remaining -= len(chunk)

    def _write(self, response: GatewayResponse) -> None:
        self.send_response(response.status)
        for key, value in response.headers.items():
            self.send_header(key, value)
        self.send_header("Content-Length", str(len(response.body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(response.body)


class GatewayServer:
    """Threaded HTTP listener bound to one application context."""

    def __init__(self, ctx: AppContext, *, host: str | None = None, port: int | None = None) -> None:
        self.ctx = ctx
        self.host = host if host is not None else ctx.config.host
        self.port = int(port if port is not None else ctx.config.port)
        self.inflight = InflightTracker()
        self._thread: threading.Thread | None = None
        self._server: ThreadingHTTPServer | None = None

    @property
    def bound_port(self) -> int:
        if self._server is None:
            return self.port
        return int(self._server.server_address[1])

    def start(self) -> None:
        handler_cls = type("BoundGatewayRequestHandler", (_GatewayRequestHandler,), {})
        handler_cls.app = staticmethod(build_gateway_app(self.ctx))
        handler_cls.inflight = self.inflight
        handler_cls.max_request_body_bytes = body_limit(self.ctx.config)
        self._server = ThreadingHTTPServer((self.host, self.port), handler_cls)
        self._thread = threading.Thread(target=self._server.serve_forever, name="gateway-http", daemon=True)
        self._thread.start()
        logger.info(f"HTTP Listening on http://{self.host}:{self.bound_port}")

    def stop(self, *, grace_seconds: float = 0.0) -> bool:
        """Stop accepting, wait up to ``grace_seconds`` for in-flight requests, then close.

        Returns False when requests were still running at close time.
        """
        drained = True
        if self._server:
            self._server.shutdown()
            drained = self.inflight.wait_idle(grace_seconds)
            if not drained:
                logger.warning(f"closing with {self.inflight.count} request(s) still in flight")
            self._server.server_close()
            self._server = None
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2)
        self._thread = None
        return drained
