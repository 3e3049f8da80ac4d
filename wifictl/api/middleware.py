"""Cross-cutting request processing: CORS policy and access logging."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus

from loguru import logger

from wifictl.api.envelope import encode_failure, encode_success
from wifictl.api.transport import GatewayRequest, GatewayResponse, Handler, Middleware
from wifictl.config.schema import DEFAULT_CORS_HEADERS, DEFAULT_CORS_METHODS, CorsConfig


def access_log_middleware(next_handler: Handler) -> Handler:
    """Emit one structured event per request, then delegate unchanged."""

    def _handle(request: GatewayRequest) -> GatewayResponse:
        logger.bind(remote=request.remote, method=request.method, url=request.url).info(
            f"HTTP {request.method} {request.url} remote={request.remote}"
        )
        return next_handler(request)

    return _handle


@dataclass(slots=True)
class CorsPolicy:
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    allowed_headers: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_HEADERS))
    allowed_methods: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_METHODS))

    @classmethod
    def from_config(cls, config: CorsConfig) -> "CorsPolicy":
        return cls(
            allowed_origins=[str(o).strip() for o in config.allowed_origins if str(o).strip()],
            allowed_headers=[str(h).strip() for h in config.allowed_headers if str(h).strip()],
            allowed_methods=[str(m).strip().upper() for m in config.allowed_methods if str(m).strip()],
        )

    @property
    def wildcard(self) -> bool:
        return "*" in self.allowed_origins

    def allow_origin_value(self, origin: str) -> str | None:
        """Value for ``Access-Control-Allow-Origin``, or None when the origin is refused."""
        if self.wildcard:
            return "*"
        if origin and origin in self.allowed_origins:
            return origin
        return None

    def origin_headers(self, origin: str) -> dict[str, str]:
        value = self.allow_origin_value(origin)
        if value is None:
            return {}
        headers = {"Access-Control-Allow-Origin": value}
        if value != "*":
            headers["Vary"] = "Origin"
        return headers

    def disallowed_request_headers(self, requested: str) -> list[str]:
        allowed = {h.lower() for h in self.allowed_headers}
        names = [h.strip() for h in requested.split(",") if h.strip()]
        return [h for h in names if h.lower() not in allowed]


def cors_middleware(policy: CorsPolicy) -> Middleware:
    """Answer OPTIONS preflights directly; decorate every other response."""

    def _wrap(next_handler: Handler) -> Handler:
        def _handle(request: GatewayRequest) -> GatewayResponse:
            origin = request.header("Origin")
            if request.method == "OPTIONS":
                return _preflight(policy, request, origin)
            response = next_handler(request)
            response.headers.update(policy.origin_headers(origin))
            return response

        return _handle

    return _wrap


def _preflight(policy: CorsPolicy, request: GatewayRequest, origin: str) -> GatewayResponse:
    headers = policy.origin_headers(origin)
    if not headers:
        return GatewayResponse(HTTPStatus.OK, encode_success("preflight"))
    requested_method = request.header("Access-Control-Request-Method").strip().upper()
    if requested_method and requested_method not in policy.allowed_methods:
        return GatewayResponse(
            HTTPStatus.METHOD_NOT_ALLOWED,
            encode_failure(f"method {requested_method} not allowed"),
        )
    rejected = policy.disallowed_request_headers(request.header("Access-Control-Request-Headers"))
    if rejected:
        return GatewayResponse(
            HTTPStatus.FORBIDDEN,
            encode_failure(f"headers not allowed: {', '.join(rejected)}"),
        )
    headers["Access-Control-Allow-Methods"] = ", ".join(policy.allowed_methods)
    headers["Access-Control-Allow-Headers"] = ", ".join(policy.allowed_headers)
    return GatewayResponse(HTTPStatus.OK, encode_success("preflight"), headers=headers)
