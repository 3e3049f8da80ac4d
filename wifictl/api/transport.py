"""Request/response values passed through the middleware chain."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Callable

from wifictl.api.envelope import CONTENT_TYPE


@dataclass(slots=True)
class GatewayRequest:
    method: str
    path: str
    url: str
    remote: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    body_too_large: bool = False

    def header(self, name: str, default: str = "") -> str:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default


@dataclass(slots=True)
class GatewayResponse:
    status: HTTPStatus
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.headers.setdefault("Content-Type", CONTENT_TYPE)


Handler = Callable[[GatewayRequest], GatewayResponse]
Middleware = Callable[[Handler], Handler]


def chain(handler: Handler, *middlewares: Middleware) -> Handler:
    """Wrap ``handler`` so the first middleware given is the outermost."""
    wrapped = handler
    for middleware in reversed(middlewares):
        wrapped = middleware(wrapped)
    return wrapped
