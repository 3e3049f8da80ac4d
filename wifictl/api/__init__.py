"""HTTP gateway, middleware chain and response envelope."""

from wifictl.api.envelope import (
    DecodeError,
    EnvelopeStatus,
    SerializationError,
    decode_body,
    encode_failure,
    encode_success,
)
from wifictl.api.gateway_server import GatewayRouter, GatewayServer, build_gateway_app

__all__ = [
    "DecodeError",
    "EnvelopeStatus",
    "GatewayRouter",
    "GatewayServer",
    "SerializationError",
    "build_gateway_app",
    "decode_body",
    "encode_failure",
    "encode_success",
]
