"""Uniform JSON response envelope: ``{status, message, payload}``."""

from __future__ import annotations

import dataclasses
import json
from enum import StrEnum
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)

CONTENT_TYPE = "application/json"


class EnvelopeStatus(StrEnum):
    OK = "OK"
    FAIL = "FAIL"


class DecodeError(ValueError):
    """Request body is not valid JSON or does not match the expected shape."""


class SerializationError(ValueError):
    """A response payload could not be encoded as JSON."""


def _default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, BaseModel):
        return value.model_dump()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _dump(data: dict[str, Any]) -> bytes:
    return json.dumps(data, ensure_ascii=False, default=_default, allow_nan=False).encode("utf-8")


def encode_failure(err: BaseException | str) -> bytes:
    """Wrap an error's text into a FAIL envelope. Never carries a payload."""
    return _dump({"status": EnvelopeStatus.FAIL.value, "message": str(err)})


def encode_success(message: str, payload: Any = None) -> bytes:
    """Encode an OK envelope, falling back to a FAIL envelope if the payload cannot be encoded."""
    data: dict[str, Any] = {"status": EnvelopeStatus.OK.value, "message": message}
    if payload is not None:
        data["payload"] = payload
    try:
        return _dump(data)
    except (TypeError, ValueError) as e:
        return encode_failure(SerializationError(f"failed to encode {message} payload: {e}"))


def decode_body(body: bytes, shape: type[M]) -> M:
    """Parse a JSON request body into ``shape``."""
    try:
        return shape.model_validate_json(body or b"")
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ())) or 'body'}: {err.get('msg', 'invalid')}"
            for err in e.errors()
        )
        raise DecodeError(f"invalid request body: {problems}") from e
