"""Helpers to redact sensitive values from log lines and command traces."""

from __future__ import annotations

from typing import Any


def mask_value(value: Any, *, keep_prefix: int = 1, keep_suffix: int = 1) -> str:
    text = str(value or "")
    if not text:
        return ""
    if len(text) <= keep_prefix + keep_suffix + 2:
        return "*" * len(text)
    return f"{text[:keep_prefix]}{'*' * (len(text) - keep_prefix - keep_suffix)}{text[-keep_suffix:]}"


def redact_command(args: list[str], secrets: list[str]) -> list[str]:
    """Replace any argument containing a secret with its masked form."""
    hidden = [s for s in secrets if s]
    output: list[str] = []
    for arg in args:
        for secret in hidden:
            if secret in arg:
                arg = arg.replace(secret, mask_value(secret))
        output.append(arg)
    return output
