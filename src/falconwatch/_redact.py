"""Masking of credentials in header and token mappings before debug logging."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "client_secret",
        "access_token",
        "refresh_token",
        "id_token",
        "authorization",
    }
)


def redact_for_log(values: Mapping[str, Any], *, max_string: int = 256) -> dict[str, Any]:
    """Copy *values* with secrets replaced and long strings shortened.

    Keys match case-insensitively, since HTTP header names arrive in
    either case.
    """
    redacted: dict[str, Any] = {}
    for key, value in values.items():
        if key.lower() in _SENSITIVE_KEYS:
            redacted[key] = "<redacted>"
        elif isinstance(value, str) and len(value) > max_string:
            redacted[key] = f"{value[:max_string]}…<truncated>"
        else:
            redacted[key] = value
    return redacted
