"""Masking for the request lines ``JsonTransport`` writes at DEBUG.

Telemetry sources authenticate with an ``x-api-key`` header; the tracker
uses HTTP basic auth, which aiohttp adds after logging. Headers and query
parameters are masked by key; JSON bodies are only shortened, since the
tracker payloads carry field values and no credentials.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

MASK = "<redacted>"

_CREDENTIAL_KEYS: frozenset[str] = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "x-api-key",
        "api_key",
        "apikey",
        "api_token",
        "token",
        "cookie",
    }
)


def redact_mapping(values: Mapping[str, Any] | None) -> dict[str, Any]:
    """Copy *values* with credential entries masked; keys compare case-insensitively."""
    if not values:
        return {}
    return {key: MASK if key.lower() in _CREDENTIAL_KEYS else value for key, value in values.items()}


def summarize_body(body: Any, *, max_chars: int = 512) -> str:
    """Render a JSON request body on one line, cut at *max_chars*."""
    if body is None:
        return "-"
    text = json.dumps(body, separators=(",", ":"), default=str)
    if len(text) > max_chars:
        return f"{text[:max_chars]}…<{len(text) - max_chars} more>"
    return text
