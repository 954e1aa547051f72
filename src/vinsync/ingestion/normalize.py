"""Normalization helpers.

Centralizes defensive parsing and placeholder handling for provider and
tracker payloads.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


def safe_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "y", "on"}:
            return True
        if normalized in {"0", "false", "no", "n", "off"}:
            return False
    return None


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value).strip()
    return text if text else None


def is_meaningful(value: Any) -> bool:
    """Return True if the value may be written to a tracked issue."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() not in ("", "--")
    if value == {}:
        return False
    return bool(value != [])


def normalize_timestamp_seconds(value: Any) -> float | None:
    """Normalize provider timestamps to epoch seconds.

    - Empty/missing -> None
    - <= 0 -> None
    - Milliseconds (> 1e11) -> seconds
    - ISO-8601 strings (``Z`` suffix allowed); naive values are taken as UTC
    """

    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            ts = float(value)
        except (TypeError, ValueError):
            if not isinstance(value, str):
                return None
            try:
                parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
            except ValueError:
                return None
        else:
            if math.isnan(ts) or ts <= 0:
                return None
            if ts > 1e11:
                ts /= 1000.0
            return ts
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    ts = parsed.timestamp()
    return ts if ts > 0 else None
