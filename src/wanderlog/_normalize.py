"""Normalization helpers.

Centralizes defensive parsing of loosely-typed payload values (remote JSON,
guest storage written by older clients, form input).
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1e11


def safe_float(value: Any) -> float | None:
    """Convert *value* to a finite float, or ``None``.

    Numeric strings are accepted. NaN, +/-inf, booleans and anything
    unparseable map to ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a record date into an aware UTC datetime.

    Accepts datetimes, ISO-8601 strings (including a trailing ``Z``) and
    epoch numbers in seconds or milliseconds. Anything else returns ``None``
    so the record sorts as "no date" instead of raising.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)):
        ts = float(value)
        if not math.isfinite(ts):
            return None
        if abs(ts) >= _MS_THRESHOLD:
            ts /= 1000.0
        try:
            return datetime.fromtimestamp(ts, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    return None
