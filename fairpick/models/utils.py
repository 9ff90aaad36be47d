"""Utility helpers for the models package."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO 8601 string with millisecond precision.

    The ``Z`` suffix matches timestamps written by the persistence layer, so
    generated values sort correctly against stored history records.
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def non_negative_int(value: Any, default: int = 0) -> int:
    """Coerce ``value`` to an integer clamped at zero.

    ``None`` and booleans fall back to ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"expected an integer, got {value!r}") from exc
    return max(0, number)


def optional_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    """Return ``data[key]`` as a string, or ``None`` when missing or blank."""
    value = data.get(key)
    if value is None:
        return None
    text = str(value)
    return text if text else None
