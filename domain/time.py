"""
Domain time utilities (pure).

Centralized timestamp validation and parsing helpers.

Behavior and error messages must remain consistent across the domain model.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from .errors import ValidationError


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Enforces the requirement that stored timestamps are UTC.

    Invariants:
    - Timestamps must be timezone-aware.
    - Timestamps must have UTC offset 0.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware (UTC)")
    if value.utcoffset() != timedelta(0):
        raise ValueError(f"{name} must be a UTC timestamp (offset 0)")


def parse_utc_datetime(value: Any) -> datetime:
    """
    Parse a timestamp into a timezone-aware UTC datetime.

    Accepts datetimes and ISO-8601 strings (a trailing 'Z' is allowed).
    Naive values are interpreted as UTC; other offsets are converted.
    Raises TypeError/ValueError for anything else.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")

    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_sale_date(value: Any) -> datetime:
    """Parse a caller-supplied sale date, failing with a ValidationError."""

    try:
        return parse_utc_datetime(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError("Invalid sale date", field="sale_date") from None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
