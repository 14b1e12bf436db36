"""
Instants - Boundary Date Normalization

Plan documents carry dates in several shapes (ISO strings, driver
timestamps, epoch numbers, serialized timestamp maps). Everything is
normalized here into a single internal representation, a timezone-aware
UTC datetime, so scheduling code never branches on date representation.

Calendar helpers operate on the UTC calendar day.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Optional


# Epoch numbers above this are taken as milliseconds
EPOCH_MS_THRESHOLD = 1e11

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def to_instant(value: Any) -> Optional[datetime]:
    """
    Normalize a date-like value into an aware UTC datetime.

    Accepted shapes:
    - datetime (naive values are taken as UTC)
    - date (midnight UTC)
    - ISO-8601 string, with or without a trailing 'Z'
    - epoch seconds or milliseconds (int/float)
    - objects exposing as_datetime() or to_datetime()
    - {"seconds": ..., "nanoseconds": ...} maps (also "_seconds"/"_nanoseconds")

    Args:
        value: Raw value read from a document

    Returns:
        Aware UTC datetime, or None if the value is absent or unparseable
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)

    if isinstance(value, str):
        return _parse_iso(value)

    if isinstance(value, (int, float)):
        return _from_epoch(float(value))

    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return _from_epoch(float(seconds) + float(nanos) / 1e9, allow_ms=False)
        return None

    for attr in ("as_datetime", "to_datetime"):
        converter = getattr(value, attr, None)
        if callable(converter):
            return to_instant(converter())

    return None


def _parse_iso(text: str) -> Optional[datetime]:
    text = text.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return to_instant(parsed)


def _from_epoch(number: float, allow_ms: bool = True) -> Optional[datetime]:
    if not math.isfinite(number):
        return None
    if allow_ms and abs(number) > EPOCH_MS_THRESHOLD:
        number = number / 1000.0
    try:
        return datetime.fromtimestamp(number, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


# ---- Calendar helpers ----

def start_of_day(instant: datetime) -> datetime:
    """Midnight UTC of the instant's calendar day."""
    instant = to_instant(instant)
    return instant.replace(hour=0, minute=0, second=0, microsecond=0)


def calendar_day(instant: datetime) -> date:
    return to_instant(instant).date()


def week_bounds(instant: datetime) -> tuple[datetime, datetime]:
    """
    Start and end of the ISO calendar week containing the instant.

    The week runs Monday 00:00 through Sunday 23:59:59.999999 UTC.

    Returns:
        (start_of_week, end_of_week) as aware UTC datetimes
    """
    day_start = start_of_day(instant)
    week_start = day_start - timedelta(days=day_start.weekday())
    week_end = week_start + timedelta(days=7) - timedelta(microseconds=1)
    return week_start, week_end


def in_same_week(candidate: datetime, reference: datetime) -> bool:
    week_start, week_end = week_bounds(reference)
    return week_start <= to_instant(candidate) <= week_end


def add_days(instant: datetime, days: float) -> datetime:
    return to_instant(instant) + timedelta(days=days)
