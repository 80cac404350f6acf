"""Timestamp utilities for consistent UTC handling across the system."""

from datetime import UTC, date, datetime, time


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes.

    Some stores (SQLite) drop the offset of ``DateTime(timezone=True)``
    columns; values written by this service are always UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes elapsed from ``start`` to ``end`` (rounded down)."""
    elapsed = ensure_utc(end) - ensure_utc(start)
    return int(elapsed.total_seconds() // 60)


def days_between(start: datetime, end: datetime) -> int:
    """Whole days elapsed from ``start`` to ``end``."""
    return (ensure_utc(end) - ensure_utc(start)).days


def start_of_day(day: date) -> datetime:
    """Midnight UTC at the beginning of ``day``."""
    return datetime.combine(day, time.min, tzinfo=UTC)


def end_of_day(day: date) -> datetime:
    """Last representable instant of ``day`` in UTC."""
    return datetime.combine(day, time.max, tzinfo=UTC)
