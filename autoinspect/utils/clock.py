"""Timestamp helpers shared by models and the watchdog."""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp helper."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC.

    SQLite drops tzinfo on ``DateTime(timezone=True)`` columns, PostgreSQL keeps
    it; comparisons between the two must not raise.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def elapsed_ms(start: datetime | None, end: datetime) -> int | None:
    if start is None:
        return None
    return int((ensure_utc(end) - ensure_utc(start)).total_seconds() * 1000)
