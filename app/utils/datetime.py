from __future__ import annotations
from datetime import datetime, timedelta, UTC
from typing import Optional

__all__ = ["utc_now", "ensure_aware_utc", "stamp_after"]


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(UTC)


def ensure_aware_utc(dt: datetime | None) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware in UTC (assumes naive input already in UTC)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def stamp_after(previous: datetime | None) -> datetime:
    """Current UTC time, nudged forward so it is strictly later than ``previous``.

    Submission stamps must advance even when two writes land in the same clock tick.
    """
    now = utc_now()
    previous = ensure_aware_utc(previous)
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now
