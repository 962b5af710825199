"""Date manipulation utilities"""

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Default clock for services (naive UTC, matching stored timestamps)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def days_between(start: date, end: date) -> int:
    """Whole days from start to end, never negative"""
    return max((end - start).days, 0)
