"""Time helpers shared by the catalog, loan and report components."""

from datetime import datetime
from typing import Callable

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Wall-clock time, naive local datetime as stored in the database."""
    return datetime.now()


def days_between(start: datetime, end: datetime) -> int:
    """Whole days elapsed from start to end, truncated (negative if end < start)."""
    delta = end - start
    days = abs(delta).days
    return days if delta.total_seconds() >= 0 else -days


def as_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
