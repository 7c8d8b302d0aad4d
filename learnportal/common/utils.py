"""
Common utility functions for the LearnPortal engine.

This module provides small helpers shared across the domain, service and
persistence layers: clock access, timestamp formatting and rate arithmetic.
"""

import datetime
from typing import Callable, Optional, Union

# A clock returns the current time as a naive UTC datetime
Clock = Callable[[], datetime.datetime]


def utcnow() -> datetime.datetime:
    """
    Get the current time as a naive UTC datetime.

    Naive UTC is the storage convention for every timestamp in the engine,
    so values compare cleanly with what SQLite and PostgreSQL hand back.

    Returns:
        Current UTC time without tzinfo
    """
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime.datetime) -> datetime.datetime:
    """
    Normalize a datetime to naive UTC.

    Args:
        value: Aware or naive datetime (naive values are assumed to be UTC)

    Returns:
        Naive UTC datetime
    """
    if value.tzinfo is not None:
        return value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return value


def isoformat_or_none(value: Optional[datetime.datetime]) -> Optional[str]:
    """Format an optional datetime as ISO 8601."""
    return value.isoformat() if value else None


def percentage(part: Union[int, float], whole: Union[int, float]) -> float:
    """
    Express part/whole as a percentage rounded to two decimals.

    Returns 0 when whole is zero.
    """
    if not whole:
        return 0
    return round(part / whole * 100, 2)
