"""
Formatting utilities for timestamps.

All timestamps are stored as naive UTC datetimes. These helpers normalize
incoming values and format outgoing ones:
- to_naive_utc: aware -> UTC without tzinfo; naive values are taken as UTC
- format_utc: ISO 8601 with an explicit "Z" suffix
"""

from datetime import datetime, timezone
from typing import Optional


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to naive UTC.

    Examples:
        >>> to_naive_utc(datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc))
        datetime.datetime(2026, 5, 1, 12, 0)
        >>> to_naive_utc(None) is None
        True
    """
    if value is None:
        return None
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def format_utc(value: Optional[datetime]) -> Optional[str]:
    """
    Format a datetime as ISO 8601 with explicit UTC timezone.

    Examples:
        >>> format_utc(datetime(2026, 5, 1, 12, 0))
        '2026-05-01T12:00:00Z'
    """
    if value is None:
        return None
    return to_naive_utc(value).isoformat() + "Z"
