"""UTC timestamp helpers."""

from datetime import datetime, timedelta, timezone
from typing import Optional

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Example:
        >>> utc_now().tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def epoch_millis(dt: Optional[datetime] = None) -> int:
    """Milliseconds since the Unix epoch.

    Naive datetimes are treated as UTC.

    Args:
        dt: Datetime to convert (defaults to now)

    Example:
        >>> epoch_millis(datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc))
        1700000000000
    """
    if dt is None:
        dt = utc_now()
    elif dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - _EPOCH) // timedelta(milliseconds=1)


def format_timestamp_for_log(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 UTC string for log fields, or None."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()
