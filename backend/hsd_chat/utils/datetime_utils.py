"""
Timezone-aware datetime utilities.

Stored timestamps are always UTC. SQLite drops tzinfo on the way back, so
values read from the database go through ``ensure_utc``.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Replaces datetime.utcnow() which is deprecated in Python 3.12+.
    """
    return datetime.now(UTC)


def later_than(previous: datetime) -> datetime:
    """
    Current UTC time, bumped past ``previous`` if the clock has not advanced.

    Activity timestamps must move forward on every touch even when two
    writes land within the clock's resolution.
    """
    current = now_utc()
    previous = ensure_utc(previous)
    if current <= previous:
        return previous + timedelta(microseconds=1)
    return current


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware and in UTC.

    Args:
        dt: datetime to convert (can be None, naive, or timezone-aware)

    Returns:
        Optional[datetime]: UTC timezone-aware datetime, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)
