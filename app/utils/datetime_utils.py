"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """
    Attach UTC to a naive datetime.

    Some drivers (SQLite) return naive values for timezone-aware columns;
    every stored timestamp is UTC.

    Args:
        value: Datetime, naive or aware

    Returns:
        Timezone-aware datetime
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def start_of_utc_day(value: datetime | None = None) -> datetime:
    """
    Midnight UTC of the given (or current) day.

    Args:
        value: Reference datetime, defaults to now

    Returns:
        Timezone-aware midnight
    """
    value = ensure_utc(value or utc_now())
    return value.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)
