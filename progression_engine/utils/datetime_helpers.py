"""
Calendar Date Utilities

All progression rules compare calendar dates, never instants:
- A "day" is a proleptic Gregorian date with no time-of-day component
- "Today" is resolved once, at the edge, in the user's (or default) timezone
- Everything below the edge takes plain `date` values
"""

import logging
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from progression_engine import config

logger = logging.getLogger(__name__)


def get_timezone(tz_name: Optional[str] = None) -> ZoneInfo:
    """
    Resolve a timezone name, falling back to the configured default

    Args:
        tz_name: IANA timezone (e.g., "Asia/Riyadh"); None uses DEFAULT_TIMEZONE

    Returns:
        ZoneInfo object
    """
    tz_str = tz_name or config.DEFAULT_TIMEZONE

    try:
        return ZoneInfo(tz_str)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.error(f"Invalid timezone '{tz_str}': {e}")
        return ZoneInfo("UTC")


def now_in_timezone(tz_name: Optional[str] = None) -> datetime:
    """Current timezone-aware datetime in the given zone"""
    return datetime.now(get_timezone(tz_name))


def today_in_timezone(tz_name: Optional[str] = None) -> date:
    """
    Get today's calendar date in a timezone

    Args:
        tz_name: IANA timezone; None uses DEFAULT_TIMEZONE

    Returns:
        Today's date in that timezone
    """
    return now_in_timezone(tz_name).date()


def to_date(value: Union[date, datetime, str]) -> date:
    """
    Normalize a date-like value to a plain date

    Datetimes keep their own calendar date (no timezone conversion).
    Strings must be ISO formatted (YYYY-MM-DD).
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def day_of_year(day: date) -> int:
    """1-based ordinal of the day within its year (Jan 1 == 1)"""
    return day.timetuple().tm_yday


def days_between(start: date, end: date) -> int:
    """Signed number of days from start to end"""
    return (end - start).days


def date_range(end: date, length: int) -> Iterator[date]:
    """
    Yield `length` consecutive dates ending at `end`, oldest first

    A non-positive length yields nothing.
    """
    for offset in range(max(length, 0) - 1, -1, -1):
        yield end - timedelta(days=offset)
