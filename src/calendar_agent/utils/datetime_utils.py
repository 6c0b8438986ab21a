"""
Calendar Agent Datetime Utilities

This module provides datetime parsing and formatting utilities:
- parse_iso_datetime: Parse an ISO 8601 string into a naive UTC datetime (naive input is local time)
- to_naive_utc: Normalise an aware or naive datetime for storage
- format_display_datetime: Format a stored datetime for messages, in local time
- current_datetime_info: Current date/time in the configured timezone
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import pytz

from calendar_agent.constants import DEFAULT_TIMEZONE, DISPLAY_DATETIME_FORMAT


def to_naive_utc(dt: datetime, timezone=pytz.UTC) -> datetime:
    """
    Convert a datetime into the naive UTC form used by the database.

    Naive datetimes are read as wall-clock time in the given timezone.
    """
    if dt.tzinfo is None:
        dt = timezone.localize(dt)
    return dt.astimezone(pytz.UTC).replace(tzinfo=None)


def parse_iso_datetime(value: Any, timezone=DEFAULT_TIMEZONE) -> datetime:
    """
    Parse an ISO 8601 value into a naive UTC datetime.

    Args:
        value: ISO 8601 string (YYYY-MM-DD, YYYY-MM-DDTHH:MM[:SS][Z|+HH:MM])
            or a datetime instance
        timezone: Zone for values without an offset

    Returns:
        Naive datetime in UTC

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return to_naive_utc(value, timezone)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid datetime value: {value!r}")

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid ISO 8601 datetime: {value!r}") from None
    return to_naive_utc(dt, timezone)


def parse_optional_datetime(value: Any, timezone=DEFAULT_TIMEZONE) -> Optional[datetime]:
    if value is None or value == "":
        return None
    return parse_iso_datetime(value, timezone)


def format_display_datetime(dt: Optional[datetime], timezone=DEFAULT_TIMEZONE) -> str:
    """Format a stored (naive UTC) datetime as wall-clock time in the given timezone."""
    if not dt:
        return ""
    if dt.tzinfo is None:
        dt = pytz.UTC.localize(dt)
    return dt.astimezone(timezone).strftime(DISPLAY_DATETIME_FORMAT)


def current_datetime_info(timezone=DEFAULT_TIMEZONE) -> Dict[str, Any]:
    """
    Get current date and time in standardized formats to help with date calculations.

    Returns:
        Dictionary with current datetime information in multiple formats
    """
    now = datetime.now(timezone)
    return {
        "current_date": now.strftime("%Y-%m-%d"),
        "current_datetime_local": now.isoformat(),
        "current_datetime_utc": now.astimezone(pytz.UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "weekday": now.strftime("%A"),
        "week_start": (now - timedelta(days=now.weekday())).strftime("%Y-%m-%d"),
        "week_end": (now + timedelta(days=6 - now.weekday())).strftime("%Y-%m-%d"),
        "timezone": str(timezone),
    }
