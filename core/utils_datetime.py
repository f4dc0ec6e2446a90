"""
DateTime utilities for reservation arrival times.
Everything is compared in the restaurant's local operating calendar.
"""
import math
from datetime import datetime, tzinfo
from typing import Any, Optional

import pytz


DEFAULT_TIMEZONE = pytz.timezone('America/New_York')


def get_current_datetime(tz: Optional[tzinfo] = None) -> datetime:
    """Get current datetime in the given timezone (restaurant default otherwise)."""
    return datetime.now(tz or DEFAULT_TIMEZONE)


def localize(dt: datetime, tz: tzinfo) -> datetime:
    """
    Express a datetime in the restaurant timezone.

    Naive values are taken to be restaurant-local wall clock time.
    """
    if dt.tzinfo is None:
        if hasattr(tz, 'localize'):
            return tz.localize(dt)
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def parse_arrival_time(value: Any, tz: tzinfo) -> Optional[datetime]:
    """
    Parse an arrival time into an aware datetime.

    Accepts datetime objects and ISO-8601 strings.

    Returns:
        Localized datetime, or None when the value cannot be parsed
    """
    if isinstance(value, datetime):
        return localize(value, tz)

    if isinstance(value, float) and math.isnan(value):
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        # fromisoformat on older interpreters does not take a trailing Z
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return localize(parsed, tz)

    return None
