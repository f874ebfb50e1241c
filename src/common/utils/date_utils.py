"""Utility functions for date manipulation."""

from datetime import datetime

import pytz


def local_time(tz_name: str) -> datetime:
    """Returns the current time in the given IANA timezone (falls back to UTC)."""
    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        tz = pytz.utc
    return datetime.now(tz)
