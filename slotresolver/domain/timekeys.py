"""
Date-key and time-of-day normalization.

Date keys are ``YYYY-MM-DD`` strings, so their lexicographic order is the
chronological order. Times are ``HH:MM`` strings bounded by the day window
``00:00``-``23:59``.
"""

import re
from datetime import date, datetime
from typing import Optional, Union

import pendulum

DAY_START = "00:00"
DAY_END = "23:59"

DateLike = Union[date, str]

# Accepts "8", "08:00", "8:5" and "08:00:00[.fff]"; seconds are dropped.
_TIME_PATTERN = re.compile(r"^\s*(\d{1,2})(?::(\d{1,2}))?(?::\d{1,2}(?:\.\d+)?)?\s*$")


def to_calendar_date(value: DateLike) -> date:
    """
    Truncate a date, datetime or ISO string to a plain calendar date.

    Datetimes keep their own wall-clock date; no timezone conversion happens.

    Raises:
        ValueError: If a string cannot be parsed as a date
    """
    if isinstance(value, datetime):
        return date(value.year, value.month, value.day)
    if isinstance(value, date):
        return date(value.year, value.month, value.day)

    parsed = pendulum.parse(str(value).strip(), exact=True)
    if not isinstance(parsed, date):
        raise ValueError(f"Not a calendar date: {value!r}")
    return date(parsed.year, parsed.month, parsed.day)


def parse_calendar_date(value: Optional[DateLike]) -> Optional[date]:
    """Like ``to_calendar_date`` but returns None for missing or malformed input."""
    if value is None or value == "":
        return None
    try:
        return to_calendar_date(value)
    except ValueError:
        return None


def to_pendulum_date(value: DateLike) -> pendulum.Date:
    """Calendar date as a ``pendulum.Date`` for day stepping and differences."""
    day = to_calendar_date(value)
    return pendulum.date(day.year, day.month, day.day)


def to_date_key(value: DateLike) -> str:
    """Derive the locale-invariant ``YYYY-MM-DD`` key for a date."""
    return to_calendar_date(value).isoformat()


def normalize_time(value: Optional[str], default: str) -> str:
    """
    Map a free-text time to ``HH:MM``.

    Missing or invalid input yields ``default``.
    """
    if value is None:
        return default

    match = _TIME_PATTERN.match(str(value))
    if not match:
        return default

    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    if hour > 23 or minute > 59:
        return default

    return f"{hour:02d}:{minute:02d}"


def normalize_start_hour(value: Optional[str]) -> str:
    """Normalize a start hour, defaulting to the start of the day."""
    return normalize_time(value, DAY_START)


def normalize_end_hour(value: Optional[str]) -> str:
    """
    Normalize an end hour, defaulting to the end of the day.

    An end of ``00:00`` means "no explicit end" and becomes ``23:59``.
    """
    normalized = normalize_time(value, DAY_END)
    if normalized == DAY_START:
        return DAY_END
    return normalized


def time_to_minutes(value: str) -> int:
    """Minutes since midnight for an ``HH:MM`` string (invalid input counts as 00:00)."""
    hours, minutes = normalize_time(value, DAY_START).split(":")
    return int(hours) * 60 + int(minutes)
