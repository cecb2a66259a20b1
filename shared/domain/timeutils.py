"""
Time-of-day and calendar helpers.

All calendar math is date-only and UTC-anchored so that the day of week
of a given date never depends on the server timezone.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, time, timedelta
from datetime import timezone as dt_timezone

from django.utils import timezone  # type: ignore

_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")

MINUTES_PER_DAY = 24 * 60


def parse_time_to_minutes(value) -> int | None:
    """Minutes since midnight for ``HH:MM[:SS]`` strings or ``time`` objects.

    Returns ``None`` for anything malformed; seconds are accepted and ignored.
    """
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time(minutes: int) -> str:
    hours, mins = divmod(int(minutes), 60)
    return f"{hours:02d}:{mins:02d}"


def minutes_to_clock(minutes: int) -> time:
    hours, mins = divmod(int(minutes), 60)
    return time(hour=hours, minute=mins)


def parse_date(value) -> date | None:
    """``date`` for ``YYYY-MM-DD`` strings (or dates), ``None`` when invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def day_of_week(value: date) -> int:
    """0..6 with Sunday = 0."""
    return (value.isoweekday()) % 7


def add_months(value: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length.

    Jan 31 + 1 month is Feb 28 (Feb 29 in leap years), never Mar 3.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def daterange(start: date, num_days: int):
    for offset in range(num_days):
        yield start + timedelta(days=offset)


def utc_today() -> date:
    return timezone.now().astimezone(dt_timezone.utc).date()
