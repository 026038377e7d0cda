"""
Date Range Utilities

All ranges in Ichinichi are inclusive of both endpoints, so a range
that starts and ends on the same day spans one day.

IMPORTANT: The validity checks here never raise and never clamp.
They answer True/False so the caller can show a message.
"""

import calendar
from datetime import date
from typing import Optional, Union


DateLike = Union[date, str, None]


def parse_date(value: DateLike) -> Optional[date]:
    """Parse a date or ISO 'YYYY-MM-DD' string; None if it isn't one."""
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def is_valid_date(value: DateLike) -> bool:
    return parse_date(value) is not None


def days_between(start: date, end: date) -> int:
    """
    Inclusive day count between two dates.

    Requires end >= start; returns 1 when they are equal.
    A reversed range gives zero or a negative number.
    """
    return (end - start).days + 1


def is_valid_range(start: DateLike, end: DateLike) -> bool:
    """Both values are calendar dates and start <= end."""
    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date is None or end_date is None:
        return False
    return start_date <= end_date


def today() -> date:
    return date.today()


def add_months(value: date, months: int) -> date:
    """
    Shift by whole months, clamping the day to the target month's length.

    Jan 31 + 1 month -> Feb 28 (or Feb 29 in a leap year).
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def add_years(value: date, years: int) -> date:
    return add_months(value, years * 12)


def default_usage_period(start: Optional[date] = None) -> tuple[date, date]:
    """Default usage window for a new item: one year from start (today)."""
    start = start or today()
    return start, add_years(start, 1)


def format_date(value: DateLike) -> str:
    """Format as YYYY-MM-DD; empty string if not a date."""
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else ""


def format_date_display(value: DateLike) -> str:
    """Format for display, e.g. '01 Jan 2024'."""
    parsed = parse_date(value)
    return parsed.strftime("%d %b %Y") if parsed else ""
