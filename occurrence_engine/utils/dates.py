"""
Calendar-date helpers.

Every value handled here is a plain `datetime.date`: no time of day, no
timezone. Nothing round-trips through a timestamp.
"""

import calendar
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta
from typing import Any, Optional

ISO_DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(d: date, n: int) -> date:
    """
    Add n calendar months to d, keeping the day of month.

    If the target month is shorter, the day is clamped to its last day
    (Jan 31 + 1 month -> Feb 28/29).

    Raises:
        OverflowError: If the result falls outside the supported date range
    """
    month_index = d.month - 1 + n
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    if not MINYEAR <= year <= MAXYEAR:
        raise OverflowError(f"date out of range: {d} + {n} months")
    day = min(d.day, days_in_month(year, month))
    return date(year, month, day)


def parse_calendar_date(value: Any) -> Optional[date]:
    """
    Coerce a snapshot value into a calendar date.

    Accepts `date` objects, `datetime` objects (only the calendar part is
    kept, no timezone conversion) and ISO strings, with or without a
    trailing time component ("2026-02-10" or "2026-02-10T00:00:00Z").

    Returns None when the value cannot be interpreted.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip().split("T")[0].split(" ")[0]
        try:
            return datetime.strptime(text, ISO_DATE_FORMAT).date()
        except ValueError:
            return None
    return None


def date_key(d: date) -> str:
    """ISO `YYYY-MM-DD` key used to bucket occurrences by day."""
    return d.strftime(ISO_DATE_FORMAT)


def first_of_month(d: date) -> date:
    return d.replace(day=1)


def last_of_month(d: date) -> date:
    return d.replace(day=days_in_month(d.year, d.month))


def parse_month(month_str: str) -> date:
    """
    Parse a `YYYY-MM` string into the first day of that month.

    Raises:
        ValueError: If the string is not a valid month
    """
    try:
        return datetime.strptime(month_str.strip(), MONTH_FORMAT).date()
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid month: {month_str!r} (expected YYYY-MM)")


def format_month(d: date) -> str:
    return d.strftime(MONTH_FORMAT)


def previous_month(d: date) -> date:
    return add_months(first_of_month(d), -1)


def next_month(d: date) -> date:
    return add_months(first_of_month(d), 1)


def same_month(a: date, b: date) -> bool:
    return (a.year, a.month) == (b.year, b.month)


def month_bounds(d: date) -> tuple[date, date]:
    """(first_day, last_day) of the month containing d."""
    return first_of_month(d), last_of_month(d)


def grid_bounds(d: date) -> tuple[date, date]:
    """
    Sunday-to-Saturday range covering the whole month containing d.

    Starts at the most recent Sunday on or before the 1st and ends at the
    nearest Saturday on or after the last day.
    """
    first, last = month_bounds(d)
    # date.weekday(): Monday=0 .. Sunday=6
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    end = last + timedelta(days=(5 - last.weekday()) % 7)
    return start, end


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start's month to end's month."""
    return (end.year - start.year) * 12 + (end.month - start.month)
