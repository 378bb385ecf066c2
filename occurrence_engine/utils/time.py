"""Server clock helpers. Only the API edge reads the clock."""

from datetime import date, datetime
from zoneinfo import ZoneInfo


def today_in(tz_name: str) -> date:
    """
    Current calendar date in the given IANA timezone.
    """
    return datetime.now(ZoneInfo(tz_name)).date()


def now_naive(tz_name: str) -> datetime:
    """
    Current time in the given timezone, returned as naive datetime for DB storage.
    """
    return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
