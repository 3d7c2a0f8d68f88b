"""
Calendar helpers shared by the analytics modules.

Dates travel through the system as zero-padded ``YYYY-MM-DD`` strings so that
plain string comparison orders them chronologically.  ``parse_date`` is the
boundary check that keeps that true.  Weeks run Monday through Sunday.
"""

import re
from datetime import date, datetime, timedelta

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(date_str: str) -> date:
    """
    Parse a strict ISO calendar date.

    Args:
        date_str: Date string in YYYY-MM-DD form

    Returns:
        Parsed date

    Raises:
        ValueError: If the string is not a zero-padded, valid calendar date
    """
    if not isinstance(date_str, str) or not _DATE_RE.match(date_str):
        raise ValueError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError as e:
        raise ValueError(f"Invalid date: {date_str}") from e


def to_date_str(d: date) -> str:
    return d.strftime("%Y-%m-%d")


def today_str() -> str:
    return to_date_str(date.today())


def get_week_start_date(d: date | None = None) -> date:
    """
    Monday of the week containing ``d`` (default: today).

    Sunday belongs to the week that started the previous Monday.
    """
    if d is None:
        d = date.today()
    if isinstance(d, datetime):
        d = d.date()
    return d - timedelta(days=d.weekday())


def get_week_end_date(d: date | None = None) -> date:
    """Sunday of the week containing ``d`` (default: today)."""
    return get_week_start_date(d) + timedelta(days=6)


def week_start_key(date_str: str) -> str:
    """Monday of the week containing ``date_str``, as YYYY-MM-DD."""
    return to_date_str(get_week_start_date(parse_date(date_str)))


def weeks_between(date1: str, date2: str) -> int:
    """Whole weeks between two dates, ignoring order."""
    days = abs((parse_date(date2) - parse_date(date1)).days)
    return days // 7


def format_week_range(d: date | None = None) -> str:
    """Short display label for a week, e.g. ``3/2 - 3/8``."""
    start = get_week_start_date(d)
    end = get_week_end_date(d)
    return f"{start.month}/{start.day} - {end.month}/{end.day}"
