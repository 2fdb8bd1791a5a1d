"""Date parsing utilities."""

import re
from datetime import date, datetime, time, timedelta

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIODS = ("today", "this-week", "this-month", "this-year", "last-week", "last-month", "last-year")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "15 Jan 2024") and relative ones:
    "today", "yesterday", "3 days ago", "last month", "this week", ...

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    if date_str == "today":
        return today
    if date_str == "yesterday":
        return today - timedelta(days=1)

    days_ago = re.fullmatch(r"(\d+)\s+days?\s+ago", date_str)
    if days_ago:
        return today - timedelta(days=int(days_ago.group(1)))

    # "last month" / "this week" resolve to the start of that period
    words = date_str.split()
    if len(words) == 2 and words[0] in ("last", "this") and words[1] in ("week", "month", "year"):
        start, _ = get_date_range(f"{words[0]}-{words[1]}")
        return start

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        pass

    try:
        # Indian bank messages write day first
        return date_parser.parse(date_str, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Get inclusive start and end dates for a named period.

    Raises:
        ValueError: If the period is not one of PERIODS
    """
    period = period.strip().lower()
    today = date.today()
    monday = today - timedelta(days=today.weekday())
    first_of_month = today.replace(day=1)
    first_of_year = today.replace(month=1, day=1)

    if period == "today":
        return today, today
    if period == "this-week":
        return monday, today
    if period == "this-month":
        return first_of_month, today
    if period == "this-year":
        return first_of_year, today
    if period == "last-week":
        return monday - timedelta(days=7), monday - timedelta(days=1)
    if period == "last-month":
        return first_of_month - relativedelta(months=1), first_of_month - timedelta(days=1)
    if period == "last-year":
        return first_of_year - relativedelta(years=1), first_of_year - timedelta(days=1)

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")


def day_bounds(start: date | None, end: date | None) -> tuple[datetime | None, datetime | None]:
    """Turn an inclusive date range into datetime bounds covering whole days."""
    start_dt = datetime.combine(start, time.min) if start is not None else None
    end_dt = datetime.combine(end, time.max) if end is not None else None
    return start_dt, end_dt
