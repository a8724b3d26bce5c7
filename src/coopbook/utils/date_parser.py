"""Date parsing utilities."""

import re
from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_DAYS_AGO = re.compile(r"^(\d+)\s+days?\s+ago$")
_MONTHS_AGO = re.compile(r"^(\d+)\s+months?\s+ago$")


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports:
    - ISO dates: "2025-01-28"
    - Day-first dates: "28/01/2025", "28 January 2025"
    - Relative dates: "today", "yesterday", "tomorrow", "3 days ago",
      "2 months ago"

    Args:
        date_str: Date string
        today: Reference date for relative expressions (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in relative_dates:
        return relative_dates[text]

    match = _DAYS_AGO.match(text)
    if match:
        return today - timedelta(days=int(match.group(1)))
    match = _MONTHS_AGO.match(text)
    if match:
        return today - relativedelta(months=int(match.group(1)))

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        return date_parser.parse(text, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
