"""Month parsing and calendar helpers."""

import calendar
from datetime import date, datetime
from typing import Optional, Tuple


MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)


def parse_month(value: str) -> int:
    """Parse a month number (1-12) or an English month name.

    Names are case-insensitive and may be abbreviated to their first three
    letters ("jan", "JANUARY" and "January" all resolve to 1).

    Raises:
        ValueError: If the value is not a recognizable month
    """
    text = str(value).strip()
    lowered = text.lower()

    for number, name in enumerate(MONTH_NAMES, start=1):
        if lowered == name or lowered == name[:3]:
            return number

    try:
        number = int(text)
    except ValueError:
        raise ValueError(f"Invalid month: {value!r}") from None

    if not 1 <= number <= 12:
        raise ValueError(f"Month out of range: {number}")
    return number


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1].capitalize()


def resolve_year(year: Optional[int]) -> int:
    """Return ``year`` or the current local year"""
    if year is None:
        return datetime.now().year
    return year


def month_bounds(month: int, year: Optional[int] = None) -> Tuple[date, date]:
    """First and last calendar day of a month"""
    year = resolve_year(year)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
