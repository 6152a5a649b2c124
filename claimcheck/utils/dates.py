"""Date parsing and month arithmetic for claim verification."""

import calendar
import logging
import re
from datetime import date, datetime
from typing import Union

from .errors import InvalidDate

logger = logging.getLogger(__name__)

# Tried in order after the time component has been stripped
DATE_FORMATS = (
    "%Y-%m-%d",   # ISO
    "%Y:%m:%d",   # EXIF
    "%Y/%m/%d",
    "%m/%d/%Y",   # US
    "%B %d, %Y",  # May 10, 2024
    "%b %d, %Y",  # May 10, 2024 / Sep 3, 2024
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",   # 10 May 2024
    "%d %b %Y",
)

# "2024:05:10 14:22:01", "2024-05-10T14:22:01Z", "2024-05-10 14:22"
_TIME_SUFFIX = re.compile(r"[T ]\d{1,2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?$")

DateInput = Union[str, date, datetime]


def parse_claim_date(value: DateInput) -> date:
    """
    Parse a claim or capture date from the formats documents and cameras use.

    Args:
        value: Date text, or a date/datetime which is returned as a date

    Returns:
        Calendar date

    Raises:
        InvalidDate: If the value is empty or matches no known format
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or not str(value).strip():
        raise InvalidDate.build("Date is missing", value=value)

    text = " ".join(str(value).split())
    text = _TIME_SUFFIX.sub("", text).strip()

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    logger.warning(f"Unrecognized date format: {value!r}")
    raise InvalidDate.build(f"Could not parse date '{value}'", value=str(value))


def subtract_one_month(day: date) -> date:
    """
    Return the same day one month earlier.

    When the previous month is shorter, the day is clamped to that month's
    last day: March 31 becomes February 29 in a leap year and February 28
    otherwise.
    """
    year, month = (day.year - 1, 12) if day.month == 1 else (day.year, day.month - 1)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def format_display_date(day: date) -> str:
    """Format a date as "May 10, 2024"."""
    return f"{day.strftime('%B')} {day.day}, {day.year}"
