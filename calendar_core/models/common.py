# File: calendar_core/models/common.py

import re
from datetime import datetime, date, time
from typing import Optional, Union

_TIME_12H = re.compile(r"^(\d{1,2})(?::(\d{2}))?(?::(\d{2}))?\s*(AM|PM)$")
_TIME_24H = re.compile(r"^(\d{1,2})(?::(\d{2}))?(?::(\d{2}))?$")
_SCHEDULE_DATE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")

MINUTES_PER_DAY = 24 * 60


def parse_iso_datetime(date_str: Optional[str]) -> Optional[datetime]:
    """Robustly parse ISO date strings with 'Z' or offsets."""
    if not date_str:
        return None
    try:
        # Python < 3.11 does not accept 'Z' in fromisoformat
        clean_str = date_str.replace('Z', '+00:00')
        return datetime.fromisoformat(clean_str)
    except ValueError:
        # Fallback for simple date strings without time
        try:
            return datetime.strptime(date_str, "%Y-%m-%d")
        except ValueError:
            return None


def coerce_datetime(value: Union[datetime, date, str, None]) -> Optional[datetime]:
    """Accept a datetime, a date (midnight) or an ISO string."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        return parse_iso_datetime(value)
    return None


def parse_time_of_day(time_str: Optional[str]) -> Optional[int]:
    """
    Parse a schedule time string into minutes after midnight.

    Accepts 24-hour 'HH:mm' or 'HH:mm:ss' ('09:00', '17:30:45', '24:00')
    and 12-hour forms with an AM/PM suffix ('9 AM', '12:00 AM', '11:30 PM').
    Seconds are validated and then dropped.

    Returns:
        Minutes after midnight, or None when the string is malformed
    """
    if not isinstance(time_str, str):
        return None

    cleaned = time_str.strip().upper()

    match = _TIME_12H.match(cleaned)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        second = int(match.group(3) or 0)
        if not 1 <= hour <= 12 or minute > 59 or second > 59:
            return None
        if match.group(4) == "PM" and hour != 12:
            hour += 12
        elif match.group(4) == "AM" and hour == 12:
            hour = 0
        return hour * 60 + minute

    match = _TIME_24H.match(cleaned)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        second = int(match.group(3) or 0)
        if hour > 24 or minute > 59 or second > 59:
            return None
        if hour == 24 and (minute or second):
            return None
        return hour * 60 + minute

    return None


def parse_schedule_date(date_str: Optional[str]) -> Optional[date]:
    """Parse a one-time schedule date in 'DD-MM-YYYY' form."""
    if not isinstance(date_str, str):
        return None

    match = _SCHEDULE_DATE.match(date_str.strip())
    if not match:
        return None

    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None
