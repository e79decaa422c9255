# File: calendar_core/utils/dates.py
"""
Date/time helpers shared by the expander, resolver and layout engine.

All calendar arithmetic is done on naive wall-clock datetimes. Aware
inputs are converted into the configured pytz zone first and converted
back by the caller with from_wall_time().
"""

from datetime import datetime, date, time, timedelta
from typing import List, Optional, Union

import pytz

from calendar_core.core.config_manager import Config
from calendar_core.models.enums import GridType
from calendar_core.utils.logger import setup_logger

logger = setup_logger(__name__)

ONE_MINUTE = timedelta(minutes=1)


def get_timezone(name: Optional[str] = None) -> pytz.BaseTzInfo:
    """
    Resolve a pytz zone by name (default: Config.TIMEZONE).

    Unknown names fall back to UTC with a warning.
    """
    zone_name = name or Config.TIMEZONE
    try:
        return pytz.timezone(zone_name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone '{zone_name}', falling back to UTC")
        return pytz.UTC


def is_aware(dt: datetime) -> bool:
    return dt.tzinfo is not None and dt.tzinfo.utcoffset(dt) is not None


def to_wall_time(dt: datetime, tz: pytz.BaseTzInfo) -> datetime:
    """Naive wall-clock time of dt in tz (naive input is returned as is)."""
    if not is_aware(dt):
        return dt
    return dt.astimezone(tz).replace(tzinfo=None)


def from_wall_time(dt: datetime, tz: pytz.BaseTzInfo) -> datetime:
    """Attach tz to a naive wall-clock time, resolving DST via localize()."""
    if is_aware(dt):
        return dt.astimezone(tz)
    return tz.normalize(tz.localize(dt))


def as_date(value: Union[datetime, date]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def start_of_day(value: Union[datetime, date]) -> datetime:
    return datetime.combine(as_date(value), time.min)


def end_of_day(value: Union[datetime, date]) -> datetime:
    """Last minute of the day (inclusive window end)."""
    return start_of_day(value) + timedelta(days=1) - ONE_MINUTE


def start_of_hour(dt: datetime) -> datetime:
    return dt.replace(minute=0, second=0, microsecond=0)


def start_of_unit(dt: datetime, grid_type: GridType) -> datetime:
    """Truncate to the start of the day or hour column holding dt."""
    if grid_type == GridType.HOUR:
        return start_of_hour(dt)
    return start_of_day(dt)


def unit_delta(grid_type: GridType) -> timedelta:
    if grid_type == GridType.HOUR:
        return timedelta(hours=1)
    return timedelta(days=1)


def truncate_to_minute(dt: datetime) -> datetime:
    return dt.replace(second=0, microsecond=0)


def hours_of_day(value: Union[datetime, date], hours: List[int]) -> List[datetime]:
    """Hour-column starts for the given hours of one day."""
    midnight = start_of_day(value)
    return [midnight + timedelta(hours=hour) for hour in hours]


def days_between(first: date, last: date) -> List[date]:
    """Inclusive list of days from first to last."""
    if last < first:
        return []
    return [first + timedelta(days=offset) for offset in range((last - first).days + 1)]
