# File: calendar_core/utils/visible_hours.py
"""
Helpers for the hours shown on the vertical axis of day/week views
and the hour columns of timeline views.
"""

import math
from datetime import date, datetime
from typing import List, Optional

from calendar_core.models.config import VisibleHours
from calendar_core.utils.dates import hours_of_day


def _bounds(visible_hours: Optional[VisibleHours]) -> tuple:
    return (visible_hours or VisibleHours()).bounds()


def get_visible_hours(visible_hours: Optional[VisibleHours] = None) -> List[int]:
    """Whole hours to render, clamped to 0-24 (e.g. 8..18 -> [8, ..., 17])."""
    start, end = _bounds(visible_hours)
    return list(range(int(math.floor(start)), int(math.ceil(end))))


def is_visible_hour(hour: int, visible_hours: Optional[VisibleHours] = None) -> bool:
    start, end = _bounds(visible_hours)
    return start <= hour < end


def get_visible_hours_count(visible_hours: Optional[VisibleHours] = None) -> int:
    """Number of visible hours; inverted or empty ranges give 0."""
    return len(get_visible_hours(visible_hours))


def hour_columns(days: List[date], visible_hours: Optional[VisibleHours] = None) -> List[datetime]:
    """Column starts of an hour grid spanning several days."""
    hours = get_visible_hours(visible_hours)
    columns: List[datetime] = []
    for day in days:
        columns.extend(hours_of_day(day, hours))
    return columns
