# File: calendar_core/utils/recurrence.py
"""
Adapter between RecurrencePattern and dateutil's rrule.

Both event series and repeating blocked spans are expanded here so
exception handling lives in one place. Every datetime crossing this
module is naive wall-clock time.
"""

from datetime import datetime, date, timedelta
from typing import List, Optional, Tuple, Union

import pytz
from dateutil import rrule as dr

from calendar_core.models.calendar import span_touches
from calendar_core.models.enums import Frequency
from calendar_core.models.recurrence import RecurrencePattern
from calendar_core.utils.dates import to_wall_time

Span = Tuple[datetime, datetime]


def _wall(value: datetime, tz: Optional[pytz.BaseTzInfo]) -> datetime:
    if tz is None:
        return value.replace(tzinfo=None) if value.tzinfo else value
    return to_wall_time(value, tz)


def _check_range(name: str, values: List[int], low: int, high: int, allow_negative: bool = False):
    for value in values:
        magnitude = abs(int(value)) if allow_negative else int(value)
        if not low <= magnitude <= high:
            raise ValueError(f"Invalid {name} {value}")


def build_rule(
    pattern: RecurrencePattern,
    anchor: datetime,
    tz: Optional[pytz.BaseTzInfo] = None,
) -> dr.rrule:
    """
    Translate a pattern into a dateutil rrule anchored at wall-clock time.

    The rule text is parsed by dateutil.rrule.rrulestr, so every RFC 5545
    part (BYSETPOS, BYHOUR, WKST, ...) is honoured; unknown parts raise.

    Args:
        pattern: The repetition rule
        anchor: Series start, used when the pattern has no dtstart
        tz: Zone used to convert aware dtstart/until values

    Raises:
        ValueError: If the pattern cannot describe a valid rule
    """
    if not isinstance(pattern.frequency, Frequency):
        raise ValueError(f"Unsupported frequency '{pattern.frequency}'")

    if int(pattern.interval) < 1:
        raise ValueError(f"Interval must be >= 1, got {pattern.interval}")

    if pattern.count is not None and pattern.until is not None:
        raise ValueError("COUNT and UNTIL are mutually exclusive")
    if pattern.count is not None and int(pattern.count) < 1:
        raise ValueError(f"Count must be >= 1, got {pattern.count}")

    _check_range("month day", pattern.by_month_day, 1, 31, allow_negative=True)
    _check_range("month", pattern.by_month, 1, 12)
    _check_range("hour", pattern.by_hour, 0, 23)
    _check_range("minute", pattern.by_minute, 0, 59)

    dtstart = _wall(pattern.dtstart or anchor, tz).replace(microsecond=0)

    # UNTIL in the text may carry a zone; it is replaced by the wall-clock value below
    rule = dr.rrulestr(pattern.to_rrule_string(), dtstart=dtstart, ignoretz=True)
    if not isinstance(rule, dr.rrule):
        raise ValueError(f"Expected a single RRULE, got '{pattern.to_rrule_string()}'")

    if pattern.until is not None:
        rule = rule.replace(until=_wall(pattern.until, tz))
    return rule


def is_excluded(
    instant: datetime,
    exdates: List[Union[datetime, date]],
    tz: Optional[pytz.BaseTzInfo] = None,
) -> bool:
    """Whether instant is listed as an exception (a date excludes its whole day)."""
    for excluded in exdates:
        if isinstance(excluded, datetime):
            if _wall(excluded, tz) == instant:
                return True
        elif excluded == instant.date():
            return True
    return False


def generate_spans(
    pattern: RecurrencePattern,
    anchor: datetime,
    duration: timedelta,
    range_start: datetime,
    range_end: datetime,
    tz: Optional[pytz.BaseTzInfo] = None,
) -> List[Span]:
    """
    Every (start, end) span of the rule touching [range_start, range_end],
    with exception instants removed.

    The rule is queried from range_start - duration so spans that begin
    before the range but reach into it are included.

    Raises:
        ValueError: If the pattern is malformed
        TypeError: If the rule mixes naive and aware values
    """
    rule = build_rule(pattern, anchor, tz)
    instants = rule.between(range_start - duration, range_end, inc=True)

    spans = []
    for instant in instants:
        if is_excluded(instant, pattern.exdates, tz):
            continue
        end = instant + duration
        if span_touches(instant, end, range_start, range_end):
            spans.append((instant, end))
    return spans


def is_rule_instant(
    pattern: RecurrencePattern,
    anchor: datetime,
    instant: datetime,
    tz: Optional[pytz.BaseTzInfo] = None,
) -> bool:
    """Whether instant is generated by the rule and not excluded."""
    rule = build_rule(pattern, anchor, tz)
    if not rule.between(instant, instant, inc=True):
        return False
    return not is_excluded(instant, pattern.exdates, tz)
