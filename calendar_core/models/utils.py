# File: calendar_core/models/utils.py
"""
Factory functions building typed models from loose dictionaries
(JSON payloads, camelCase or snake_case keys).
"""

from datetime import datetime, date
from typing import Any, Dict, List, Optional, Union

from .availability import (
    AvailabilityPolicy,
    BlockedSpan,
    BusinessHours,
    Resource,
    SlotTemplate,
    TimeOff,
)
from .calendar import Occurrence
from .common import coerce_datetime
from .recurrence import RecurrencePattern, WEEKDAY_CODES

# rrule.js numeric frequencies
_NUMERIC_FREQUENCIES = ("YEARLY", "MONTHLY", "WEEKLY", "DAILY", "HOURLY", "MINUTELY")


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    """Return the first key present (camelCase and snake_case spellings)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _parse_exdate(value: Any) -> Optional[Union[datetime, date]]:
    """Date-only strings exclude a whole day, date-times one instant."""
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, str):
        if 'T' not in value and len(value.strip()) == 10:
            parsed = coerce_datetime(value)
            return parsed.date() if parsed else None
        return coerce_datetime(value)
    return None


def pattern_from_dict(data: Union[dict, str], dtstart: Optional[datetime] = None) -> RecurrencePattern:
    """
    Create RecurrencePattern from a dict or RRULE text.

    Unparseable input still yields a pattern (with the raw text as its
    frequency) so the expander can report it and degrade the event.
    """
    if isinstance(data, str):
        try:
            return RecurrencePattern.from_rrule_string(data, dtstart=dtstart)
        except ValueError:
            return RecurrencePattern(frequency=data, dtstart=dtstart)

    if 'rrule' in data and isinstance(data['rrule'], str):
        return pattern_from_dict(data['rrule'], dtstart=dtstart)

    raw_freq = _pick(data, 'freq', 'frequency', default='')
    if isinstance(raw_freq, int) and 0 <= raw_freq < len(_NUMERIC_FREQUENCIES):
        raw_freq = _NUMERIC_FREQUENCIES[raw_freq]

    weekdays = []
    for day in _as_list(_pick(data, 'byweekday', 'by_weekday', 'byWeekday', 'byday')):
        if isinstance(day, int) and 0 <= day < len(WEEKDAY_CODES):
            weekdays.append(WEEKDAY_CODES[day])
        else:
            weekdays.append(str(day))

    return RecurrencePattern(
        frequency=str(raw_freq),
        interval=_pick(data, 'interval', default=1),
        count=_pick(data, 'count'),
        until=coerce_datetime(_pick(data, 'until')),
        by_weekday=weekdays,
        by_month_day=_as_list(_pick(data, 'bymonthday', 'by_month_day', 'byMonthDay')),
        by_month=_as_list(_pick(data, 'bymonth', 'by_month', 'byMonth')),
        by_set_pos=_as_list(_pick(data, 'bysetpos', 'by_set_pos', 'bySetPos')),
        by_hour=_as_list(_pick(data, 'byhour', 'by_hour', 'byHour')),
        by_minute=_as_list(_pick(data, 'byminute', 'by_minute', 'byMinute')),
        dtstart=coerce_datetime(_pick(data, 'dtstart')) or dtstart,
    )


def occurrence_from_dict(data: dict) -> Occurrence:
    """Create Occurrence (with optional recurrence) from dictionary."""
    start = coerce_datetime(_pick(data, 'start'))
    if start is None:
        raise ValueError(f"Event has no parseable start: {data.get('title', data.get('id'))}")
    end = coerce_datetime(_pick(data, 'end')) or start

    pattern = None
    raw_rule = _pick(data, 'rrule', 'pattern', 'recurrence')
    if raw_rule:
        pattern = pattern_from_dict(raw_rule, dtstart=start)
        pattern.exdates = [
            ex for ex in (_parse_exdate(x) for x in _as_list(_pick(data, 'exdates', 'exdate')))
            if ex is not None
        ]
        for raw_override in _as_list(_pick(data, 'overrides')):
            override = occurrence_from_dict(raw_override)
            if override.recurrence_id is not None:
                pattern.overrides[override.recurrence_id] = override

    resource_id = _pick(data, 'resourceId', 'resource_id')

    return Occurrence(
        event_id=str(_pick(data, 'id', 'uid', 'event_id', default='')),
        title=str(_pick(data, 'title', 'summary', default='Untitled Event')),
        start=start,
        end=end,
        all_day=bool(_pick(data, 'allDay', 'all_day', default=False)),
        resource_id=str(resource_id) if resource_id is not None else None,
        resource_ids=[str(rid) for rid in _as_list(_pick(data, 'resourceIds', 'resource_ids'))],
        recurrence_id=coerce_datetime(_pick(data, 'recurrenceId', 'recurrence_id')),
        pattern=pattern,
        description=_pick(data, 'description'),
        location=_pick(data, 'location'),
        color=_pick(data, 'color'),
        data=dict(_pick(data, 'data', default={})),
    )


def slot_template_from_dict(data: Optional[dict]) -> SlotTemplate:
    """Create SlotTemplate from the {recurring, one_time} structure."""
    data = data or {}
    return SlotTemplate(
        recurring=dict(_pick(data, 'recurring', default={})),
        one_time=list(_pick(data, 'one_time', 'oneTime', default=[])),
    )


def blocked_span_from_dict(data: dict) -> BlockedSpan:
    """Create BlockedSpan, expanding its optional rrule/exdates."""
    start = coerce_datetime(_pick(data, 'start'))
    end = coerce_datetime(_pick(data, 'end'))
    if start is None or end is None:
        raise ValueError(f"Blocked slot needs start and end: {data.get('reason')}")

    pattern = None
    raw_rule = _pick(data, 'rrule', 'pattern')
    if raw_rule:
        pattern = pattern_from_dict(raw_rule, dtstart=start)
        pattern.exdates = [
            ex for ex in (_parse_exdate(x) for x in _as_list(_pick(data, 'exdates')))
            if ex is not None
        ]

    return BlockedSpan(start=start, end=end, reason=_pick(data, 'reason'), pattern=pattern)


def time_off_from_dict(data: dict) -> TimeOff:
    """Create TimeOff from dictionary."""
    start = coerce_datetime(_pick(data, 'start'))
    end = coerce_datetime(_pick(data, 'end'))
    if start is None or end is None:
        raise ValueError(f"Time-off needs start and end: {data.get('title')}")
    return TimeOff(
        id=str(_pick(data, 'id', default='')),
        title=str(_pick(data, 'title', default='Time Off')),
        start=start,
        end=end,
        status=_pick(data, 'status', default='pending'),
        notes=_pick(data, 'notes'),
    )


def business_hours_from_dict(data: Optional[dict]) -> Optional[BusinessHours]:
    if data is None:
        return None
    days = _pick(data, 'daysOfWeek', 'days_of_week')
    return BusinessHours(
        days_of_week=list(days) if days is not None else None,
        start_time=_pick(data, 'startTime', 'start_time'),
        end_time=_pick(data, 'endTime', 'end_time'),
    )


def resource_from_dict(data: dict) -> Resource:
    """
    Create Resource from dictionary.

    availableSlots (whitelist) takes precedence over blockedSlots
    (blacklist). blockedSlots may be a list of spans or a
    {recurring, one_time, spans} template.
    """
    available = _pick(data, 'availableSlots', 'available_slots')
    blocked = _pick(data, 'blockedSlots', 'blocked_slots')

    if available is not None:
        policy = AvailabilityPolicy.whitelist(slot_template_from_dict(available))
    elif isinstance(blocked, list):
        policy = AvailabilityPolicy.blacklist(blocked_spans=[blocked_span_from_dict(b) for b in blocked])
    elif isinstance(blocked, dict):
        spans: List[BlockedSpan] = [blocked_span_from_dict(b) for b in _as_list(blocked.get('spans'))]
        policy = AvailabilityPolicy.blacklist(slot_template_from_dict(blocked), spans)
    else:
        policy = AvailabilityPolicy.none()

    return Resource(
        id=str(_pick(data, 'id', default='')),
        name=str(_pick(data, 'name', 'title', default='Unnamed Resource')),
        policy=policy,
        business_hours=business_hours_from_dict(_pick(data, 'businessHours', 'business_hours')),
        time_offs=[time_off_from_dict(t) for t in _as_list(_pick(data, 'timeOffs', 'time_offs'))],
        color=_pick(data, 'color'),
    )


def events_from_list(raw_events: List[Dict[str, Any]]) -> List[Occurrence]:
    """Convert a list of event dicts, preserving input order."""
    return [occurrence_from_dict(raw) for raw in raw_events]
