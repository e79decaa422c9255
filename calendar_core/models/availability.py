# File: calendar_core/models/availability.py
"""
Data models for resource availability: slot templates, blocked spans,
business hours and time-off requests.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Dict, List, Optional, Set, Tuple, Union

from .common import parse_time_of_day, parse_schedule_date, MINUTES_PER_DAY
from .config import clamp_hour
from .enums import AvailabilityReason, PolicyKind, TimeOffStatus
from .recurrence import RecurrencePattern

DAY_KEYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


def normalize_day_key(name: str) -> Optional[str]:
    """Map 'Monday', 'mon', 'MO' to the 'mon' key used by slot templates."""
    # Two letters are enough to tell weekdays apart
    prefix = str(name).strip().lower()[:2]
    for key in DAY_KEYS:
        if key.startswith(prefix) and len(prefix) == 2:
            return key
    return None


@dataclass
class TimeRange:
    """A time-of-day range such as '09:00'-'17:00' or '9 AM'-'5 PM'."""
    start: str
    end: str

    def to_minutes(self) -> Optional[Tuple[int, int]]:
        """
        Return (start, end) minutes after midnight, or None when malformed.
        An end before the start spans midnight.
        """
        start = parse_time_of_day(self.start)
        end = parse_time_of_day(self.end)
        if start is None or end is None:
            return None
        if end < start:
            end += MINUTES_PER_DAY
        return start, end

    def contains_minute(self, minute_of_day: int) -> bool:
        bounds = self.to_minutes()
        if bounds is None:
            return False
        return bounds[0] <= minute_of_day < bounds[1]


def _to_ranges(schedule) -> List[TimeRange]:
    ranges = []
    for item in schedule or []:
        if isinstance(item, TimeRange):
            ranges.append(item)
        elif isinstance(item, dict):
            ranges.append(TimeRange(start=item.get('start', ''), end=item.get('end', '')))
    return ranges


@dataclass
class DaySchedule:
    """Recurring schedule for one weekday."""
    enabled: bool = True
    schedule: List[TimeRange] = field(default_factory=list)

    def __post_init__(self):
        self.schedule = _to_ranges(self.schedule)


@dataclass
class OneTimeSchedule:
    """Schedule for one specific date ('DD-MM-YYYY')."""
    date: Union[str, date]
    enabled: bool = True
    schedule: List[TimeRange] = field(default_factory=list)

    def __post_init__(self):
        self.schedule = _to_ranges(self.schedule)

    @property
    def parsed_date(self) -> Optional[date]:
        if isinstance(self.date, datetime):
            return self.date.date()
        if isinstance(self.date, date):
            return self.date
        return parse_schedule_date(self.date)


@dataclass
class SlotTemplate:
    """Weekly recurring template plus one-time date entries."""
    recurring: Dict[str, DaySchedule] = field(default_factory=dict)
    one_time: List[OneTimeSchedule] = field(default_factory=list)

    def __post_init__(self):
        """Normalize weekday keys and raw dict entries."""
        recurring: Dict[str, DaySchedule] = {}
        for name, day in (self.recurring or {}).items():
            key = normalize_day_key(name)
            if key is None:
                continue
            if isinstance(day, dict):
                day = DaySchedule(enabled=bool(day.get('enabled', True)), schedule=day.get('schedule', []))
            recurring[key] = day
        self.recurring = recurring

        one_time = []
        for entry in self.one_time or []:
            if isinstance(entry, dict):
                entry = OneTimeSchedule(
                    date=entry.get('date', ''),
                    enabled=bool(entry.get('enabled', True)),
                    schedule=entry.get('schedule', []),
                )
            one_time.append(entry)
        self.one_time = one_time


@dataclass
class BlockedSpan:
    """A blocked period, optionally repeating (e.g. a weekly meeting)."""
    start: datetime
    end: datetime
    reason: Optional[str] = None
    pattern: Optional[RecurrencePattern] = None

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Blocked span end must not be before start: {self.reason}")


@dataclass
class TimeOff:
    """Leave request for a resource (vacation, sick leave, ...)."""
    id: str
    title: str
    start: datetime
    end: datetime
    status: TimeOffStatus = TimeOffStatus.PENDING
    notes: Optional[str] = None

    def __post_init__(self):
        """Convert string status to enum."""
        if isinstance(self.status, str):
            try:
                self.status = TimeOffStatus(self.status.strip().lower())
            except ValueError:
                # Unknown statuses are treated as pending so they still block
                self.status = TimeOffStatus.PENDING

    @property
    def blocks_availability(self) -> bool:
        return self.status != TimeOffStatus.REJECTED


@dataclass
class BusinessHours:
    """Fallback working hours used when no slot template governs."""
    days_of_week: Optional[List[str]] = None  # default Monday-Friday
    start_time: Optional[float] = None        # hours, default from Config
    end_time: Optional[float] = None

    def day_keys(self, default_days: Optional[List[str]] = None) -> Set[str]:
        names = self.days_of_week
        if names is None:
            names = default_days if default_days is not None else DAY_KEYS[:5]
        keys = (normalize_day_key(name) for name in names)
        return {key for key in keys if key}

    def minute_bounds(self, default_start: float, default_end: float) -> Tuple[int, int]:
        """Start/end minutes after midnight, clamped to 0-24 hours."""
        start = default_start if self.start_time is None else self.start_time
        end = default_end if self.end_time is None else self.end_time
        return int(round(clamp_hour(start) * 60)), int(round(clamp_hour(end) * 60))


@dataclass
class AvailabilityPolicy:
    """Tagged variant: whitelist, blacklist or neither."""
    kind: PolicyKind = PolicyKind.NONE
    template: Optional[SlotTemplate] = None
    blocked_spans: List[BlockedSpan] = field(default_factory=list)

    @classmethod
    def whitelist(cls, template: SlotTemplate) -> 'AvailabilityPolicy':
        return cls(kind=PolicyKind.WHITELIST, template=template)

    @classmethod
    def blacklist(
        cls,
        template: Optional[SlotTemplate] = None,
        blocked_spans: Optional[List[BlockedSpan]] = None,
    ) -> 'AvailabilityPolicy':
        return cls(kind=PolicyKind.BLACKLIST, template=template, blocked_spans=list(blocked_spans or []))

    @classmethod
    def none(cls) -> 'AvailabilityPolicy':
        return cls(kind=PolicyKind.NONE)


@dataclass
class Resource:
    """A bookable resource (team member, room, ...)."""
    id: str
    name: str
    policy: AvailabilityPolicy = field(default_factory=AvailabilityPolicy)
    business_hours: Optional[BusinessHours] = None
    time_offs: List[TimeOff] = field(default_factory=list)
    color: Optional[str] = None


@dataclass
class AvailabilityQuery:
    """A day-level (hour is None) or time-level availability question."""
    day: date
    hour: Optional[int] = None
    minute: int = 0

    def __post_init__(self):
        if isinstance(self.day, datetime):
            self.day = self.day.date()
        if self.hour is not None and not 0 <= self.hour <= 23:
            raise ValueError(f"Hour must be within 0-23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"Minute must be within 0-59, got {self.minute}")

    @property
    def is_time_level(self) -> bool:
        return self.hour is not None

    @property
    def minute_of_day(self) -> int:
        return (self.hour or 0) * 60 + self.minute

    @property
    def day_key(self) -> str:
        return DAY_KEYS[self.day.weekday()]

    def instant(self) -> datetime:
        """The queried instant (midnight for day-level queries)."""
        return datetime(self.day.year, self.day.month, self.day.day, self.hour or 0, self.minute)


@dataclass
class AvailabilityDecision:
    """Outcome of an availability check with the rule that decided it."""
    available: bool
    reason: AvailabilityReason

    def __bool__(self) -> bool:
        return self.available
