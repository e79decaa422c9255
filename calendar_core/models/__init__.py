from .enums import Frequency, TimeOffStatus, PolicyKind, GridType, AvailabilityReason
from .common import parse_iso_datetime, coerce_datetime, parse_time_of_day, parse_schedule_date
from .config import LayoutConfig, VisibleHours
from .recurrence import RecurrencePattern
from .calendar import Occurrence, PositionedOccurrence
from .availability import (
    TimeRange,
    DaySchedule,
    OneTimeSchedule,
    SlotTemplate,
    BlockedSpan,
    TimeOff,
    BusinessHours,
    AvailabilityPolicy,
    Resource,
    AvailabilityQuery,
    AvailabilityDecision,
)
from .results import Diagnostic, ExpansionResult, LayoutResult
from .utils import (
    occurrence_from_dict,
    pattern_from_dict,
    resource_from_dict,
    time_off_from_dict,
    blocked_span_from_dict,
    events_from_list,
)

__all__ = [
    "Frequency",
    "TimeOffStatus",
    "PolicyKind",
    "GridType",
    "AvailabilityReason",
    "parse_iso_datetime",
    "coerce_datetime",
    "parse_time_of_day",
    "parse_schedule_date",
    "LayoutConfig",
    "VisibleHours",
    "RecurrencePattern",
    "Occurrence",
    "PositionedOccurrence",
    "TimeRange",
    "DaySchedule",
    "OneTimeSchedule",
    "SlotTemplate",
    "BlockedSpan",
    "TimeOff",
    "BusinessHours",
    "AvailabilityPolicy",
    "Resource",
    "AvailabilityQuery",
    "AvailabilityDecision",
    "Diagnostic",
    "ExpansionResult",
    "LayoutResult",
    "occurrence_from_dict",
    "pattern_from_dict",
    "resource_from_dict",
    "time_off_from_dict",
    "blocked_span_from_dict",
    "events_from_list"
]
