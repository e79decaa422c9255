# File: calendar_core/models/calendar.py

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Union

from .recurrence import RecurrencePattern


def span_touches(start: datetime, end: datetime, window_start: datetime, window_end: datetime) -> bool:
    """Whether [start, end) touches the inclusive window; instants need start inside it."""
    if start == end:
        return window_start <= start <= window_end
    return start <= window_end and end > window_start


@dataclass
class Occurrence:
    """One concrete, dated instance of an event (base or recurring-expanded)."""
    event_id: str
    title: str
    start: datetime
    end: datetime
    all_day: bool = False
    resource_id: Optional[str] = None
    resource_ids: List[str] = field(default_factory=list)
    recurrence_id: Optional[datetime] = None  # set on overrides only
    pattern: Optional[RecurrencePattern] = None
    description: Optional[str] = None
    location: Optional[str] = None
    color: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate event data."""
        # start == end is a zero-duration instant, not an error
        if self.end < self.start:
            raise ValueError(f"Event end time must not be before start time: {self.title}")

    @property
    def is_recurring(self) -> bool:
        return self.pattern is not None

    @property
    def is_override(self) -> bool:
        return self.recurrence_id is not None

    def duration(self) -> timedelta:
        return self.end - self.start

    def intersects(self, window_start: datetime, window_end: datetime) -> bool:
        """Check if this occurrence touches the inclusive window."""
        return span_touches(self.start, self.end, window_start, window_end)

    def belongs_to(self, resource_id: Union[str, int]) -> bool:
        """Check single and multi-resource assignment."""
        wanted = str(resource_id)
        if self.resource_id is not None and str(self.resource_id) == wanted:
            return True
        return any(str(rid) == wanted for rid in self.resource_ids)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.event_id,
            'title': self.title,
            'start': self.start.isoformat(),
            'end': self.end.isoformat(),
            'all_day': self.all_day,
            'resource_id': self.resource_id,
            'resource_ids': list(self.resource_ids),
            'recurrence_id': self.recurrence_id.isoformat() if self.recurrence_id else None,
            'description': self.description,
            'location': self.location,
            'color': self.color,
            'data': dict(self.data),
        }


@dataclass
class PositionedOccurrence:
    """An occurrence plus the geometry needed to paint it."""
    occurrence: Occurrence
    left: float    # percentage of the container width
    width: float   # percentage of the container width
    top: float
    height: float
    z_index: int = 1
    position: Optional[int] = None  # grid row; None for time-axis layout
    is_truncated_start: bool = False
    is_truncated_end: bool = False

    @property
    def event_id(self) -> str:
        return self.occurrence.event_id

    def to_dict(self) -> dict:
        data = self.occurrence.to_dict()
        data.update({
            'left': self.left,
            'width': self.width,
            'top': self.top,
            'height': self.height,
            'z_index': self.z_index,
            'position': self.position,
            'is_truncated_start': self.is_truncated_start,
            'is_truncated_end': self.is_truncated_end,
        })
        return data
