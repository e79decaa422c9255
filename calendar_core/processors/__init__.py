from .recurrence_expander import RecurrenceExpander
from .availability_resolver import AvailabilityResolver, TemplateVerdict
from .layout_engine import EventLayoutEngine, OccupancyGrid

__all__ = [
    "RecurrenceExpander",
    "AvailabilityResolver",
    "TemplateVerdict",
    "EventLayoutEngine",
    "OccupancyGrid"
]
