# File: calendar_core/core/orchestrator.py
"""
Orchestrator for calendar-core.
Wires the expander, resolver and layout engine together for the views
a rendering layer draws: month grids, day/week time columns and
resource timelines.

The three services never call each other; this module is the only
place that chains them.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Union

from calendar_core.core.config_manager import Config
from calendar_core.models import (
    AvailabilityQuery,
    Diagnostic,
    GridType,
    LayoutConfig,
    Occurrence,
    PositionedOccurrence,
    Resource,
    TimeOff,
    VisibleHours,
)
from calendar_core.processors.availability_resolver import AvailabilityResolver
from calendar_core.processors.layout_engine import EventLayoutEngine
from calendar_core.processors.recurrence_expander import RecurrenceExpander
from calendar_core.utils.dates import (
    as_date,
    end_of_day,
    start_of_day,
    start_of_unit,
    unit_delta,
    ONE_MINUTE,
)
from calendar_core.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass
class CalendarView:
    """Positioned bars of a month (day-grid) view."""
    days: List[date]
    positioned: List[PositionedOccurrence] = field(default_factory=list)
    hidden_counts: Dict[int, int] = field(default_factory=dict)
    dropped: List[Occurrence] = field(default_factory=list)
    warnings: List[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'days': [day.isoformat() for day in self.days],
            'positioned': [item.to_dict() for item in self.positioned],
            'hidden_counts': {str(col): count for col, count in sorted(self.hidden_counts.items())},
            'dropped': [occurrence.event_id for occurrence in self.dropped],
            'warnings': [str(warning) for warning in self.warnings],
        }


@dataclass
class ResourceRow:
    """One resource lane of a timeline view."""
    resource: Resource
    positioned: List[PositionedOccurrence] = field(default_factory=list)
    hidden_counts: Dict[int, int] = field(default_factory=dict)
    availability: List[bool] = field(default_factory=list)  # per column
    time_offs: Dict[int, List[TimeOff]] = field(default_factory=dict)  # column -> overlapping

    def to_dict(self) -> dict:
        return {
            'resource_id': self.resource.id,
            'name': self.resource.name,
            'positioned': [item.to_dict() for item in self.positioned],
            'hidden_counts': {str(col): count for col, count in sorted(self.hidden_counts.items())},
            'availability': list(self.availability),
            'time_offs': {
                str(col): [time_off.id for time_off in entries]
                for col, entries in sorted(self.time_offs.items())
            },
        }


class CalendarOrchestrator:
    """
    Reference consumer of the core services.

    All methods are deterministic and leave their inputs untouched.
    """

    def __init__(self, config: Optional[LayoutConfig] = None, timezone: Optional[str] = None):
        self.config = config or Config.layout_config()
        self.timezone = timezone or Config.TIMEZONE

        self.expander = RecurrenceExpander(self.timezone)
        self.resolver = AvailabilityResolver(self.timezone)
        self.layout_engine = EventLayoutEngine(self.config, self.timezone)

        logger.debug(f"CalendarOrchestrator ready (timezone={self.timezone})")

    def build_month_view(
        self,
        events: List[Occurrence],
        days: List[Union[date, datetime]],
        max_rows: Optional[int] = None,
    ) -> CalendarView:
        """Expand events over the visible days and pack them into day cells."""
        day_list = sorted(as_date(day) for day in days)
        view = CalendarView(days=day_list)
        if not day_list:
            return view

        logger.info("STEP 1: Expanding events")
        expansion = self.expander.expand_all(events, start_of_day(day_list[0]), end_of_day(day_list[-1]))
        view.warnings = list(expansion.warnings)

        logger.info("STEP 2: Laying out day grid")
        layout = self.layout_engine.layout(expansion.occurrences, day_list, max_rows, GridType.DAY)
        view.positioned = layout.positioned
        view.hidden_counts = layout.hidden_counts
        view.dropped = layout.dropped

        logger.info(
            f"Month view: {len(view.positioned)} bars, {len(view.dropped)} hidden, "
            f"{len(view.warnings)} warnings"
        )
        return view

    def build_time_columns(
        self,
        events: List[Occurrence],
        days: List[Union[date, datetime]],
        visible_hours: Optional[VisibleHours] = None,
    ) -> Dict[date, List[PositionedOccurrence]]:
        """Time-axis layout for each day column of a day or week view."""
        day_list = sorted(as_date(day) for day in days)
        if not day_list:
            return {}

        hours = visible_hours or Config.visible_hours()
        expansion = self.expander.expand_all(events, start_of_day(day_list[0]), end_of_day(day_list[-1]))

        return {
            day: self.layout_engine.layout_day(expansion.occurrences, day, hours)
            for day in day_list
        }

    def build_resource_timeline(
        self,
        resources: List[Resource],
        events: List[Occurrence],
        columns: List[Union[date, datetime]],
        grid_type: GridType = GridType.DAY,
        max_rows: Optional[int] = None,
    ) -> List[ResourceRow]:
        """
        One lane per resource: its events packed on the column grid,
        availability per column and the time-offs to overlay.
        """
        units = sorted(
            start_of_unit(column if isinstance(column, datetime) else start_of_day(column), grid_type)
            for column in columns
        )
        if not units:
            return [ResourceRow(resource=resource) for resource in resources]

        window_end = units[-1] + unit_delta(grid_type) - ONE_MINUTE
        expansion = self.expander.expand_all(events, units[0], window_end)

        rows = []
        for resource in resources:
            assigned = [o for o in expansion.occurrences if o.belongs_to(resource.id)]
            layout = self.layout_engine.layout(assigned, units, max_rows, grid_type)

            row = ResourceRow(resource=resource, positioned=layout.positioned, hidden_counts=layout.hidden_counts)
            for index, unit in enumerate(units):
                query = AvailabilityQuery(
                    day=unit.date(),
                    hour=unit.hour if grid_type == GridType.HOUR else None,
                )
                row.availability.append(self.resolver.is_available(resource, query))
                overlapping = self.resolver.get_time_offs_for_slot(resource.time_offs, query)
                if overlapping:
                    row.time_offs[index] = overlapping
            rows.append(row)

        logger.info(f"Resource timeline: {len(rows)} resources x {len(units)} columns")
        return rows
