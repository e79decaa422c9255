# File: calendar_core/processors/recurrence_expander.py
"""
Expands recurring event definitions into concrete occurrences for a
display window, applying exception dates and per-instance overrides.
"""

from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Union

import pytz

from calendar_core.models import Diagnostic, ExpansionResult, Occurrence
from calendar_core.models.calendar import span_touches
from calendar_core.utils.dates import from_wall_time, get_timezone, is_aware, to_wall_time
from calendar_core.utils.logger import LoggerMixin
from calendar_core.utils.recurrence import generate_spans, is_rule_instant

# (wall-clock start, series index, 0 for overrides / 1 for generated)
SortKey = Tuple[datetime, int, int]


class RecurrenceExpander(LoggerMixin):
    """
    Turns events into the occurrences visible in a window.

    Expansion happens in wall-clock time of the configured zone, so a
    weekly 09:00 meeting stays at 09:00 across DST transitions. Aware
    inputs produce aware outputs in that zone; naive inputs stay naive.
    """

    def __init__(self, timezone: Optional[Union[str, pytz.BaseTzInfo]] = None):
        if timezone is None or isinstance(timezone, str):
            self.tz = get_timezone(timezone)
        else:
            self.tz = timezone

    def expand(self, event: Occurrence, window_start: datetime, window_end: datetime) -> ExpansionResult:
        """
        Expand one event into the occurrences touching [window_start, window_end].

        Args:
            event: Base event, with or without a RecurrencePattern
            window_start: Inclusive window start
            window_end: Inclusive window end

        Returns:
            ExpansionResult with occurrences sorted by start and any
            diagnostics for patterns that had to be ignored
        """
        result = ExpansionResult()
        entries = self._expand_series(
            event,
            to_wall_time(window_start, self.tz),
            to_wall_time(window_end, self.tz),
            series_index=0,
            warnings=result.warnings,
        )
        result.occurrences = self._sorted(entries)
        return result

    def expand_all(self, events: List[Occurrence], window_start: datetime, window_end: datetime) -> ExpansionResult:
        """
        Expand a list of events, merging detached overrides into their series.

        A detached override is a separate event sharing the series
        event_id and carrying a recurrence_id; it replaces the generated
        instance instead of being emitted next to it.
        """
        ws = to_wall_time(window_start, self.tz)
        we = to_wall_time(window_end, self.tz)

        series_ids = {event.event_id for event in events if event.is_recurring}
        detached: Dict[str, Dict[datetime, Occurrence]] = {}
        for event in events:
            if event.is_override and not event.is_recurring and event.event_id in series_ids:
                instant = to_wall_time(event.recurrence_id, self.tz)
                detached.setdefault(event.event_id, {})[instant] = event

        result = ExpansionResult()
        entries: List[Tuple[SortKey, Occurrence]] = []
        for index, event in enumerate(events):
            if event.is_override and not event.is_recurring and event.event_id in series_ids:
                continue
            entries.extend(self._expand_series(
                event, ws, we,
                series_index=index,
                warnings=result.warnings,
                detached=detached.get(event.event_id) if event.is_recurring else None,
            ))

        result.occurrences = self._sorted(entries)
        self.logger.debug(
            f"Expanded {len(events)} events into {len(result.occurrences)} occurrences "
            f"({len(result.warnings)} warnings)"
        )
        return result

    def _expand_series(
        self,
        event: Occurrence,
        window_start: datetime,
        window_end: datetime,
        series_index: int,
        warnings: List[Diagnostic],
        detached: Optional[Dict[datetime, Occurrence]] = None,
    ) -> List[Tuple[SortKey, Occurrence]]:
        aware = is_aware(event.start)
        start = to_wall_time(event.start, self.tz)
        end = to_wall_time(event.end, self.tz)

        if event.pattern is None:
            if span_touches(start, end, window_start, window_end):
                return [((start, series_index, 1), event)]
            return []

        pattern = event.pattern
        overrides = {to_wall_time(instant, self.tz): occ for instant, occ in pattern.overrides.items()}
        overrides.update(detached or {})

        try:
            spans = generate_spans(pattern, start, end - start, window_start, window_end, self.tz)

            entries: List[Tuple[SortKey, Occurrence]] = []
            for instant, instant_end in spans:
                override = overrides.pop(instant, None)
                if override is not None:
                    entry = self._override_entry(event, override, instant, aware, series_index)
                    if self._entry_touches(entry, window_start, window_end):
                        entries.append(entry)
                    continue

                occurrence = replace(
                    event,
                    start=self._localize(instant, aware),
                    end=self._localize(instant_end, aware),
                    recurrence_id=None,
                    pattern=None,
                )
                entries.append(((instant, series_index, 1), occurrence))

            # Overrides whose canonical instant is outside the window may
            # still have been moved into it
            for instant, override in overrides.items():
                entry = self._override_entry(event, override, instant, aware, series_index)
                if not self._entry_touches(entry, window_start, window_end):
                    continue
                if is_rule_instant(pattern, start, instant, self.tz):
                    entries.append(entry)

            return entries

        except (ValueError, TypeError) as e:
            diagnostic = Diagnostic(
                message=f"Malformed recurrence pattern ({e}), showing a single occurrence",
                event_id=event.event_id,
            )
            warnings.append(diagnostic)
            self.logger.warning(str(diagnostic))

            if span_touches(start, end, window_start, window_end):
                return [((start, series_index, 1), replace(event, pattern=None))]
            return []

    def _override_entry(
        self,
        series: Occurrence,
        override: Occurrence,
        instant: datetime,
        aware: bool,
        series_index: int,
    ) -> Tuple[SortKey, Occurrence]:
        """Override fields win; series identity and the replaced instant are kept."""
        occurrence = replace(
            override,
            event_id=series.event_id,
            recurrence_id=self._localize(instant, aware),
            pattern=None,
        )
        return (to_wall_time(occurrence.start, self.tz), series_index, 0), occurrence

    def _entry_touches(self, entry: Tuple[SortKey, Occurrence], window_start: datetime, window_end: datetime) -> bool:
        occurrence = entry[1]
        return span_touches(
            to_wall_time(occurrence.start, self.tz),
            to_wall_time(occurrence.end, self.tz),
            window_start,
            window_end,
        )

    def _localize(self, wall: datetime, aware: bool) -> datetime:
        return from_wall_time(wall, self.tz) if aware else wall

    @staticmethod
    def _sorted(entries: List[Tuple[SortKey, Occurrence]]) -> List[Occurrence]:
        return [occurrence for _, occurrence in sorted(entries, key=lambda entry: entry[0])]
