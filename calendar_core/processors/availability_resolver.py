# File: calendar_core/processors/availability_resolver.py
"""
Decides whether a resource is bookable on a day or at a time of day.

Priority order:
    1. Available slots (whitelist, closed world)
    2. Blocked slots (blacklist, open world)
    3. Business hours
    4. Time-off requests, which can only make a slot unavailable
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple, Union

import pytz

from calendar_core.core.config_manager import Config
from calendar_core.models import (
    AvailabilityDecision,
    AvailabilityQuery,
    AvailabilityReason,
    BlockedSpan,
    PolicyKind,
    Resource,
    SlotTemplate,
    TimeOff,
    TimeRange,
)
from calendar_core.utils.dates import (
    ONE_MINUTE,
    end_of_day,
    get_timezone,
    start_of_day,
    to_wall_time,
    truncate_to_minute,
)
from calendar_core.utils.logger import LoggerMixin
from calendar_core.utils.recurrence import generate_spans


class TemplateVerdict(Enum):
    """Outcome of matching a query against a slot template."""
    MATCH = "match"            # the query falls in an enabled schedule
    NO_MATCH = "no_match"      # the date is governed but the query is not covered
    UNGOVERNED = "ungoverned"  # no entry speaks about this date


class AvailabilityResolver(LoggerMixin):
    """Single evaluator for whitelist, blacklist and business-hours policies."""

    def __init__(self, timezone: Optional[Union[str, pytz.BaseTzInfo]] = None):
        if timezone is None or isinstance(timezone, str):
            self.tz = get_timezone(timezone)
        else:
            self.tz = timezone

    def is_available(self, resource: Resource, query: AvailabilityQuery) -> bool:
        """Whether the resource can be booked for the queried day or time."""
        return self.explain(resource, query).available

    def explain(self, resource: Resource, query: AvailabilityQuery) -> AvailabilityDecision:
        """
        Resolve availability and report which rule decided it.

        Args:
            resource: Resource carrying the policy, business hours and time-offs
            query: Day-level (hour is None) or time-level query

        Returns:
            AvailabilityDecision
        """
        policy = resource.policy

        if policy.kind == PolicyKind.WHITELIST:
            verdict = self._evaluate_template(policy.template or SlotTemplate(), query)
            if verdict == TemplateVerdict.MATCH:
                decision = AvailabilityDecision(True, AvailabilityReason.SLOT_AVAILABLE)
            else:
                decision = AvailabilityDecision(False, AvailabilityReason.OUTSIDE_AVAILABLE_SLOTS)
        elif policy.kind == PolicyKind.BLACKLIST:
            if self.is_blocked(resource, query):
                decision = AvailabilityDecision(False, AvailabilityReason.BLOCKED_SLOT)
            else:
                decision = self._business_hours_decision(resource, query, AvailabilityReason.NOT_BLOCKED)
        else:
            decision = self._business_hours_decision(resource, query, AvailabilityReason.UNRESTRICTED)

        if decision.available and any(t.blocks_availability for t in self.get_time_offs_for_slot(resource.time_offs, query)):
            return AvailabilityDecision(False, AvailabilityReason.TIME_OFF)

        return decision

    def is_blocked(self, resource: Resource, query: AvailabilityQuery) -> bool:
        """Whether the blacklist part of the policy blocks the query."""
        policy = resource.policy
        if policy.kind != PolicyKind.BLACKLIST:
            return False

        if policy.template is not None:
            if self._evaluate_template(policy.template, query) == TemplateVerdict.MATCH:
                return True

        return any(self._span_blocks(span, query) for span in policy.blocked_spans)

    def get_time_offs_for_slot(self, time_offs: List[TimeOff], query: AvailabilityQuery) -> List[TimeOff]:
        """Every time-off (any status) overlapping the slot, for overlays."""
        overlapping = []
        for time_off in time_offs or []:
            start = truncate_to_minute(to_wall_time(time_off.start, self.tz))
            end = truncate_to_minute(to_wall_time(time_off.end, self.tz))
            if self._contains(start, end, query):
                overlapping.append(time_off)
        return overlapping

    def _evaluate_template(self, template: SlotTemplate, query: AvailabilityQuery) -> TemplateVerdict:
        """One-time entries for the exact date win over the weekday template."""
        entries = []
        for entry in template.one_time:
            entry_date = entry.parsed_date
            if entry_date is None:
                self.logger.debug(f"Skipping one-time entry with malformed date '{entry.date}'")
                continue
            if entry_date == query.day:
                entries.append(entry)

        if entries:
            enabled = [entry for entry in entries if entry.enabled]
            if not enabled:
                return TemplateVerdict.NO_MATCH
            ranges = [time_range for entry in enabled for time_range in entry.schedule]
            return self._match_ranges(ranges, query)

        day = template.recurring.get(query.day_key)
        if day is None:
            return TemplateVerdict.UNGOVERNED
        if not day.enabled:
            return TemplateVerdict.NO_MATCH
        return self._match_ranges(day.schedule, query)

    def _match_ranges(self, ranges: List[TimeRange], query: AvailabilityQuery) -> TemplateVerdict:
        if not query.is_time_level:
            return TemplateVerdict.MATCH

        minute = query.minute_of_day
        for time_range in ranges:
            if time_range.to_minutes() is None:
                self.logger.debug(f"Skipping malformed time range '{time_range.start}'-'{time_range.end}'")
            elif time_range.contains_minute(minute):
                return TemplateVerdict.MATCH
        return TemplateVerdict.NO_MATCH

    def _span_blocks(self, span: BlockedSpan, query: AvailabilityQuery) -> bool:
        start = truncate_to_minute(to_wall_time(span.start, self.tz))
        end = truncate_to_minute(to_wall_time(span.end, self.tz))

        if span.pattern is None:
            return self._contains(start, end, query)

        range_start, range_end = self._query_range(query)
        try:
            spans = generate_spans(span.pattern, start, end - start, range_start, range_end, self.tz)
        except (ValueError, TypeError) as e:
            self.logger.warning(
                f"Blocked slot '{span.reason or 'unnamed'}' has a malformed pattern ({e}), "
                f"treating it as a one-time block"
            )
            return self._contains(start, end, query)

        return any(self._contains(s, e, query) for s, e in spans)

    def _business_hours_decision(
        self,
        resource: Resource,
        query: AvailabilityQuery,
        unrestricted_reason: AvailabilityReason,
    ) -> AvailabilityDecision:
        hours = resource.business_hours
        if hours is None:
            return AvailabilityDecision(True, unrestricted_reason)

        if query.day_key not in hours.day_keys(Config.DEFAULT_BUSINESS_DAYS):
            return AvailabilityDecision(False, AvailabilityReason.OUTSIDE_BUSINESS_HOURS)

        if not query.is_time_level:
            return AvailabilityDecision(True, AvailabilityReason.WITHIN_BUSINESS_HOURS)

        start, end = hours.minute_bounds(Config.DEFAULT_BUSINESS_START, Config.DEFAULT_BUSINESS_END)
        if start <= query.minute_of_day < end:
            return AvailabilityDecision(True, AvailabilityReason.WITHIN_BUSINESS_HOURS)
        return AvailabilityDecision(False, AvailabilityReason.OUTSIDE_BUSINESS_HOURS)

    @staticmethod
    def _query_range(query: AvailabilityQuery) -> Tuple[datetime, datetime]:
        if query.is_time_level:
            instant = query.instant()
            return instant, instant
        # Spans ending exactly at midnight still touch the day
        return start_of_day(query.day) - ONE_MINUTE, end_of_day(query.day)

    @staticmethod
    def _contains(start: datetime, end: datetime, query: AvailabilityQuery) -> bool:
        """Half-open [start, end) for times, closed [start.day, end.day] for days."""
        if query.is_time_level:
            return start <= query.instant() < end
        return start.date() <= query.day <= end.date()
