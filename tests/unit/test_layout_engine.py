# File: tests/unit/test_layout_engine.py
"""
Unit tests for grid layout (month view and resource timeline rows).
"""

import random
import pytest
from datetime import datetime, timedelta

import pytz

from calendar_core.models import GridType, LayoutConfig, VisibleHours
from calendar_core.processors import EventLayoutEngine, OccupancyGrid
from calendar_core.utils.visible_hours import hour_columns

DAY_WIDTH = 100 / 7


def on(day, hour=0, minute=0):
    return datetime(day.year, day.month, day.day, hour, minute)


class TestOccupancyGrid:
    """Test the per-call cell tracker."""

    def test_first_free_row(self):
        grid = OccupancyGrid(rows=2, columns=3)
        grid.occupy(0, 0, 1)

        assert grid.first_free_row(0, 0) == 1
        assert grid.first_free_row(2, 2) == 0
        grid.occupy(1, 0, 0)
        assert grid.first_free_row(0, 2) is None

    def test_zero_rows(self):
        grid = OccupancyGrid(rows=0, columns=3)

        assert grid.first_free_row(0, 2) is None


class TestGridGeometry:
    """Test bar position and size on a week of day columns."""

    def test_single_day_bar(self, layout_engine, make_event, week_days):
        wednesday = week_days[2]
        event = make_event("e1", on(wednesday, 10), on(wednesday, 11))

        result = layout_engine.layout([event], week_days)

        assert len(result.positioned) == 1
        bar = result.positioned[0]
        assert bar.left == pytest.approx(2 * DAY_WIDTH)
        assert bar.width == pytest.approx(DAY_WIDTH)
        assert bar.top == pytest.approx(32.0)
        assert bar.height == pytest.approx(20.0)
        assert bar.position == 0
        assert bar.z_index == 0

    def test_multi_day_bar(self, layout_engine, make_event, week_days):
        event = make_event("trip", on(week_days[0], 10), on(week_days[2], 12))

        bar = layout_engine.layout([event], week_days).positioned[0]

        assert bar.left == pytest.approx(0)
        assert bar.width == pytest.approx(3 * DAY_WIDTH)
        assert not bar.is_truncated_start
        assert not bar.is_truncated_end

    def test_columns_in_any_order(self, layout_engine, make_event, week_days):
        """Columns are placed in time order whatever order they are passed in."""
        wednesday = week_days[2]
        events = [
            make_event("e1", on(wednesday, 10), on(wednesday, 11)),
            make_event("trip", on(week_days[0], 10), on(week_days[2], 12)),
        ]

        ordered = layout_engine.layout(events, week_days)
        shuffled = layout_engine.layout(events, list(reversed(week_days)))
        bars = {bar.event_id: bar for bar in shuffled.positioned}

        assert bars["e1"].left == pytest.approx(2 * DAY_WIDTH)
        assert bars["trip"].width == pytest.approx(3 * DAY_WIDTH)
        assert [b.to_dict() for b in shuffled.positioned] == [b.to_dict() for b in ordered.positioned]

    def test_event_ending_at_midnight_stays_single_day(self, layout_engine, make_event, week_days):
        event = make_event("late", on(week_days[0], 22), on(week_days[1], 0))

        bar = layout_engine.layout([event], week_days).positioned[0]

        assert bar.width == pytest.approx(DAY_WIDTH)
        assert bar.left == pytest.approx(0)

    def test_zero_duration_event(self, layout_engine, make_event, week_days):
        event = make_event("ping", on(week_days[3], 10), on(week_days[3], 10))

        bar = layout_engine.layout([event], week_days).positioned[0]

        assert bar.left == pytest.approx(3 * DAY_WIDTH)
        assert bar.width == pytest.approx(DAY_WIDTH)

    def test_rows_stack_downwards(self, layout_engine, make_event, monday):
        events = [make_event(str(i), on(monday, 9 + i), on(monday, 10 + i)) for i in range(3)]

        result = layout_engine.layout(events, [monday])

        assert [bar.position for bar in result.positioned] == [0, 1, 2]
        assert [bar.top for bar in result.positioned] == pytest.approx([32.0, 54.0, 76.0])

    def test_empty_columns(self, layout_engine, make_event, monday):
        result = layout_engine.layout([make_event("e", on(monday, 9), on(monday, 10))], [])

        assert result.positioned == []
        assert result.dropped == []


class TestPlacementOrder:
    """Multi-unit bars claim rows before single-unit items."""

    def test_multi_day_placed_first(self, layout_engine, make_event, week_days):
        early_single = make_event("single", on(week_days[0], 8), on(week_days[0], 9))
        multi = make_event("multi", on(week_days[0], 10), on(week_days[1], 10))

        result = layout_engine.layout([early_single, multi], week_days)
        rows = {bar.event_id: bar.position for bar in result.positioned}

        assert rows == {"multi": 0, "single": 1}

    def test_longer_bar_wins_on_equal_start(self, layout_engine, make_event, week_days):
        short = make_event("short", on(week_days[0]), on(week_days[1], 12))
        long = make_event("long", on(week_days[0]), on(week_days[4], 12))

        result = layout_engine.layout([short, long], week_days)
        rows = {bar.event_id: bar.position for bar in result.positioned}

        assert rows == {"long": 0, "short": 1}

    def test_singles_ordered_by_start(self, layout_engine, make_event, monday):
        late = make_event("late", on(monday, 15), on(monday, 16))
        early = make_event("early", on(monday, 8), on(monday, 9))

        result = layout_engine.layout([late, early], [monday])

        assert [bar.event_id for bar in result.positioned] == ["early", "late"]


class TestOverflow:
    """Test row limits, right-shifting and hidden counts."""

    def test_overflowing_cell_is_counted(self, layout_engine, make_event, week_days):
        monday = week_days[0]
        events = [make_event(str(i), on(monday, 8 + i), on(monday, 9 + i)) for i in range(5)]

        result = layout_engine.layout(events, week_days)

        assert len(result.positioned) == 3
        assert [o.event_id for o in result.dropped] == ["3", "4"]
        assert result.hidden_counts == {0: 2}
        assert result.hidden_counts.get(1, 0) == 0

    def test_max_rows_override(self, layout_engine, make_event, monday):
        events = [make_event(str(i), on(monday, 8 + i), on(monday, 9 + i)) for i in range(3)]

        result = layout_engine.layout(events, [monday], max_rows_per_cell=1)

        assert len(result.positioned) == 1
        assert result.hidden_counts == {0: 2}

    def test_zero_rows_drops_everything(self, layout_engine, make_event, week_days):
        event = make_event("trip", on(week_days[0], 10), on(week_days[2], 10))

        result = layout_engine.layout([event], week_days, max_rows_per_cell=0)

        assert result.positioned == []
        assert result.hidden_counts == {0: 1, 1: 1, 2: 1}

    def test_right_shift_when_start_is_taken(self, layout_engine, make_event, week_days):
        first = make_event("a", on(week_days[0]), on(week_days[1], 23, 59))
        second = make_event("b", on(week_days[1], 10), on(week_days[3], 10))

        result = layout_engine.layout([first, second], week_days, max_rows_per_cell=1)
        bars = {bar.event_id: bar for bar in result.positioned}

        assert bars["b"].left == pytest.approx(2 * DAY_WIDTH)
        assert bars["b"].width == pytest.approx(2 * DAY_WIDTH)
        assert bars["b"].is_truncated_start
        assert result.dropped == []

    def test_multi_day_dropped_when_no_shift_fits(self, layout_engine, make_event, week_days):
        week = make_event("week", on(week_days[0]), on(week_days[6], 12))
        trip = make_event("trip", on(week_days[0], 10), on(week_days[1], 10))

        result = layout_engine.layout([week, trip], week_days, max_rows_per_cell=1)

        assert [o.event_id for o in result.dropped] == ["trip"]
        assert result.hidden_counts == {0: 1, 1: 1}


class TestClipping:
    """Test occurrences reaching outside the visible columns."""

    def test_clipped_at_both_ends(self, layout_engine, make_event, week_days):
        event = make_event("long", on(week_days[0] - timedelta(days=3)), on(week_days[6] + timedelta(days=2)))

        bar = layout_engine.layout([event], week_days).positioned[0]

        assert bar.left == pytest.approx(0)
        assert bar.width == pytest.approx(100)
        assert bar.is_truncated_start
        assert bar.is_truncated_end

    def test_outside_columns_is_ignored(self, layout_engine, make_event, week_days):
        event = make_event("later", on(week_days[6] + timedelta(days=1), 9), on(week_days[6] + timedelta(days=1), 10))

        result = layout_engine.layout([event], week_days)

        assert result.positioned == []
        assert result.dropped == []

    def test_aware_events_use_engine_timezone(self, layout_config, make_event, week_days):
        engine = EventLayoutEngine(layout_config, "Europe/Amsterdam")
        start = pytz.UTC.localize(datetime(2024, 1, 8, 23, 30))
        event = make_event("night", start, start + timedelta(minutes=30))

        bar = engine.layout([event], week_days).positioned[0]

        assert bar.left == pytest.approx(DAY_WIDTH)


class TestHourGrid:
    """Test the hour-column grid of resource timelines."""

    def test_hour_columns(self, layout_engine, make_event, monday):
        columns = hour_columns([monday], VisibleHours(start_time=8, end_time=12))
        meeting = make_event("meeting", on(monday, 9), on(monday, 11))
        coffee = make_event("coffee", on(monday, 8, 15), on(monday, 8, 45))
        lunch = make_event("lunch", on(monday, 13), on(monday, 14))

        result = layout_engine.layout([meeting, coffee, lunch], columns, grid_type=GridType.HOUR)
        bars = {bar.event_id: bar for bar in result.positioned}

        assert set(bars) == {"meeting", "coffee"}
        assert bars["meeting"].left == pytest.approx(25)
        assert bars["meeting"].width == pytest.approx(50)
        assert bars["coffee"].left == pytest.approx(0)
        assert bars["coffee"].width == pytest.approx(25)


class TestCollisionFreedom:
    """No two placed bars may share a cell."""

    def test_dense_random_month(self, make_event, monday, assert_collision_free):
        rng = random.Random(20240108)
        engine = EventLayoutEngine(LayoutConfig(max_rows=4), "UTC")
        days = [monday + timedelta(days=offset) for offset in range(28)]

        events = []
        for i in range(120):
            start = on(monday - timedelta(days=2)) + timedelta(hours=rng.randrange(0, 32 * 24))
            length = timedelta(hours=rng.choice([0, 1, 3, 20, 30, 60, 100]))
            events.append(make_event(f"e{i}", start, start + length))

        result = engine.layout(events, days)

        assert_collision_free(result.positioned)
        assert len({id(bar.occurrence) for bar in result.positioned}) == len(result.positioned)
        assert all(0 <= bar.position < 4 for bar in result.positioned)
        placed = {id(bar.occurrence) for bar in result.positioned}
        assert not placed & {id(o) for o in result.dropped}

    def test_layout_is_deterministic(self, layout_engine, make_event, week_days):
        events = [
            make_event(str(i), on(week_days[i % 7], 8 + i % 5), on(week_days[i % 7], 8 + i % 5) + timedelta(hours=5 * i))
            for i in range(14)
        ]

        first = layout_engine.layout(events, week_days)
        second = layout_engine.layout(events, week_days)

        assert [(b.event_id, b.left, b.position) for b in first.positioned] == \
            [(b.event_id, b.left, b.position) for b in second.positioned]
        assert first.hidden_counts == second.hidden_counts
