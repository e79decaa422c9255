# File: tests/conftest.py
"""
Pytest configuration and shared fixtures.
Provides reusable events, resources and services for all tests.
"""

import pytest
from datetime import datetime, date, timedelta
from pathlib import Path
import sys

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from calendar_core.models import (
    AvailabilityPolicy,
    BusinessHours,
    LayoutConfig,
    Occurrence,
    RecurrencePattern,
    Resource,
    SlotTemplate,
    TimeOff,
)
from calendar_core.processors import AvailabilityResolver, EventLayoutEngine, RecurrenceExpander
from calendar_core.core.orchestrator import CalendarOrchestrator


# ==================== Date Fixtures ====================

@pytest.fixture
def monday():
    """A fixed Monday (2024-01-08)."""
    return date(2024, 1, 8)


@pytest.fixture
def tuesday(monday):
    return monday + timedelta(days=1)


@pytest.fixture
def week_days(monday):
    """Monday to Sunday of the fixed week."""
    return [monday + timedelta(days=offset) for offset in range(7)]


# ==================== Event Fixtures ====================

@pytest.fixture
def make_event():
    """Factory for simple occurrences."""
    def _make(event_id, start, end, title=None, **kwargs):
        return Occurrence(
            event_id=event_id,
            title=title or f"Event {event_id}",
            start=start,
            end=end,
            **kwargs
        )
    return _make


@pytest.fixture
def weekly_standup():
    """Weekly Monday 09:00-09:30 standup, 10 instances from 2024-01-01."""
    return Occurrence(
        event_id="standup",
        title="Standup",
        start=datetime(2024, 1, 1, 9, 0),
        end=datetime(2024, 1, 1, 9, 30),
        pattern=RecurrencePattern(frequency="WEEKLY", count=10, by_weekday=["MO"]),
    )


@pytest.fixture
def daily_review():
    """Open-ended daily 17:00-18:00 review from 2024-01-01."""
    return Occurrence(
        event_id="review",
        title="Daily Review",
        start=datetime(2024, 1, 1, 17, 0),
        end=datetime(2024, 1, 1, 18, 0),
        pattern=RecurrencePattern(frequency="DAILY"),
    )


# ==================== Resource Fixtures ====================

@pytest.fixture
def whitelist_resource():
    """Available only on Mondays 09:00-17:00."""
    template = SlotTemplate(recurring={
        "mon": {"enabled": True, "schedule": [{"start": "09:00", "end": "17:00"}]},
    })
    return Resource(id="alice", name="Alice", policy=AvailabilityPolicy.whitelist(template))


@pytest.fixture
def blacklist_resource():
    """Blocked on Mondays 12:00-13:00, otherwise open."""
    template = SlotTemplate(recurring={
        "mon": {"enabled": True, "schedule": [{"start": "12:00", "end": "13:00"}]},
    })
    return Resource(id="bob", name="Bob", policy=AvailabilityPolicy.blacklist(template))


@pytest.fixture
def office_resource():
    """No slot policy, default business hours (Mon-Fri 9-17)."""
    return Resource(id="room-1", name="Room 1", business_hours=BusinessHours())


@pytest.fixture
def vacation(monday):
    """Approved time-off covering Monday and Tuesday."""
    return TimeOff(
        id="to-1",
        title="Vacation",
        start=datetime.combine(monday, datetime.min.time()),
        end=datetime.combine(monday + timedelta(days=1), datetime.min.time()).replace(hour=23, minute=59),
        status="approved",
    )


# ==================== Service Fixtures ====================

@pytest.fixture
def layout_config():
    """Round numbers so geometry assertions stay readable."""
    return LayoutConfig(bar_height=20.0, gap=2.0, header_height=30.0, max_rows=3)


@pytest.fixture
def expander():
    return RecurrenceExpander("UTC")


@pytest.fixture
def resolver():
    return AvailabilityResolver("UTC")


@pytest.fixture
def layout_engine(layout_config):
    return EventLayoutEngine(layout_config, "UTC")


@pytest.fixture
def orchestrator(layout_config):
    return CalendarOrchestrator(layout_config, "UTC")


# ==================== Temporary Directory Fixtures ====================

@pytest.fixture
def temp_scenario_dir(tmp_path):
    """Create temporary directory for scenario files."""
    scenario_dir = tmp_path / "scenarios"
    scenario_dir.mkdir()
    return scenario_dir


# ==================== Pytest Markers ====================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


# ==================== Helper Functions ====================

@pytest.fixture
def assert_collision_free():
    """Helper asserting no two bars in the same row overlap horizontally."""
    def _assert_free(positioned):
        """Exhaustive pairwise scan of the placed bars."""
        for i, first in enumerate(positioned):
            for second in positioned[i + 1:]:
                if first.position != second.position:
                    continue
                overlap = (first.left < second.left + second.width - 1e-9
                           and second.left < first.left + first.width - 1e-9)
                assert not overlap, (
                    f"{first.event_id} and {second.event_id} collide in row {first.position}"
                )
    return _assert_free
