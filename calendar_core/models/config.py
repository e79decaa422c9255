# File: calendar_core/models/config.py
"""
Data models for calendar-core view configuration.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

# Grid geometry defaults (pixels)
DEFAULT_BAR_HEIGHT = 24.0
DEFAULT_GAP = 1.0
DEFAULT_HEADER_HEIGHT = 28.0
DEFAULT_MAX_ROWS = 3

HOURS_PER_DAY = 24


def clamp_hour(value: float) -> float:
    """Clamp an hour value into the 0-24 domain."""
    return max(0, min(HOURS_PER_DAY, value))


@dataclass
class LayoutConfig:
    """Geometry settings for grid (month / timeline) layouts."""
    bar_height: float = DEFAULT_BAR_HEIGHT
    gap: float = DEFAULT_GAP
    header_height: float = DEFAULT_HEADER_HEIGHT
    max_rows: int = DEFAULT_MAX_ROWS

    def row_top(self, row: int) -> float:
        """Vertical offset of a bar placed in the given row."""
        return self.header_height + self.gap + row * (self.bar_height + self.gap)


@dataclass
class VisibleHours:
    """Time range shown on the vertical axis of day/week views."""
    start_time: Optional[float] = None  # hours, default 0
    end_time: Optional[float] = None    # hours, default 24

    def bounds(self) -> Tuple[float, float]:
        """Return (start, end) clamped to 0-24."""
        start = 0 if self.start_time is None else self.start_time
        end = HOURS_PER_DAY if self.end_time is None else self.end_time
        return clamp_hour(start), clamp_hour(end)

    @property
    def span(self) -> float:
        """Visible hours; inverted or empty ranges count as zero."""
        start, end = self.bounds()
        return max(0, end - start)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional['VisibleHours']:
        if not data:
            return None
        return cls(
            start_time=data.get('start_time', data.get('startTime')),
            end_time=data.get('end_time', data.get('endTime')),
        )
