# File: calendar_core/models/results.py
"""
Data models for processor outputs and diagnostics.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .calendar import Occurrence, PositionedOccurrence


@dataclass
class Diagnostic:
    """A recoverable problem reported alongside a result."""
    message: str
    event_id: Optional[str] = None

    def __str__(self) -> str:
        """String representation of the diagnostic."""
        if self.event_id is not None:
            return f"Event {self.event_id}: {self.message}"
        return self.message


@dataclass
class ExpansionResult:
    """Concrete occurrences for a window plus expansion warnings."""
    occurrences: List[Occurrence] = field(default_factory=list)
    warnings: List[Diagnostic] = field(default_factory=list)


@dataclass
class LayoutResult:
    """Positioned bars for a grid, plus what did not fit."""
    positioned: List[PositionedOccurrence] = field(default_factory=list)
    dropped: List[Occurrence] = field(default_factory=list)
    hidden_counts: Dict[int, int] = field(default_factory=dict)  # column -> hidden items
