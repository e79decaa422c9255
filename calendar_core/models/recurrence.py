# File: calendar_core/models/recurrence.py

from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Dict, List, Optional, Union, TYPE_CHECKING

from dateutil.parser import isoparse

from .enums import Frequency

if TYPE_CHECKING:
    from .calendar import Occurrence

WEEKDAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")


def _rule_body(text: str) -> str:
    body = text.strip()
    if body.upper().startswith("RRULE:"):
        body = body[len("RRULE:"):]
    return ";".join(chunk.strip() for chunk in body.split(";") if chunk.strip())


def _join(values) -> str:
    return ",".join(str(value) for value in values)


@dataclass
class RecurrencePattern:
    """
    RFC 5545 style repetition rule for an event or a blocked span.

    Validation is deferred to expansion time: a pattern the recurrence
    library rejects degrades its event to a single occurrence instead of
    failing construction.

    Patterns read from RRULE text keep that text in rule_text, which is
    what gets expanded. Their frequency, interval, count and until
    mirror it for validation only.
    """
    frequency: Union[Frequency, str]
    interval: int = 1
    count: Optional[int] = None
    until: Optional[datetime] = None
    by_weekday: List[str] = field(default_factory=list)
    by_month_day: List[int] = field(default_factory=list)
    by_month: List[int] = field(default_factory=list)
    by_set_pos: List[int] = field(default_factory=list)
    by_hour: List[int] = field(default_factory=list)
    by_minute: List[int] = field(default_factory=list)
    dtstart: Optional[datetime] = None  # anchor, defaults to the event start
    rule_text: Optional[str] = None

    # Exception instants; a plain date excludes every instant on that day
    exdates: List[Union[datetime, date]] = field(default_factory=list)
    # Replacement occurrences keyed by the canonical instant they replace
    overrides: Dict[datetime, 'Occurrence'] = field(default_factory=dict)

    def __post_init__(self):
        """Normalize loose string input."""
        if isinstance(self.frequency, str):
            try:
                self.frequency = Frequency(self.frequency.strip().upper())
            except ValueError:
                pass  # rejected later by the rule builder

        self.by_weekday = [str(code).strip().upper() for code in self.by_weekday if str(code).strip()]

    def to_rrule_string(self) -> str:
        """
        RRULE text handed to dateutil. Structured patterns leave UNTIL
        out; the rule builder applies until in wall-clock time.
        """
        if self.rule_text:
            return self.rule_text

        frequency = self.frequency.value if isinstance(self.frequency, Frequency) else str(self.frequency)
        parts = [f"FREQ={frequency}", f"INTERVAL={self.interval}"]
        if self.count is not None:
            parts.append(f"COUNT={self.count}")
        for key, values in (
            ("BYDAY", self.by_weekday),
            ("BYMONTHDAY", self.by_month_day),
            ("BYMONTH", self.by_month),
            ("BYSETPOS", self.by_set_pos),
            ("BYHOUR", self.by_hour),
            ("BYMINUTE", self.by_minute),
        ):
            if values:
                parts.append(f"{key}={_join(values)}")
        return ";".join(parts)

    @classmethod
    def from_rrule_string(cls, text: str, dtstart: Optional[datetime] = None) -> 'RecurrencePattern':
        """
        Build a pattern from RRULE text, e.g. 'FREQ=MONTHLY;BYDAY=MO,TU;BYSETPOS=-1'.

        Every rule part is kept and parsed by dateutil at expansion time.

        Raises:
            ValueError: If the text has no FREQ or a mirrored value cannot be parsed
        """
        body = _rule_body(text)

        parts: Dict[str, str] = {}
        for chunk in body.split(";"):
            key, _, value = chunk.partition("=")
            if key.strip():
                parts[key.strip().upper()] = value.strip()

        if "FREQ" not in parts:
            raise ValueError(f"RRULE has no FREQ: '{text}'")

        return cls(
            frequency=parts["FREQ"],
            interval=int(parts.get("INTERVAL", 1)),
            count=int(parts["COUNT"]) if "COUNT" in parts else None,
            until=isoparse(parts["UNTIL"]) if "UNTIL" in parts else None,
            dtstart=dtstart,
            rule_text=body,
        )
