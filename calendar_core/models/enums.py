# File: calendar_core/models/enums.py

from enum import Enum


class Frequency(Enum):
    """RFC 5545 recurrence frequencies."""
    YEARLY = "YEARLY"
    MONTHLY = "MONTHLY"
    WEEKLY = "WEEKLY"
    DAILY = "DAILY"
    HOURLY = "HOURLY"
    MINUTELY = "MINUTELY"


class TimeOffStatus(Enum):
    """Time-off request status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"  # the only status that does not block


class PolicyKind(Enum):
    """Which schedule governs a resource's availability."""
    WHITELIST = "whitelist"  # available slots: closed world
    BLACKLIST = "blacklist"  # blocked slots: open world
    NONE = "none"            # business hours fallback


class GridType(Enum):
    """Unit of one grid column."""
    DAY = "day"
    HOUR = "hour"


class AvailabilityReason(Enum):
    """Why a slot was judged available or unavailable."""
    SLOT_AVAILABLE = "slot_available"
    OUTSIDE_AVAILABLE_SLOTS = "outside_available_slots"
    BLOCKED_SLOT = "blocked_slot"
    NOT_BLOCKED = "not_blocked"
    WITHIN_BUSINESS_HOURS = "within_business_hours"
    OUTSIDE_BUSINESS_HOURS = "outside_business_hours"
    UNRESTRICTED = "unrestricted"
    TIME_OFF = "time_off"
