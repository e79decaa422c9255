# File: calendar_core/core/config_manager.py
"""
Centralized configuration management for calendar-core.
Loads settings from environment variables and scenario files.
"""

import os
import json
import logging
from pathlib import Path
from typing import Dict, Any, List
import pytz
from dotenv import load_dotenv

from calendar_core.models.config import (
    LayoutConfig,
    VisibleHours,
    DEFAULT_BAR_HEIGHT,
    DEFAULT_GAP,
    DEFAULT_HEADER_HEIGHT,
    DEFAULT_MAX_ROWS,
)

# Load environment variables
load_dotenv()


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Config:
    """Application configuration singleton."""

    BASE_DIR = Path(__file__).parent.parent.parent  # Go up 3 levels from calendar_core/core/

    # Logging
    LOG_LEVEL = os.getenv("CALENDAR_LOG_LEVEL", "INFO").upper()
    LOG_DIR = os.getenv("CALENDAR_LOG_DIR") or None

    # Clock
    TIMEZONE = os.getenv("CALENDAR_TIMEZONE", "UTC")

    # Grid layout (month / resource timeline views)
    DAY_MAX_EVENTS = _env_int("CALENDAR_DAY_MAX_EVENTS", DEFAULT_MAX_ROWS)
    EVENT_BAR_HEIGHT = _env_float("CALENDAR_EVENT_BAR_HEIGHT", DEFAULT_BAR_HEIGHT)
    GAP_BETWEEN_ELEMENTS = _env_float("CALENDAR_GAP_BETWEEN_ELEMENTS", DEFAULT_GAP)
    DAY_NUMBER_HEIGHT = _env_float("CALENDAR_DAY_NUMBER_HEIGHT", DEFAULT_HEADER_HEIGHT)

    # Time axis (day / week views)
    VISIBLE_START_HOUR = _env_float("CALENDAR_VISIBLE_START_HOUR", 0)
    VISIBLE_END_HOUR = _env_float("CALENDAR_VISIBLE_END_HOUR", 24)

    # Business hours fallback
    DEFAULT_BUSINESS_START = _env_float("CALENDAR_BUSINESS_START", 9)
    DEFAULT_BUSINESS_END = _env_float("CALENDAR_BUSINESS_END", 17)
    DEFAULT_BUSINESS_DAYS: List[str] = [
        "monday", "tuesday", "wednesday", "thursday", "friday"
    ]

    @classmethod
    def layout_config(cls) -> LayoutConfig:
        """Build the grid layout settings from the environment."""
        return LayoutConfig(
            bar_height=cls.EVENT_BAR_HEIGHT,
            gap=cls.GAP_BETWEEN_ELEMENTS,
            header_height=cls.DAY_NUMBER_HEIGHT,
            max_rows=cls.DAY_MAX_EVENTS,
        )

    @classmethod
    def visible_hours(cls) -> VisibleHours:
        """Default visible time span for time-axis views."""
        return VisibleHours(start_time=cls.VISIBLE_START_HOUR, end_time=cls.VISIBLE_END_HOUR)

    @classmethod
    def load_scenario(cls, path: Path) -> Dict[str, Any]:
        """Load a calendar scenario (events, resources, window) from JSON."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Scenario file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError("Top-level scenario JSON must be an object")
        return data

    @classmethod
    def validate(cls) -> bool:
        """Validate that the configured values are usable."""
        errors = []

        if cls.DAY_MAX_EVENTS < 0:
            errors.append(f"CALENDAR_DAY_MAX_EVENTS must be >= 0, got {cls.DAY_MAX_EVENTS}")

        if cls.EVENT_BAR_HEIGHT <= 0:
            errors.append(f"CALENDAR_EVENT_BAR_HEIGHT must be positive, got {cls.EVENT_BAR_HEIGHT}")

        if cls.GAP_BETWEEN_ELEMENTS < 0:
            errors.append(f"CALENDAR_GAP_BETWEEN_ELEMENTS must be >= 0, got {cls.GAP_BETWEEN_ELEMENTS}")

        if cls.VISIBLE_START_HOUR >= cls.VISIBLE_END_HOUR:
            errors.append(
                f"Visible hours are empty: {cls.VISIBLE_START_HOUR}-{cls.VISIBLE_END_HOUR}"
            )

        try:
            pytz.timezone(cls.TIMEZONE)
        except pytz.UnknownTimeZoneError:
            errors.append(f"Unknown CALENDAR_TIMEZONE '{cls.TIMEZONE}'")

        if errors:
            config_logger = logging.getLogger(__name__)
            for error in errors:
                config_logger.error(f"Configuration Error: {error}")
            return False

        return True
