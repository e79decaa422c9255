# File: tests/unit/test_config.py
"""
Unit tests for Config and logger setup.
"""

import json
import logging
import pytest
from unittest.mock import patch

from calendar_core.core.config_manager import Config
from calendar_core.utils.logger import LoggerMixin, setup_logger


class TestConfig:
    """Test environment-backed settings."""

    def test_layout_config_from_settings(self):
        with patch.object(Config, 'DAY_MAX_EVENTS', 5), patch.object(Config, 'EVENT_BAR_HEIGHT', 18.0):
            config = Config.layout_config()

        assert config.max_rows == 5
        assert config.bar_height == 18.0

    def test_visible_hours_from_settings(self):
        with patch.object(Config, 'VISIBLE_START_HOUR', 7.0), patch.object(Config, 'VISIBLE_END_HOUR', 19.0):
            assert Config.visible_hours().bounds() == (7.0, 19.0)

    def test_validate_defaults(self):
        assert Config.validate() is True

    @pytest.mark.parametrize("attribute,value", [
        ('DAY_MAX_EVENTS', -1),
        ('EVENT_BAR_HEIGHT', 0),
        ('GAP_BETWEEN_ELEMENTS', -2.0),
        ('VISIBLE_START_HOUR', 30.0),
        ('TIMEZONE', 'Mars/Olympus_Mons'),
    ])
    def test_validate_rejects(self, attribute, value):
        with patch.object(Config, attribute, value):
            assert Config.validate() is False

    def test_load_scenario(self, temp_scenario_dir):
        path = temp_scenario_dir / "scenario.json"
        path.write_text(json.dumps({'view': 'month'}), encoding='utf-8')

        assert Config.load_scenario(path) == {'view': 'month'}

    def test_load_missing_scenario(self, temp_scenario_dir):
        with pytest.raises(FileNotFoundError):
            Config.load_scenario(temp_scenario_dir / "missing.json")

    def test_load_non_object_scenario(self, temp_scenario_dir):
        path = temp_scenario_dir / "list.json"
        path.write_text("[]", encoding='utf-8')

        with pytest.raises(ValueError, match="object"):
            Config.load_scenario(path)


class TestLogger:
    """Test logger wiring."""

    def test_no_duplicate_handlers(self):
        first = setup_logger("calendar_core.tests.once")
        second = setup_logger("calendar_core.tests.once")

        assert first is second
        assert len(second.handlers) == 1

    def test_explicit_level(self):
        logger = setup_logger("calendar_core.tests.debug", logging.DEBUG)

        assert logger.level == logging.DEBUG

    def test_file_handler_when_log_dir_set(self, tmp_path):
        with patch.object(Config, 'LOG_DIR', str(tmp_path / "logs")):
            logger = setup_logger("calendar_core.tests.file")

        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
        assert (tmp_path / "logs").is_dir()

    def test_mixin_names_logger_after_class(self):
        class Widget(LoggerMixin):
            pass

        assert Widget().logger.name == "calendar_core.Widget"
