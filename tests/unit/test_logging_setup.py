"""
Unit tests for logging setup.
"""

import logging
import logging.handlers
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

from mailsettings.config.app_config import AppConfig
from mailsettings.utils.logging_setup import setup_logging, get_logger, LOGGER_NAME


class TestLoggingSetup:
    """Test logging configuration."""

    def setup_method(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        root = Path(self.temp_dir.name)
        self.env = patch.dict(os.environ, {"XDG_DATA_HOME": str(root / "data")})
        self.env.start()
        self.config = AppConfig(config_dir=root / "config")

    def teardown_method(self):
        logger = logging.getLogger(LOGGER_NAME)
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        self.env.stop()
        self.temp_dir.cleanup()

    def test_log_file_under_data_dir(self):
        self.config.logging.console_output = False

        log_file = setup_logging(self.config)

        expected = Path(self.temp_dir.name) / "data" / "mailsettings" / "logs" / "mailsettings.log"
        assert log_file == expected
        assert self.config.get_log_file() == expected
        assert expected.exists()

        handlers = logging.getLogger(LOGGER_NAME).handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.handlers.RotatingFileHandler)
        assert Path(handlers[0].baseFilename) == expected

    def test_level_from_config(self):
        self.config.logging.level = "debug"
        self.config.logging.console_output = False

        setup_logging(self.config)

        assert logging.getLogger(LOGGER_NAME).level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        self.config.logging.level = "LOUD"

        setup_logging(self.config)

        assert logging.getLogger(LOGGER_NAME).level == logging.INFO

    def test_log_file_override(self):
        log_file = Path(self.temp_dir.name) / "elsewhere" / "test.log"
        self.config.logging.console_output = False

        assert setup_logging(self.config, log_file=log_file) == log_file
        assert log_file.exists()

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logging(self.config)
        setup_logging(self.config)

        assert len(logging.getLogger(LOGGER_NAME).handlers) == 2

    def test_urllib3_quieted_unless_debugging(self):
        setup_logging(self.config)

        assert logging.getLogger("urllib3").level == logging.WARNING

    def test_get_logger_names(self):
        assert get_logger("core.x").name == "mailsettings.core.x"
        assert get_logger("mailsettings.core.settings.onboarding").name == \
            "mailsettings.core.settings.onboarding"
