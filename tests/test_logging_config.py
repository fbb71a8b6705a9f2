"""Tests for logging configuration."""

import logging

import pytest

from siteaudit.logging_config import setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    """Put the root logger and the touched loggers back after each test."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_levels = {
        name: logging.getLogger(name).level
        for name in ("", "siteaudit", "httpx", "httpcore", "asyncio", "playwright")
    }
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    for name, level in saved_levels.items():
        logging.getLogger(name).setLevel(level)


class TestSetupLogging:
    """Test cases for setup_logging."""

    def test_package_logger_level(self):
        logger = setup_logging("WARNING")

        assert logger.name == "siteaudit"
        assert logger.level == logging.WARNING
        assert not logging.getLogger("siteaudit.scheduler").isEnabledFor(logging.INFO)

    def test_third_party_loggers_quieted(self):
        setup_logging("INFO")

        for name in ("httpx", "httpcore", "asyncio", "playwright"):
            assert logging.getLogger(name).level == logging.WARNING
        assert logging.getLogger("siteaudit").level == logging.INFO

    def test_debug_lets_third_party_through(self):
        setup_logging("debug")

        assert logging.getLogger("httpx").level == logging.DEBUG
        assert logging.getLogger("playwright").level == logging.DEBUG

    def test_error_level_not_lowered(self):
        setup_logging("ERROR")

        assert logging.getLogger("httpx").level == logging.ERROR

    def test_unknown_level_defaults_to_info(self):
        assert setup_logging("chatty").level == logging.INFO

    def test_log_file_is_utf8(self, tmp_path):
        """Emoji progress lines survive in the log file."""
        log_file = tmp_path / "logs" / "audit.log"

        setup_logging("INFO", log_file=str(log_file), format_string="%(name)s %(message)s")
        logging.getLogger("siteaudit.scheduler").info("🌐 Checking: https://ex.com/")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert log_file.read_text(encoding="utf-8").strip().endswith(
            "siteaudit.scheduler 🌐 Checking: https://ex.com/"
        )
