"""Logging configuration for the site auditor."""

import logging
import sys
from pathlib import Path
from typing import Optional

from siteaudit.constants import LOG_FORMAT, PACKAGE_LOGGER, QUIET_LOGGERS


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """Configure logging for the site auditor.

    Progress lines carry emoji, so the log file is always written as UTF-8.
    At DEBUG the browser and HTTP client loggers are let through as well.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL); unknown
            names fall back to INFO
        log_file: Optional log file path
        format_string: Optional custom format string

    Returns:
        The ``siteaudit`` package logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=numeric_level,
        format=format_string or LOG_FORMAT,
        handlers=handlers,
        force=True  # Override any existing configuration
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(numeric_level)

    if numeric_level <= logging.DEBUG:
        third_party_level = numeric_level
    else:
        third_party_level = max(numeric_level, logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    return package_logger
