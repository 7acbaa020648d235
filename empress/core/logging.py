"""
Loguru configuration.

Console output goes to stderr so command output on stdout stays clean.
Errors are also appended as JSON lines to the configured error log.
"""

from __future__ import annotations

import sys

from loguru import logger

CONSOLE_FORMAT = "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}"


def configure_logging(level: str = "INFO", error_log_file: str | None = "error.log") -> None:
    """Install the console sink and the JSON error-file sink."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=CONSOLE_FORMAT)
    if error_log_file:
        logger.add(error_log_file, level="ERROR", serialize=True)
