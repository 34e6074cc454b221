"""Centralized logging configuration

Library modules log through the standard ``logging`` module. The CLI calls
setup_logging(), which installs loguru sinks and routes standard logging
records into loguru.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from config.settings import settings

NULL_LOGGER_NAME = "architect.null"


class InterceptHandler(logging.Handler):
    """Forward standard logging records to loguru"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller that issued the logging call
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(log_level: Optional[str] = None, log_file: Optional[str] = None):
    """Configure loguru sinks and intercept standard logging

    Args:
        log_level: Optional log level override (DEBUG, INFO, WARNING, ERROR)
                  If not provided, uses settings.log_level
        log_file: Optional log file; falls back to settings.log_file
    """
    level = (log_level or settings.log_level).upper()
    log_file = log_file or settings.log_file

    # Remove default logger
    logger.remove()

    # Console output goes to stderr so stdout stays usable for event output
    logger.add(
        sys.stderr,
        format=settings.log_format,
        level=level,
        colorize=True
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
            level=level,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logger.debug(f"Log level: {level}")


def null_logger() -> logging.Logger:
    """A logger that discards every record"""
    null = logging.getLogger(NULL_LOGGER_NAME)
    if not null.handlers:
        null.addHandler(logging.NullHandler())
    null.propagate = False
    return null
