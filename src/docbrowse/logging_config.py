"""Logging configuration for docbrowse.

docbrowse logs through loguru. Flask's development server (werkzeug) and
watchdog log through the standard library; they are held at WARNING unless
verbose.
"""

import logging
import sys

from loguru import logger

LOG_FORMAT = "{level.icon} {message}"

STDLIB_LOGGERS: tuple[str, ...] = ("werkzeug", "watchdog")


def configure_logging(*, verbose: bool = False) -> None:
    """Send docbrowse logs to stderr and set third-party logger levels.

    Args:
        verbose: Log at DEBUG, and let werkzeug request lines and watchdog
            messages through at INFO.
    """
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", format=LOG_FORMAT)

    stdlib_level = logging.INFO if verbose else logging.WARNING
    for name in STDLIB_LOGGERS:
        logging.getLogger(name).setLevel(stdlib_level)
