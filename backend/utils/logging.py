"""Logging configuration for the scheduling backend."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
APP_LOGGERS = ("backend", "calendar_service")


def setup_logging(level: str = "INFO") -> None:
    """Attach a stdout handler to the application loggers.

    Safe to call more than once; existing handlers are replaced.
    """

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    for name in APP_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(numeric_level)
        logger.handlers.clear()

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
