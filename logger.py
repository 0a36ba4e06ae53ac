"""Logging configuration for Household Assistant."""

import logging
import sys
from datetime import datetime

from config import LOG_DIR, LOG_LEVEL

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"


def setup_logging() -> logging.Logger:
    """Set up the assistant logger with a dated file and an optional console."""
    level = logging.getLevelName(LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logger = logging.getLogger("household_assistant")
    logger.setLevel(level)
    logger.handlers.clear()

    log_file = LOG_DIR / f"{datetime.now().strftime('%Y-%m-%d')}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(file_handler)

    # Console only when attached to a terminal
    if sys.stdout is not None and sys.stdout.isatty():
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(console_handler)

    # APScheduler logs every interval run at INFO; keep only its problems
    aps_logger = logging.getLogger("apscheduler")
    aps_logger.setLevel(logging.WARNING)
    aps_logger.addHandler(file_handler)

    return logger


# Global logger instance
logger = setup_logging()
