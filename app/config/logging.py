"""
Logging configuration.

Configures the loguru logger with file rotation for every process
(API server, dramatiq workers, scheduler).
"""

import sys

from loguru import logger

from app.config.settings import settings


def setup_logging(log_file: str = "logs/app.log") -> None:
    """
    Configure logger with file rotation.

    Args:
        log_file: Path of the rotating log file
    """
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)
    logger.add(
        log_file,
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
        encoding="utf-8",
    )
