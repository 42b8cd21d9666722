"""
Logging Configuration Module

Centralised loguru setup driven by the LOG_LEVEL environment variable.

Usage:
    from meeting_approval.logging_config import configure_logging
    configure_logging()  # Call once at startup

Environment Variables:
    LOG_LEVEL: Console verbosity (default: INFO)
        - DEBUG: Every queue/dedup transition
        - INFO: Request lifecycle (default)
        - WARNING: Warnings and errors only
        - ERROR: Errors only
"""

import os
import sys

from loguru import logger


VALID_LOG_LEVELS: set[str] = {"DEBUG", "INFO", "WARNING", "ERROR"}

DEFAULT_LOG_LEVEL = "INFO"


def get_log_level() -> str:
    """
    Get the configured log level from the environment.

    Returns:
        str: DEBUG, INFO, WARNING or ERROR. Falls back to INFO if unset or invalid.
    """
    level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    if level not in VALID_LOG_LEVELS:
        return DEFAULT_LOG_LEVEL

    return level


def configure_logging() -> None:
    """Replace loguru's default stderr sink with one honouring LOG_LEVEL."""
    level = get_log_level()

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - {message}",
        colorize=True,
    )

    logger.debug(f"Logging configured: console level={level}")
