"""Logging setup for the gateway process."""

from __future__ import annotations

import logging

from app.core import config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure root logging for the application.

    Args:
        level: Level name such as "DEBUG". Falls back to the configured
            ``log_level`` setting; unknown names resolve to INFO.

    Example:
        >>> setup_logging("DEBUG")
        >>> logging.getLogger(__name__).debug("debug message")
    """
    if level is None:
        level = config.get_settings().log_level
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
