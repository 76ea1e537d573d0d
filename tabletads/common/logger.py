"""
Structured logging using structlog.

JSON lines in production, coloured console output in development.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from tabletads.common.config import get_settings

# Chatty stdlib loggers used by the Supabase client stack
_QUIET_LOGGERS = ("httpx", "httpcore", "hpack")


def setup_logging() -> None:
    """Configure structlog and the stdlib root logger from settings."""
    settings = get_settings()
    level = logging.getLevelName(settings.logging.level)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if settings.logging.format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Optional logger name, bound as ``logger_name``.
    """
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger_name=name)
    return logger


def log_context(**kwargs: Any) -> None:
    """
    Bind context variables to every subsequent log line of the current request.

    Usage:
        log_context(device_id="tab-01")
        logger.info("Playlist served")  # includes device_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_log_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()


setup_logging()

logger = get_logger("tabletads")
