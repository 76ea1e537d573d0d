"""
Common utilities and shared modules.
"""

from tabletads.common.config import get_settings, settings
from tabletads.common.database import Base, db, init_db
from tabletads.common.exceptions import TabletAdsError, UpstreamError, ValidationError
from tabletads.common.logger import get_logger, log_context, logger

__all__ = [
    "settings",
    "get_settings",
    "logger",
    "get_logger",
    "log_context",
    "db",
    "init_db",
    "Base",
    "TabletAdsError",
    "ValidationError",
    "UpstreamError",
]
