"""
Custom exceptions for tabletads.

Every ``TabletAdsError`` reaching the HTTP layer is answered with
400 ``{"error": message}``.
"""

from typing import Any


class TabletAdsError(Exception):
    """Base exception for tabletads."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(TabletAdsError):
    """Configuration related errors."""

    pass


class ValidationError(TabletAdsError):
    """A required request field is missing or unusable."""

    pass


class UpstreamError(TabletAdsError):
    """The data store rejected or failed a query, insert or RPC."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.operation = operation
