"""
Pydantic schemas for the edge API and internal dataclasses.
"""

from tabletads.schemas.internal import AdCandidate, ImpressionRecord
from tabletads.schemas.request import ImpressionRequest, PlaylistRequest
from tabletads.schemas.response import (
    ErrorResponse,
    HealthResponse,
    ImpressionResponse,
    PlaylistEntry,
    PlaylistResponse,
)

__all__ = [
    # Request schemas
    "PlaylistRequest",
    "ImpressionRequest",
    # Response schemas
    "PlaylistEntry",
    "PlaylistResponse",
    "ImpressionResponse",
    "ErrorResponse",
    "HealthResponse",
    # Internal schemas
    "AdCandidate",
    "ImpressionRecord",
]
