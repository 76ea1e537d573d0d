"""
Request schemas for the tablet-facing edge endpoints.

Every field is optional at the schema level so that a missing required
value is reported with the endpoint's own message instead of a generic
schema error. Required-ness is enforced by the services.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, Field, field_validator


class PlaylistRequest(BaseModel):
    """Tablet asking which ads to loop at its current position."""

    lat: float | None = Field(None, description="Latitude of the vehicle")
    lng: float | None = Field(None, description="Longitude of the vehicle")
    device_id: str | None = Field(None, description="Tablet identifier")
    categories: list[str] | None = Field(
        None, description="Restrict candidates to these campaign categories"
    )

    model_config = {
        "coerce_numbers_to_str": True,
        "json_schema_extra": {
            "example": {
                "lat": -23.5505,
                "lng": -46.6333,
                "device_id": "tablet-0042",
                "categories": ["alimentacao", "varejo"],
            }
        },
    }


class ImpressionRequest(BaseModel):
    """
    Tablet reporting that a campaign was shown.

    Only ``campanha_id`` is required. Position and time are telemetry:
    an unreadable position is stored as NULL and the timestamp is passed
    through as sent.
    """

    campanha_id: str | None = Field(None, description="Campaign identifier")
    lat: float | None = Field(None, description="Latitude where the ad was shown")
    lng: float | None = Field(None, description="Longitude where the ad was shown")
    device_id: str | None = Field(None, description="Tablet identifier")
    timestamp: str | None = Field(
        None, description="ISO-8601 time of the view; defaults to receipt time"
    )

    model_config = {
        "coerce_numbers_to_str": True,
        "json_schema_extra": {
            "example": {
                "campanha_id": "6f1c2a4e-8d7b-4b1e-9a35-0c2f5e7d9b11",
                "lat": -23.5505,
                "lng": -46.6333,
                "device_id": "tablet-0042",
                "timestamp": "2024-05-01T12:30:00.000Z",
            }
        },
    }

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def unreadable_coordinate_to_none(cls, v: Any) -> float | None:
        if v is None or isinstance(v, bool):
            return None
        try:
            value = float(v)
        except (TypeError, ValueError):
            return None
        return value if math.isfinite(value) else None
