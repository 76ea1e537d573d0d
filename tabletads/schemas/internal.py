"""
Internal data schemas passed between services and the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


@dataclass
class AdCandidate:
    """Ad row returned by the location RPC."""

    id: str
    titulo: str | None = None
    categoria: str | None = None
    midias_urls: list[str] = field(default_factory=list)
    qr_code_link: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> AdCandidate:
        return cls(
            id=str(row["id"]),
            titulo=row.get("titulo"),
            categoria=row.get("categoria"),
            midias_urls=list(row.get("midias_urls") or []),
            qr_code_link=row.get("qr_code_link"),
        )

    @property
    def media_url(self) -> str | None:
        """First media URL, or None when the campaign has no media."""
        if not self.midias_urls:
            return None
        return self.midias_urls[0] or None


@dataclass
class ImpressionRecord:
    """Row written to the impressions table."""

    campanha_id: str
    custo: Decimal
    created_at: str
    device_id: str | None = None
    lat: float | None = None
    lng: float | None = None

    def as_row(self) -> dict[str, Any]:
        # Numeric columns accept a JSON number; Decimal is not JSON-serializable
        return {
            "campanha_id": self.campanha_id,
            "device_id": self.device_id,
            "lat": self.lat,
            "lng": self.lng,
            "created_at": self.created_at,
            "custo": float(self.custo),
        }
