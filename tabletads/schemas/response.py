"""
Response schemas for the tablet-facing edge endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class PlaylistEntry(BaseModel):
    """One ad in a tablet playlist."""

    id: str = Field(..., description="Campaign identifier")
    titulo: str | None = Field(None, description="Campaign title")
    categoria: str | None = Field(None, description="Campaign category")
    media_url: str = Field(..., description="Media file to play")
    qr_code_link: str | None = Field(None, description="Link encoded in the on-screen QR code")
    tipo: str = Field(..., description="Media type")
    duration: int = Field(..., description="Display time in seconds")
    impression_token: str = Field(
        ..., description="Opaque token echoed back when reporting the impression"
    )


class PlaylistResponse(BaseModel):
    """Playlist plus the interval after which the tablet must ask again."""

    playlist: list[PlaylistEntry] = Field(default_factory=list)
    next_fetch_in_seconds: int = Field(..., description="Re-poll interval in seconds")

    model_config = {
        "json_schema_extra": {
            "example": {
                "playlist": [
                    {
                        "id": "6f1c2a4e-8d7b-4b1e-9a35-0c2f5e7d9b11",
                        "titulo": "Pizzaria do Bairro",
                        "categoria": "alimentacao",
                        "media_url": "https://cdn.example.com/pizzaria.mp4",
                        "qr_code_link": "https://pizzaria.example.com/promo",
                        "tipo": "video",
                        "duration": 15,
                        "impression_token": "imp_6f1c2a4e-8d7b-4b1e-9a35-0c2f5e7d9b11_1714566600000",
                    }
                ],
                "next_fetch_in_seconds": 300,
            }
        }
    }


class ImpressionResponse(BaseModel):
    """Acknowledgement sent to the tablet after an impression report."""

    success: bool = True


class ErrorResponse(BaseModel):
    """Error payload for the edge endpoints."""

    error: str = Field(..., description="Human-readable error message")


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Service version")
    backend: str = Field(..., description="Configured store backend")
    store: bool = Field(..., description="Store reachability")
