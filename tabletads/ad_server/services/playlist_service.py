"""
Playlist service for in-vehicle tablets.

Pipeline:
1. Validate the reported position
2. Fetch location/category eligible ads from the store RPC
3. Drop ads without a playable media URL
4. Stamp each survivor with an impression token
"""

from __future__ import annotations

from tabletads.ad_server.middleware.metrics import (
    record_playlist_request,
    record_store_latency,
)
from tabletads.common.config import get_settings
from tabletads.common.exceptions import UpstreamError, ValidationError
from tabletads.common.logger import get_logger
from tabletads.common.utils import Timer, current_timestamp_ms, is_present_coordinate
from tabletads.schemas.internal import AdCandidate
from tabletads.schemas.request import PlaylistRequest
from tabletads.schemas.response import PlaylistEntry, PlaylistResponse
from tabletads.store.base import AdStore

logger = get_logger(__name__)

MISSING_COORDINATES = "Latitude e Longitude são obrigatórios"


class PlaylistService:
    """Resolves the playlist a tablet should loop at its current position."""

    def __init__(self, store: AdStore):
        self.store = store
        self.settings = get_settings().ad_serving

    async def build_playlist(self, request: PlaylistRequest) -> PlaylistResponse:
        """
        Build the playlist for one tablet poll.

        Raises:
            ValidationError: ``lat`` or ``lng`` is missing, zero or not finite.
            UpstreamError: the store call failed or returned unusable rows.
        """
        if not (is_present_coordinate(request.lat) and is_present_coordinate(request.lng)):
            raise ValidationError(MISSING_COORDINATES)

        with Timer() as timer:
            rows = await self.store.fetch_ads_for_location(
                lat=request.lat,
                lng=request.lng,
                categories=request.categories,
            )
        record_store_latency("fetch_ads", timer.elapsed_s)

        try:
            candidates = [AdCandidate.from_row(row) for row in rows]
        except (KeyError, TypeError, AttributeError) as e:
            raise UpstreamError(
                f"Malformed ad returned by store: {e}", operation="fetch_ads"
            ) from e

        issued_at = current_timestamp_ms()
        playlist = [
            self._to_entry(candidate, issued_at)
            for candidate in candidates
            if candidate.media_url is not None
        ]

        logger.info(
            "Playlist served",
            device_id=request.device_id,
            lat=request.lat,
            lng=request.lng,
            count=len(playlist),
            candidates=len(candidates),
        )
        record_playlist_request(
            success=True,
            size=len(playlist),
            dropped=len(candidates) - len(playlist),
        )

        return PlaylistResponse(
            playlist=playlist,
            next_fetch_in_seconds=self.settings.next_fetch_in_seconds,
        )

    def _to_entry(self, candidate: AdCandidate, issued_at: int) -> PlaylistEntry:
        return PlaylistEntry(
            id=candidate.id,
            titulo=candidate.titulo,
            categoria=candidate.categoria,
            media_url=candidate.media_url,
            qr_code_link=candidate.qr_code_link,
            tipo=self.settings.default_media_type,
            duration=self.settings.default_duration_seconds,
            impression_token=self._impression_token(candidate.id, issued_at),
        )

    def _impression_token(self, ad_id: str, issued_at: int) -> str:
        """Correlation token only; it is neither stored nor verified."""
        return f"{self.settings.impression_token_prefix}_{ad_id}_{issued_at}"
