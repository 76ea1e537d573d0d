"""
Playlist endpoint (``get-ads``) polled by in-vehicle tablets.

The tablet reports its position and receives the ads eligible there,
plus the number of seconds to wait before polling again.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from tabletads.ad_server.middleware.metrics import record_playlist_request
from tabletads.ad_server.responses import EdgeJSONResponse, preflight_response
from tabletads.ad_server.services.playlist_service import PlaylistService
from tabletads.common.exceptions import TabletAdsError, UpstreamError
from tabletads.common.logger import log_context
from tabletads.schemas.request import PlaylistRequest
from tabletads.schemas.response import ErrorResponse, PlaylistResponse
from tabletads.store import AdStore, get_store

router = APIRouter(default_response_class=EdgeJSONResponse)


def get_playlist_service(store: AdStore = Depends(get_store)) -> PlaylistService:
    """Dependency to get playlist service."""
    return PlaylistService(store)


@router.options("/get-ads", include_in_schema=False)
async def get_ads_preflight() -> PlainTextResponse:
    return preflight_response()


@router.post(
    "/get-ads",
    response_model=PlaylistResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_ads(
    body: PlaylistRequest,
    playlist_service: PlaylistService = Depends(get_playlist_service),
) -> PlaylistResponse:
    """
    Resolve the playlist for a tablet's current position.

    - ``lat``/``lng`` are required; ``0`` is treated as missing
    - ``categories`` optionally narrows the candidate campaigns
    - Ads without media are left out
    - ``next_fetch_in_seconds`` is always returned, even for an empty playlist

    Every failure, client-side or store-side, is answered with 400.
    """
    log_context(device_id=body.device_id)

    try:
        return await playlist_service.build_playlist(body)
    except Exception as e:
        record_playlist_request(success=False)
        if isinstance(e, TabletAdsError):
            raise
        raise UpstreamError(str(e) or e.__class__.__name__, operation="get_ads") from e
