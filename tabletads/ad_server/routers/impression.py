"""
Impression endpoint (``track-impression``) called by tablets after each view.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from tabletads.ad_server.middleware.metrics import record_impression
from tabletads.ad_server.responses import EdgeJSONResponse, preflight_response
from tabletads.ad_server.services.impression_service import ImpressionService
from tabletads.common.exceptions import TabletAdsError, UpstreamError
from tabletads.common.logger import log_context
from tabletads.schemas.request import ImpressionRequest
from tabletads.schemas.response import ErrorResponse, ImpressionResponse
from tabletads.store import AdStore, get_store

router = APIRouter(default_response_class=EdgeJSONResponse)


def get_impression_service(store: AdStore = Depends(get_store)) -> ImpressionService:
    """Dependency to get impression service."""
    return ImpressionService(store)


@router.options("/track-impression", include_in_schema=False)
async def track_impression_preflight() -> PlainTextResponse:
    return preflight_response()


@router.post(
    "/track-impression",
    response_model=ImpressionResponse,
    responses={400: {"model": ErrorResponse}},
)
async def track_impression(
    body: ImpressionRequest,
    impression_service: ImpressionService = Depends(get_impression_service),
) -> ImpressionResponse:
    """
    Record that a campaign was shown on a tablet and charge its budget.

    Answers ``{"success": true}`` even when the impression row could not be
    written. Only a missing ``campanha_id`` or a failure after the insert
    (the budget increment) produces a 400.
    """
    log_context(campanha_id=body.campanha_id, device_id=body.device_id)

    try:
        return await impression_service.record_impression(body)
    except Exception as e:
        record_impression("error")
        if isinstance(e, TabletAdsError):
            raise
        raise UpstreamError(
            str(e) or e.__class__.__name__, operation="track_impression"
        ) from e
