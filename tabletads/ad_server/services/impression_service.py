"""
Impression tracking service with flat per-view billing.

Delivery is at-most-once and best-effort: a failed insert is logged and
the tablet still receives a success acknowledgement, so the display loop
is never blocked on telemetry. The budget increment runs only after the
insert succeeded. The two writes are not transactional; a crash between
them leaves an impression whose cost was never charged.
"""

from __future__ import annotations

from tabletads.ad_server.middleware.metrics import (
    record_budget_charge,
    record_impression,
    record_store_latency,
)
from tabletads.common.config import get_settings
from tabletads.common.exceptions import ValidationError
from tabletads.common.logger import get_logger
from tabletads.common.utils import Timer, current_iso_timestamp
from tabletads.schemas.internal import ImpressionRecord
from tabletads.schemas.request import ImpressionRequest
from tabletads.schemas.response import ImpressionResponse
from tabletads.store.base import AdStore

logger = get_logger(__name__)

MISSING_CAMPAIGN = "ID da campanha é obrigatório"


class ImpressionService:
    """Records tablet-reported views and charges the campaign budget."""

    def __init__(self, store: AdStore):
        self.store = store
        self.settings = get_settings().billing

    async def record_impression(self, request: ImpressionRequest) -> ImpressionResponse:
        if not request.campanha_id:
            raise ValidationError(MISSING_CAMPAIGN)

        cost = self.settings.cost_per_view
        impression = ImpressionRecord(
            campanha_id=request.campanha_id,
            custo=cost,
            created_at=request.timestamp or current_iso_timestamp(),
            device_id=request.device_id,
            lat=request.lat,
            lng=request.lng,
        )

        try:
            with Timer() as timer:
                await self.store.insert_impression(impression)
        except Exception as e:
            logger.error(
                "Failed to save impression",
                error=str(e),
                error_type=e.__class__.__name__,
            )
            record_impression("insert_failed")
            return ImpressionResponse(success=True)
        record_store_latency("insert_impression", timer.elapsed_s)

        with Timer() as timer:
            await self.store.increment_budget_used(request.campanha_id, cost)
        record_store_latency("increment_budget", timer.elapsed_s)

        record_impression("recorded")
        record_budget_charge(float(cost))
        logger.info("Impression recorded", cost=str(cost))

        return ImpressionResponse(success=True)
