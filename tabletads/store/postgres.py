"""
Direct PostgreSQL store backend using SQLAlchemy async.

Calls the same database functions the Supabase backend reaches through
PostgREST. The impression insert and the budget increment are committed
separately, exactly as two REST calls would be.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tabletads.common.config import get_settings
from tabletads.common.exceptions import UpstreamError
from tabletads.common.utils import parse_iso_timestamp
from tabletads.models import Impressao
from tabletads.schemas.internal import ImpressionRecord
from tabletads.store.base import AdStore


def _db_error_message(exc: Exception) -> str:
    # DBAPIError wraps the driver exception, whose text is the useful part
    return str(getattr(exc, "orig", None) or exc)


class PostgresStore(AdStore):
    """Store backed by a per-request SQLAlchemy session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.settings = get_settings().store

    async def fetch_ads_for_location(
        self,
        lat: float,
        lng: float,
        categories: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        query = text(
            f"SELECT * FROM {self.settings.ads_for_location_rpc}"
            "(:p_lat, :p_lng, :p_categorias)"
        )
        try:
            result = await self.session.execute(
                query,
                {"p_lat": lat, "p_lng": lng, "p_categorias": categories},
            )
        except SQLAlchemyError as e:
            raise UpstreamError(_db_error_message(e), operation="fetch_ads") from e

        return [dict(row._mapping) for row in result]

    async def insert_impression(self, impression: ImpressionRecord) -> None:
        try:
            row = Impressao(
                campanha_id=impression.campanha_id,
                device_id=impression.device_id,
                lat=impression.lat,
                lng=impression.lng,
                created_at=parse_iso_timestamp(impression.created_at),
                custo=impression.custo,
            )
            self.session.add(row)
            await self.session.commit()
        except (SQLAlchemyError, ValueError) as e:
            await self.session.rollback()
            raise UpstreamError(_db_error_message(e), operation="insert_impression") from e

    async def increment_budget_used(self, campaign_id: str, amount: Decimal) -> None:
        query = text(
            f"SELECT {self.settings.increment_budget_rpc}(:p_campanha_id, :p_valor)"
        )
        try:
            await self.session.execute(
                query,
                {"p_campanha_id": campaign_id, "p_valor": amount},
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise UpstreamError(_db_error_message(e), operation="increment_budget") from e
