"""
Supabase (PostgREST) store backend.

A client is built for every request with the caller's ``Authorization``
header, so row-level security is evaluated as the tablet's user.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import httpx
from postgrest.exceptions import APIError
from postgrest.types import ReturnMethod
from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from tabletads.common.config import SupabaseSettings, get_settings
from tabletads.common.exceptions import ConfigError, UpstreamError
from tabletads.models import Impressao
from tabletads.schemas.internal import ImpressionRecord
from tabletads.store.base import AdStore


async def create_supabase_client(
    config: SupabaseSettings,
    authorization: str | None = None,
) -> AsyncClient:
    """Create a Supabase client that forwards the caller's credentials."""
    if not config.url or not config.anon_key:
        raise ConfigError("Supabase URL and anon key must be configured")

    headers = dict(AsyncClientOptions().headers)
    if authorization:
        headers["Authorization"] = authorization

    options = AsyncClientOptions(
        headers=headers,
        auto_refresh_token=False,
        persist_session=False,
    )
    try:
        return await acreate_client(config.url, config.anon_key, options=options)
    except Exception as e:
        # Rejected URL or key format
        raise ConfigError(f"Could not create Supabase client: {e}") from e


def _error_message(exc: Exception) -> str:
    if isinstance(exc, APIError) and exc.message:
        return exc.message
    return str(exc) or exc.__class__.__name__


class SupabaseStore(AdStore):
    """Store backed by the Supabase REST API."""

    def __init__(self, client: AsyncClient):
        self.client = client
        self.settings = get_settings().store

    async def fetch_ads_for_location(
        self,
        lat: float,
        lng: float,
        categories: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        params = {"p_lat": lat, "p_lng": lng, "p_categorias": categories}
        try:
            response = await self.client.rpc(self.settings.ads_for_location_rpc, params).execute()
        except (APIError, httpx.HTTPError) as e:
            raise UpstreamError(_error_message(e), operation="fetch_ads") from e

        if not isinstance(response.data, list):
            raise UpstreamError(
                "Unexpected response from location RPC",
                operation="fetch_ads",
                details={"type": type(response.data).__name__},
            )
        return response.data

    async def insert_impression(self, impression: ImpressionRecord) -> None:
        try:
            await (
                self.client.table(Impressao.__tablename__)
                .insert(impression.as_row(), returning=ReturnMethod.minimal)
                .execute()
            )
        except (APIError, httpx.HTTPError) as e:
            raise UpstreamError(_error_message(e), operation="insert_impression") from e

    async def increment_budget_used(self, campaign_id: str, amount: Decimal) -> None:
        params = {"p_campanha_id": campaign_id, "p_valor": float(amount)}
        try:
            await self.client.rpc(self.settings.increment_budget_rpc, params).execute()
        except (APIError, httpx.HTTPError) as e:
            raise UpstreamError(_error_message(e), operation="increment_budget") from e

    async def close(self) -> None:
        """Release the HTTP connection pool held by the REST client."""
        await self.client.postgrest.aclose()
