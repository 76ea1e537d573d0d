"""
Tests for the Supabase store backend against a mocked client.
"""

from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from postgrest.exceptions import APIError
from postgrest.types import ReturnMethod

from tabletads.common.config import SupabaseSettings
from tabletads.common.exceptions import ConfigError, UpstreamError
from tabletads.schemas.internal import ImpressionRecord
from tabletads.store.supabase import SupabaseStore, create_supabase_client


def _client(data: Any = None, error: Exception | None = None) -> MagicMock:
    """Mock client whose rpc/table builders all end in the same execute()."""
    execute = AsyncMock(return_value=MagicMock(data=data), side_effect=error)
    client = MagicMock()
    client.rpc.return_value.execute = execute
    client.table.return_value.insert.return_value.execute = execute
    return client


def _api_error(message: str) -> APIError:
    return APIError({"message": message, "code": "42883", "hint": None, "details": None})


@pytest.mark.asyncio
async def test_fetch_ads_calls_location_rpc() -> None:
    rows = [{"id": "a1", "midias_urls": ["https://cdn.example.com/a1.mp4"]}]
    client = _client(data=rows)
    store = SupabaseStore(client)

    result = await store.fetch_ads_for_location(-23.5, -46.6, ["saude"])

    assert result == rows
    client.rpc.assert_called_once_with(
        "get_ads_for_location_v3",
        {"p_lat": -23.5, "p_lng": -46.6, "p_categorias": ["saude"]},
    )


@pytest.mark.asyncio
async def test_fetch_ads_translates_api_error() -> None:
    store = SupabaseStore(_client(error=_api_error("function does not exist")))

    with pytest.raises(UpstreamError) as exc_info:
        await store.fetch_ads_for_location(-23.5, -46.6)

    assert exc_info.value.message == "function does not exist"
    assert exc_info.value.operation == "fetch_ads"


@pytest.mark.asyncio
async def test_fetch_ads_rejects_non_list_payload() -> None:
    store = SupabaseStore(_client(data=None))

    with pytest.raises(UpstreamError):
        await store.fetch_ads_for_location(-23.5, -46.6)


@pytest.mark.asyncio
async def test_insert_impression_writes_row() -> None:
    client = _client()
    store = SupabaseStore(client)
    record = ImpressionRecord(
        campanha_id="c1",
        custo=Decimal("0.10"),
        created_at="2024-05-01T12:30:00.000Z",
        device_id="dev1",
        lat=-23.5,
        lng=-46.6,
    )

    await store.insert_impression(record)

    client.table.assert_called_once_with("impressoes")
    client.table.return_value.insert.assert_called_once_with(
        {
            "campanha_id": "c1",
            "device_id": "dev1",
            "lat": -23.5,
            "lng": -46.6,
            "created_at": "2024-05-01T12:30:00.000Z",
            "custo": 0.10,
        },
        returning=ReturnMethod.minimal,
    )


@pytest.mark.asyncio
async def test_insert_impression_translates_api_error() -> None:
    store = SupabaseStore(_client(error=_api_error("new row violates row-level security policy")))
    record = ImpressionRecord(campanha_id="c1", custo=Decimal("0.10"), created_at="2024-05-01T12:30:00Z")

    with pytest.raises(UpstreamError) as exc_info:
        await store.insert_impression(record)

    assert exc_info.value.operation == "insert_impression"


@pytest.mark.asyncio
async def test_increment_budget_calls_rpc() -> None:
    client = _client()
    store = SupabaseStore(client)

    await store.increment_budget_used("c1", Decimal("0.10"))

    client.rpc.assert_called_once_with(
        "increment_orcamento_utilizado",
        {"p_campanha_id": "c1", "p_valor": 0.10},
    )


@pytest.mark.asyncio
async def test_create_client_requires_configuration() -> None:
    with pytest.raises(ConfigError):
        await create_supabase_client(SupabaseSettings(url="", anon_key=""), "Bearer token")
