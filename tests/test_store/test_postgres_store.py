"""
Tests for the direct PostgreSQL store backend (SQLite stands in for Postgres).
"""

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tabletads.common.exceptions import UpstreamError
from tabletads.models import Impressao
from tabletads.schemas.internal import ImpressionRecord
from tabletads.store.postgres import PostgresStore


def _record(**overrides: object) -> ImpressionRecord:
    values = {
        "campanha_id": str(uuid.uuid4()),
        "custo": Decimal("0.10"),
        "created_at": "2024-05-01T12:30:00.000Z",
        "device_id": "dev1",
        "lat": -23.5,
        "lng": -46.6,
    }
    values.update(overrides)
    return ImpressionRecord(**values)


@pytest.mark.asyncio
async def test_insert_impression_persists_row(test_db: AsyncSession) -> None:
    store = PostgresStore(test_db)
    record = _record()

    await store.insert_impression(record)

    rows = (await test_db.execute(select(Impressao))).scalars().all()
    assert len(rows) == 1
    assert uuid.UUID(rows[0].campanha_id) == uuid.UUID(record.campanha_id)
    assert rows[0].device_id == "dev1"
    assert rows[0].lat == -23.5
    assert rows[0].custo == Decimal("0.10")
    assert rows[0].created_at.year == 2024


@pytest.mark.asyncio
async def test_insert_impression_rejects_bad_timestamp(test_db: AsyncSession) -> None:
    store = PostgresStore(test_db)

    with pytest.raises(UpstreamError) as exc_info:
        await store.insert_impression(_record(created_at="ontem"))

    assert exc_info.value.operation == "insert_impression"
    count = (await test_db.execute(select(func.count()).select_from(Impressao))).scalar_one()
    assert count == 0


@pytest.mark.asyncio
async def test_missing_location_function_raises_upstream_error(test_db: AsyncSession) -> None:
    """Store-side failures surface as UpstreamError, not driver exceptions."""
    store = PostgresStore(test_db)

    with pytest.raises(UpstreamError) as exc_info:
        await store.fetch_ads_for_location(-23.5, -46.6)

    assert exc_info.value.operation == "fetch_ads"


@pytest.mark.asyncio
async def test_missing_increment_function_raises_upstream_error(test_db: AsyncSession) -> None:
    store = PostgresStore(test_db)

    with pytest.raises(UpstreamError) as exc_info:
        await store.increment_budget_used(str(uuid.uuid4()), Decimal("0.10"))

    assert exc_info.value.operation == "increment_budget"
