"""
Pytest configuration and fixtures.
"""

import os

os.environ.setdefault("TABLETADS_ENV", "test")

from collections.abc import AsyncGenerator
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tabletads import models  # noqa: F401  registers tables on Base.metadata
from tabletads.ad_server.main import app
from tabletads.common.database import Base
from tabletads.common.exceptions import UpstreamError
from tabletads.schemas.internal import ImpressionRecord
from tabletads.store import AdStore, get_store

# Test database URL (use SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeStore(AdStore):
    """In-memory store recording every call; failures are injected per operation."""

    def __init__(self) -> None:
        self.ads: list[dict[str, Any]] = []
        self.fetch_calls: list[dict[str, Any]] = []
        self.impressions: list[ImpressionRecord] = []
        self.increments: list[tuple[str, Decimal]] = []
        self.fetch_error: Exception | None = None
        self.insert_error: Exception | None = None
        self.increment_error: Exception | None = None

    async def fetch_ads_for_location(
        self,
        lat: float,
        lng: float,
        categories: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        self.fetch_calls.append({"lat": lat, "lng": lng, "categories": categories})
        if self.fetch_error:
            raise self.fetch_error
        return list(self.ads)

    async def insert_impression(self, impression: ImpressionRecord) -> None:
        if self.insert_error:
            raise self.insert_error
        self.impressions.append(impression)

    async def increment_budget_used(self, campaign_id: str, amount: Decimal) -> None:
        if self.increment_error:
            raise self.increment_error
        self.increments.append((campaign_id, amount))


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def store_unavailable() -> UpstreamError:
    return UpstreamError('relation "impressoes" does not exist', operation="insert_impression")


@pytest_asyncio.fixture(scope="function")
async def test_db() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(fake_store: FakeStore) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with the store replaced by ``fake_store``."""

    async def override_get_store() -> AsyncGenerator[AdStore, None]:
        yield fake_store

    app.dependency_overrides[get_store] = override_get_store

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def unpatched_client() -> AsyncGenerator[AsyncClient, None]:
    """Test client resolving the real ``get_store`` from settings."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def sample_ads() -> list[dict[str, Any]]:
    """Rows as returned by the location RPC."""
    return [
        {
            "id": "6f1c2a4e-8d7b-4b1e-9a35-0c2f5e7d9b11",
            "titulo": "Pizzaria do Bairro",
            "categoria": "alimentacao",
            "midias_urls": [
                "https://cdn.example.com/pizzaria.mp4",
                "https://cdn.example.com/pizzaria-alt.mp4",
            ],
            "qr_code_link": "https://pizzaria.example.com/promo",
        },
        {
            "id": "0b7e5d2c-3a41-4f6e-8c90-1d2e3f4a5b6c",
            "titulo": "Academia Centro",
            "categoria": "saude",
            "midias_urls": [],
            "qr_code_link": None,
        },
    ]


@pytest.fixture
def sample_playlist_request() -> dict[str, Any]:
    """Sample playlist request data."""
    return {
        "lat": -23.5,
        "lng": -46.6,
        "device_id": "dev1",
    }


@pytest.fixture
def sample_impression_request() -> dict[str, Any]:
    """Sample impression request data."""
    return {
        "campanha_id": "6f1c2a4e-8d7b-4b1e-9a35-0c2f5e7d9b11",
        "lat": -23.5,
        "lng": -46.6,
        "device_id": "dev1",
        "timestamp": "2024-05-01T12:30:00.000Z",
    }
