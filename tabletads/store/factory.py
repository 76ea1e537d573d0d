"""
Per-request store construction.

Handlers never touch a process-wide client: ``get_store`` builds the
backend for each request and is the single override point for tests.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Header

from tabletads.common.config import get_settings
from tabletads.common.database import db
from tabletads.common.exceptions import ConfigError
from tabletads.store.base import AdStore
from tabletads.store.postgres import PostgresStore
from tabletads.store.supabase import SupabaseStore, create_supabase_client


async def get_store(
    authorization: str | None = Header(None),
) -> AsyncGenerator[AdStore, None]:
    """
    Dependency yielding the configured store for the current request.

    Raises:
        ConfigError: the backend cannot be reached with the current settings.
    """
    settings = get_settings()

    if settings.store.backend == "postgres":
        if not db.initialized:
            raise ConfigError("Database not initialized for the postgres store backend")

        async with db.session() as session:
            yield PostgresStore(session)
        return

    client = await create_supabase_client(settings.supabase, authorization)
    store = SupabaseStore(client)
    try:
        yield store
    finally:
        await store.close()
