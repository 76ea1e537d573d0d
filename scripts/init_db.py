#!/usr/bin/env python3
"""
Database initialisation script for the direct-Postgres store backend.

Creates the ``campanhas`` and ``impressoes`` tables and the atomic budget
increment function. The location RPC (``get_ads_for_location_v3``) holds the
geofencing logic and is provisioned with the database project, not here.

Usage:
    python scripts/init_db.py [--drop-existing]
"""

import argparse
import asyncio

from sqlalchemy import text

from tabletads import models  # noqa: F401  registers tables on Base.metadata
from tabletads.common.config import get_settings
from tabletads.common.database import Base, close_db, db, init_db
from tabletads.common.logger import get_logger

logger = get_logger(__name__)

# Single UPDATE: concurrent impressions for one campaign cannot lose an add
INCREMENT_FUNCTION_SQL = """
CREATE OR REPLACE FUNCTION {name}(p_campanha_id uuid, p_valor numeric)
RETURNS void
LANGUAGE sql
AS $$
    UPDATE campanhas
    SET orcamento_utilizado = COALESCE(orcamento_utilizado, 0) + p_valor
    WHERE id = p_campanha_id;
$$
"""


async def create_tables(drop_existing: bool = False) -> None:
    """Create tables, indexes and the increment function."""
    settings = get_settings()

    async with db.engine.begin() as conn:
        if drop_existing:
            logger.warning("Dropping existing tables...")
            await conn.run_sync(Base.metadata.drop_all)

        logger.info("Creating database tables...")
        await conn.run_sync(Base.metadata.create_all)

        logger.info(
            "Creating budget increment function",
            function=settings.store.increment_budget_rpc,
        )
        await conn.execute(
            text(INCREMENT_FUNCTION_SQL.format(name=settings.store.increment_budget_rpc))
        )

    logger.info("Database initialised")


async def main() -> None:
    parser = argparse.ArgumentParser(description="Initialise the tabletads database")
    parser.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop existing tables before creating them",
    )
    args = parser.parse_args()

    await init_db()
    try:
        await create_tables(drop_existing=args.drop_existing)
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
