# dental_ledger/db/init_db.py
from __future__ import annotations

import argparse
import asyncio
import logging

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

from dental_ledger.core.logging import configure_logging
from dental_ledger.db.base import Base
from dental_ledger.db.session import engine

# Import all models so metadata is complete
from dental_ledger import models  # noqa: F401

logger = logging.getLogger(__name__)


async def init_models(eng: AsyncEngine, *, fresh: bool = False) -> list[str]:
    """
    Create every missing table; with fresh=True drop them first (dev only).
    Returns the table names present afterwards.
    """
    async with eng.begin() as conn:
        if fresh:
            logger.warning("Dropping ALL tables (dev only)")
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
        names = await conn.run_sync(
            lambda sync_conn: inspect(sync_conn).get_table_names())
    return sorted(names)


async def run(fresh: bool = False) -> None:
    try:
        names = await init_models(engine, fresh=fresh)
        logger.info("Tables: %s", ", ".join(names))
    finally:
        await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Initialize DB (create tables).")
    parser.add_argument(
        "--fresh",
        action="store_true",
        help="Drop & recreate all tables (DEV ONLY).",
    )
    args = parser.parse_args()
    configure_logging()
    asyncio.run(run(fresh=args.fresh))
