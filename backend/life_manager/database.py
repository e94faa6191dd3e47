import logging
from collections.abc import AsyncIterator

from fastapi import HTTPException, Request
from psycopg import AsyncConnection
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)


async def init_db_pool(database_url: str) -> AsyncConnectionPool | None:
    # Keep app booting in non-DB contexts; endpoints will fail explicitly if used.
    if not database_url:
        logger.warning("DATABASE_URL is empty; storage-backed endpoints are disabled")
        return None

    # Autocommit: every service call is a single statement, atomic on its own.
    pool = AsyncConnectionPool(
        conninfo=database_url,
        open=False,
        min_size=1,
        max_size=10,
        kwargs={"autocommit": True, "row_factory": dict_row},
    )
    await pool.open()
    logger.info("Database pool opened")
    return pool


async def close_db_pool(pool: AsyncConnectionPool | None) -> None:
    if pool is None:
        return

    await pool.close()
    logger.info("Database pool closed")


async def get_db_connection(request: Request) -> AsyncIterator[AsyncConnection]:
    pool = getattr(request.app.state, "db_pool", None)

    # Centralized guard to avoid obscure None-type errors in route handlers.
    if pool is None:
        raise HTTPException(status_code=500, detail="DATABASE_URL is not configured")

    async with pool.connection() as connection:
        yield connection
