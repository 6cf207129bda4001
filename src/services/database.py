"""asyncpg connection pool for the profile document store.

The pool is created in the application lifespan and handed to the
``ProfileStore`` explicitly; nothing here keeps a module-level handle.
Every connection gets JSON codecs for ``json``/``jsonb`` so documents
travel as plain Python dicts and lists.
"""

from __future__ import annotations

import json
import logging

import asyncpg

from src.config import Settings, get_settings

logger = logging.getLogger("cyclecare.db")


async def _init_connection(conn: asyncpg.Connection) -> None:
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


async def create_pool(settings: Settings | None = None) -> asyncpg.Pool:
    """Create the asyncpg connection pool.  Call once at app startup."""
    s = settings or get_settings()
    pool = await asyncpg.create_pool(
        s.database_url,
        min_size=s.db_pool_min_size,
        max_size=s.db_pool_max_size,
        command_timeout=30,
        init=_init_connection,
    )
    logger.info(
        "Database pool initialized (min=%d, max=%d)",
        s.db_pool_min_size,
        s.db_pool_max_size,
    )
    return pool


async def close_pool(pool: asyncpg.Pool | None) -> None:
    """Drain the pool.  Call at app shutdown."""
    if pool is not None:
        await pool.close()
        logger.info("Database pool closed")


async def ping(pool: asyncpg.Pool) -> bool:
    """Lightweight connectivity probe used by the health check."""
    async with pool.acquire() as conn:
        return await conn.fetchval("SELECT 1") == 1


async def connect_listener(settings: Settings | None = None) -> asyncpg.Connection:
    """Open a standalone connection for LISTEN, outside the pool.

    A listening connection stays checked out for as long as anyone is
    subscribed, so it must not count against ``db_pool_max_size``.
    """
    s = settings or get_settings()
    conn = await asyncpg.connect(s.database_url)
    logger.info("Change listener connection opened")
    return conn
