"""
Database connection and pool management
"""

import asyncpg
import logging
from fastapi import Request

from config import settings

logger = logging.getLogger(__name__)


async def init_database(dsn: str = None) -> asyncpg.Pool:
    """Create the connection pool and verify connectivity"""
    dsn = dsn or settings.DATABASE_URL
    if not dsn:
        raise ValueError("DATABASE_URL environment variable is required")

    db_pool = await asyncpg.create_pool(
        dsn,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        command_timeout=settings.DB_COMMAND_TIMEOUT,
        statement_cache_size=0  # pgbouncer compatibility
    )

    # Test connection
    try:
        async with db_pool.acquire() as conn:
            now = await conn.fetchval("SELECT NOW()")
        logger.info(f"Connected to database (server time {now})")
    except Exception as e:
        logger.error(f"Connection failed: {e}")
        await db_pool.close()
        raise

    return db_pool


async def close_database(db_pool):
    """Close database connection pool"""
    if db_pool:
        await db_pool.close()
    logger.info("Database connections closed")


def get_db_pool(request: Request):
    """FastAPI dependency returning the pool owned by the running app"""
    db_pool = getattr(request.app.state, "db_pool", None)
    if db_pool is None:
        raise RuntimeError("Database pool not initialized")
    return db_pool
