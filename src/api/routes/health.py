"""
Health check API route
"""

import logging
from fastapi import APIRouter, Depends
from database.connection import get_db_pool
from utils.responses import ok, fail, to_response

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/")
async def health_check(db_pool=Depends(get_db_pool)):
    """Report whether the database answers a trivial query"""
    try:
        async with db_pool.acquire() as conn:
            await conn.fetchval("SELECT 1")

        return to_response(ok({"status": "healthy", "database": "connected"}))

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return to_response(fail(503, "Health check failed"))
