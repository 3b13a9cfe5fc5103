"""
Base service layer for raw-SQL data access over the injected asyncpg pool
"""

import logging
from typing import Dict, Any, List, Optional, Sequence, Tuple
from dataclasses import dataclass

import asyncpg

logger = logging.getLogger(__name__)

# error_type values shared by every service
NOT_FOUND = "RESOURCE_NOT_FOUND"
CONFLICT = "CONFLICT"
FOREIGN_KEY = "FOREIGN_KEY_ERROR"
DATABASE_ERROR = "DATABASE_ERROR"
TRANSACTION_FAILED = "TRANSACTION_FAILED"


@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def first(self) -> Optional[Dict[str, Any]]:
        return self.data[0] if self.data else None


def build_update_query(
    table: str,
    updates: Dict[str, Any],
    keys: Sequence[Tuple[str, Any]],
    returning: Sequence[str]
) -> Tuple[str, List[Any]]:
    """
    Build a parameterized UPDATE from whichever columns are present.

    Each entry of ``updates`` becomes ``col = $n`` in iteration order; the
    row-identifying ``keys`` are appended last in the order given.
    """
    if not updates:
        raise ValueError("No fields to update")

    params: List[Any] = []
    set_clauses = []
    for column, value in updates.items():
        params.append(value)
        set_clauses.append(f"{column} = ${len(params)}")

    where_clauses = []
    for column, value in keys:
        params.append(value)
        where_clauses.append(f"{column} = ${len(params)}")

    query = (
        f"UPDATE {table} SET {', '.join(set_clauses)} "
        f"WHERE {' AND '.join(where_clauses)} "
        f"RETURNING {', '.join(returning)}"
    )
    return query, params


class BaseService:
    """Shared helpers for services that talk to the pool directly"""

    def __init__(self, db_pool, resource_name: str):
        self.db_pool = db_pool
        self.resource_name = resource_name

    async def _fetch_all(self, query: str, *params) -> ServiceResult:
        try:
            async with self.db_pool.acquire() as conn:
                rows = await conn.fetch(query, *params)
        except Exception as e:
            return self._database_error("read", e)

        data = [dict(row) for row in rows]
        return ServiceResult(success=True, data=data, count=len(data))

    async def _fetch_one(self, query: str, *params, not_found: str = None) -> ServiceResult:
        """
        Run a statement expected to touch a single row.

        No row means the target does not exist, which is reported as
        RESOURCE_NOT_FOUND rather than as a database failure.
        """
        try:
            async with self.db_pool.acquire() as conn:
                row = await conn.fetchrow(query, *params)
        except asyncpg.UniqueViolationError as e:
            logger.warning(f"Unique constraint violation on {self.resource_name}: {e}")
            return ServiceResult(success=False, error="Record already exists", error_type=CONFLICT)
        except asyncpg.ForeignKeyViolationError as e:
            logger.warning(f"Foreign key violation on {self.resource_name}: {e}")
            return ServiceResult(success=False, error="Referenced record not found", error_type=FOREIGN_KEY)
        except Exception as e:
            return self._database_error("write", e)

        if row is None:
            return ServiceResult(
                success=False,
                error=not_found or f"{self.resource_name} not found",
                error_type=NOT_FOUND
            )
        return ServiceResult(success=True, data=[dict(row)], count=1)

    def _database_error(self, operation: str, exc: Exception) -> ServiceResult:
        logger.error(f"{operation.capitalize()} operation failed for {self.resource_name}: {exc}", exc_info=True)
        return ServiceResult(success=False, error="Database error", error_type=DATABASE_ERROR)
