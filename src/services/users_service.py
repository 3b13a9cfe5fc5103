"""
Users service - user CRUD, aggregate reports and the user+addresses transaction
"""

import logging
from typing import Dict, Any, List

from fastapi import Depends

from database.connection import get_db_pool
from services.base_service import BaseService, ServiceResult, TRANSACTION_FAILED
from services.addresses_service import INSERT_ADDRESS_SQL
from utils.passwords import hash_password

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, name, email"

LIST_USERS_SQL = f"SELECT {USER_COLUMNS} FROM users ORDER BY id"
GET_USER_SQL = f"SELECT {USER_COLUMNS} FROM users WHERE id = $1"
INSERT_USER_SQL = (
    f"INSERT INTO users (name, email, password) VALUES ($1, $2, $3) RETURNING {USER_COLUMNS}"
)
INSERT_USER_RETURNING_ID_SQL = (
    "INSERT INTO users (name, email, password) VALUES ($1, $2, $3) RETURNING id"
)
UPDATE_USER_SQL = (
    f"UPDATE users SET name = $1, email = $2 WHERE id = $3 RETURNING {USER_COLUMNS}"
)
DELETE_USER_SQL = f"DELETE FROM users WHERE id = $1 RETURNING {USER_COLUMNS}"

ADDRESS_COUNTS_SQL = """
    SELECT u.id, u.name, u.email, COUNT(a.id)::int AS address_count
    FROM users u
    LEFT JOIN addresses a ON a.user_id = u.id
    GROUP BY u.id, u.name, u.email
    ORDER BY u.id
"""
USERS_WITHOUT_ADDRESSES_SQL = """
    SELECT u.id, u.name, u.email
    FROM users u
    LEFT JOIN addresses a ON a.user_id = u.id
    WHERE a.id IS NULL
    ORDER BY u.id
"""

USER_NOT_FOUND = "User not found"


class UsersService(BaseService):
    """Service for user operations"""

    def __init__(self, db_pool):
        super().__init__(db_pool, "users")

    async def list_users(self) -> ServiceResult:
        return await self._fetch_all(LIST_USERS_SQL)

    async def get_user(self, user_id: int) -> ServiceResult:
        return await self._fetch_one(GET_USER_SQL, user_id, not_found=USER_NOT_FOUND)

    async def create_user(self, name: str, email: str, password: str) -> ServiceResult:
        """
        Insert a user, storing only the password hash

        Args:
            name: Display name
            email: Email address (unique)
            password: Plain-text password, hashed before it reaches the database

        Returns:
            ServiceResult with the created user (without password)
        """
        password_hash = await hash_password(password)
        logger.info(f"Creating user: {email}")
        return await self._fetch_one(INSERT_USER_SQL, name, email, password_hash)

    async def update_user(self, user_id: int, name: str, email: str) -> ServiceResult:
        return await self._fetch_one(UPDATE_USER_SQL, name, email, user_id, not_found=USER_NOT_FOUND)

    async def delete_user(self, user_id: int) -> ServiceResult:
        return await self._fetch_one(DELETE_USER_SQL, user_id, not_found=USER_NOT_FOUND)

    async def get_address_counts(self) -> ServiceResult:
        return await self._fetch_all(ADDRESS_COUNTS_SQL)

    async def get_users_without_addresses(self) -> ServiceResult:
        return await self._fetch_all(USERS_WITHOUT_ADDRESSES_SQL)

    async def create_user_with_addresses(
        self,
        name: str,
        email: str,
        password: str,
        addresses: List[Dict[str, Any]]
    ) -> ServiceResult:
        """
        Create a user and all of its addresses atomically.

        Every statement runs on one dedicated connection inside a single
        transaction; if any insert fails the whole unit is rolled back,
        including the user row. The connection goes back to the pool on
        every exit path.

        Returns:
            ServiceResult whose single row is {"userId": ..., "addressCount": ...}
        """
        password_hash = await hash_password(password)

        try:
            async with self.db_pool.acquire() as conn:
                async with conn.transaction():
                    user_id = await conn.fetchval(
                        INSERT_USER_RETURNING_ID_SQL, name, email, password_hash
                    )
                    for address in addresses:
                        await conn.execute(
                            INSERT_ADDRESS_SQL,
                            user_id,
                            address["address_line"],
                            address["city"],
                            address["state"],
                            address["postal_code"],
                            address["country"]
                        )
        except Exception as e:
            logger.error(f"Transaction rolled back while creating user {email}: {e}", exc_info=True)
            return ServiceResult(success=False, error="Transaction failed", error_type=TRANSACTION_FAILED)

        logger.info(f"Created user {user_id} with {len(addresses)} addresses")
        return ServiceResult(
            success=True,
            data=[{"userId": user_id, "addressCount": len(addresses)}],
            count=1
        )


def get_users_service(db_pool=Depends(get_db_pool)) -> UsersService:
    """FastAPI dependency building the service around the app's pool"""
    return UsersService(db_pool)
