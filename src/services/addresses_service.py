"""
Addresses service - CRUD for the addresses that belong to a user
"""

import logging
from typing import Dict, Any

from fastapi import Depends

from database.connection import get_db_pool
from services.base_service import BaseService, ServiceResult, build_update_query

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ["address_line", "city", "state", "postal_code", "country"]
ADDRESS_COLUMNS = ["id", "user_id"] + ADDRESS_FIELDS
_COLUMNS_SQL = ", ".join(ADDRESS_COLUMNS)

INSERT_ADDRESS_SQL = (
    "INSERT INTO addresses (user_id, address_line, city, state, postal_code, country) "
    f"VALUES ($1, $2, $3, $4, $5, $6) RETURNING {_COLUMNS_SQL}"
)
LIST_ADDRESSES_SQL = f"SELECT {_COLUMNS_SQL} FROM addresses WHERE user_id = $1 ORDER BY id"
DELETE_ADDRESS_SQL = (
    f"DELETE FROM addresses WHERE user_id = $1 AND id = $2 RETURNING {_COLUMNS_SQL}"
)

ADDRESS_NOT_FOUND = "Address not found"


class AddressesService(BaseService):
    """Service for address operations scoped to one user"""

    def __init__(self, db_pool):
        super().__init__(db_pool, "addresses")

    async def create_address(self, user_id: int, address: Dict[str, Any]) -> ServiceResult:
        # user existence is left to the foreign key
        return await self._fetch_one(
            INSERT_ADDRESS_SQL,
            user_id,
            *(address[field] for field in ADDRESS_FIELDS)
        )

    async def list_addresses(self, user_id: int) -> ServiceResult:
        return await self._fetch_all(LIST_ADDRESSES_SQL, user_id)

    async def update_address(self, user_id: int, address_id: int, updates: Dict[str, Any]) -> ServiceResult:
        """
        Apply a partial update to one address

        Args:
            user_id: Owner of the address
            address_id: Address to update
            updates: Non-empty mapping of column -> new value

        Returns:
            ServiceResult with the updated address, RESOURCE_NOT_FOUND when no row matched
        """
        query, params = build_update_query(
            "addresses",
            updates,
            keys=[("user_id", user_id), ("id", address_id)],
            returning=ADDRESS_COLUMNS
        )
        logger.info(f"Updating address {address_id} of user {user_id}: {sorted(updates)}")
        return await self._fetch_one(query, *params, not_found=ADDRESS_NOT_FOUND)

    async def delete_address(self, user_id: int, address_id: int) -> ServiceResult:
        return await self._fetch_one(DELETE_ADDRESS_SQL, user_id, address_id, not_found=ADDRESS_NOT_FOUND)


def get_addresses_service(db_pool=Depends(get_db_pool)) -> AddressesService:
    """FastAPI dependency building the service around the app's pool"""
    return AddressesService(db_pool)
