"""
Address API routes nested under /users/{user_id}/addresses
"""

import logging
from typing import Any
from fastapi import APIRouter, Body, Depends

from models.address import AddressCreate, AddressUpdate, AddressResponse
from services.base_service import FOREIGN_KEY
from services.addresses_service import AddressesService, get_addresses_service
from services.users_service import USER_NOT_FOUND
from api.routes.common import service_failure, unexpected_error
from utils.responses import ok, created, fail, validation_failed, to_response
from utils.validation import validate_id, validate_payload, merge_errors

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/{user_id}/addresses")
async def create_address(
    user_id: str,
    payload: Any = Body(None),
    addresses_service: AddressesService = Depends(get_addresses_service)
):
    """Add an address to a user"""
    user_id_check = validate_id(user_id, "user_id")
    if not user_id_check.ok:
        return to_response(validation_failed(user_id_check.errors))

    validation = validate_payload(AddressCreate, payload)
    if not validation.ok:
        return to_response(validation_failed(validation.errors))

    try:
        result = await addresses_service.create_address(user_id_check.data, validation.data)
        if not result.success:
            # the foreign key is the only check that the user exists
            return to_response(service_failure(
                result,
                messages={FOREIGN_KEY: USER_NOT_FOUND},
                statuses={FOREIGN_KEY: 404}
            ))

        return to_response(created(AddressResponse(**result.first).model_dump(), "Address created"))

    except Exception as e:
        return to_response(unexpected_error("create address", e))


@router.get("/{user_id}/addresses")
async def list_addresses(
    user_id: str,
    addresses_service: AddressesService = Depends(get_addresses_service)
):
    """All addresses of a user; an empty list is a valid answer"""
    user_id_check = validate_id(user_id, "user_id")
    if not user_id_check.ok:
        return to_response(validation_failed(user_id_check.errors))

    try:
        result = await addresses_service.list_addresses(user_id_check.data)
        if not result.success:
            return to_response(service_failure(result))

        addresses = [AddressResponse(**row).model_dump() for row in result.data]
        return to_response(ok(addresses))

    except Exception as e:
        return to_response(unexpected_error("list addresses", e))


@router.put("/{user_id}/addresses/{address_id}")
async def update_address(
    user_id: str,
    address_id: str,
    payload: Any = Body(None),
    addresses_service: AddressesService = Depends(get_addresses_service)
):
    """Partially update an address; at least one field is required"""
    user_id_check = validate_id(user_id, "user_id")
    address_id_check = validate_id(address_id, "address_id")
    if not (user_id_check.ok and address_id_check.ok):
        return to_response(validation_failed(merge_errors(user_id_check, address_id_check)))

    validation = validate_payload(AddressUpdate, payload, partial=True)
    if not validation.ok:
        return to_response(validation_failed(validation.errors))

    if not validation.data:
        return to_response(fail(400, "No fields to update"))

    try:
        result = await addresses_service.update_address(
            user_id_check.data, address_id_check.data, validation.data
        )
        if not result.success:
            return to_response(service_failure(result))

        return to_response(ok(AddressResponse(**result.first).model_dump(), "Address updated"))

    except Exception as e:
        return to_response(unexpected_error("update address", e))


@router.delete("/{user_id}/addresses/{address_id}")
async def delete_address(
    user_id: str,
    address_id: str,
    addresses_service: AddressesService = Depends(get_addresses_service)
):
    """Delete one address of a user"""
    user_id_check = validate_id(user_id, "user_id")
    address_id_check = validate_id(address_id, "address_id")
    if not (user_id_check.ok and address_id_check.ok):
        return to_response(validation_failed(merge_errors(user_id_check, address_id_check)))

    try:
        result = await addresses_service.delete_address(user_id_check.data, address_id_check.data)
        if not result.success:
            return to_response(service_failure(result))

        return to_response(ok(AddressResponse(**result.first).model_dump(), "Address deleted"))

    except Exception as e:
        return to_response(unexpected_error("delete address", e))
