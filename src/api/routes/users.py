"""
User API routes, including the aggregate reports and the
create-user-with-addresses transaction.

Fixed paths (/addresses/count, /no-addresses, /complex) are declared before
/{user_id} so they are never captured as an id.
"""

import logging
from typing import Any
from fastapi import APIRouter, Body, Depends

from models.user import (
    UserCreate, UserInfo, UserWithAddresses, UserResponse, UserAddressCount, TransactionResult
)
from services.base_service import CONFLICT, FOREIGN_KEY
from services.users_service import UsersService, get_users_service
from api.routes.common import service_failure, unexpected_error
from utils.responses import ok, created, validation_failed, to_response
from utils.validation import validate_id, validate_payload

router = APIRouter()
logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email already exists"


@router.get("")
async def list_users(users_service: UsersService = Depends(get_users_service)):
    """List every user"""
    try:
        result = await users_service.list_users()
        if not result.success:
            return to_response(service_failure(result))

        users = [UserResponse(**row).model_dump() for row in result.data]
        return to_response(ok(users))

    except Exception as e:
        return to_response(unexpected_error("list users", e))


@router.post("")
async def create_user(
    payload: Any = Body(None),
    users_service: UsersService = Depends(get_users_service)
):
    """Create a user; the password is hashed and never echoed back"""
    validation = validate_payload(UserCreate, payload)
    if not validation.ok:
        return to_response(validation_failed(validation.errors))

    try:
        user = validation.data
        result = await users_service.create_user(user["name"], user["email"], user["password"])
        if not result.success:
            return to_response(service_failure(result, messages={CONFLICT: EMAIL_TAKEN}))

        return to_response(created(UserResponse(**result.first).model_dump(), "User created"))

    except Exception as e:
        return to_response(unexpected_error("create user", e))


@router.get("/addresses/count")
async def count_addresses_per_user(users_service: UsersService = Depends(get_users_service)):
    """Number of addresses for every user, zero included"""
    try:
        result = await users_service.get_address_counts()
        if not result.success:
            return to_response(service_failure(result))

        counts = [UserAddressCount(**row).model_dump() for row in result.data]
        return to_response(ok(counts))

    except Exception as e:
        return to_response(unexpected_error("count addresses", e))


@router.get("/no-addresses")
async def list_users_without_addresses(users_service: UsersService = Depends(get_users_service)):
    """Users that have no address at all"""
    try:
        result = await users_service.get_users_without_addresses()
        if not result.success:
            return to_response(service_failure(result))

        users = [UserResponse(**row).model_dump() for row in result.data]
        return to_response(ok(users))

    except Exception as e:
        return to_response(unexpected_error("list users without addresses", e))


@router.post("/complex")
async def create_user_with_addresses(
    payload: Any = Body(None),
    users_service: UsersService = Depends(get_users_service)
):
    """
    Create a user together with one or more addresses in a single transaction.

    The payload is validated in full before any connection is taken from
    the pool, so an invalid address never leaves a user row behind.
    """
    validation = validate_payload(UserWithAddresses, payload)
    if not validation.ok:
        return to_response(validation_failed(validation.errors))

    try:
        data = validation.data
        result = await users_service.create_user_with_addresses(
            name=data["name"],
            email=data["email"],
            password=data["password"],
            addresses=data["addresses"]
        )
        if not result.success:
            return to_response(service_failure(result))

        summary = TransactionResult(**result.first).model_dump()
        return to_response(created(summary, "User and addresses created"))

    except Exception as e:
        return to_response(unexpected_error("create user with addresses", e))


@router.get("/{user_id}")
async def get_user(user_id: str, users_service: UsersService = Depends(get_users_service)):
    """Get one user by id"""
    user_id_check = validate_id(user_id, "id")
    if not user_id_check.ok:
        return to_response(validation_failed(user_id_check.errors))

    try:
        result = await users_service.get_user(user_id_check.data)
        if not result.success:
            return to_response(service_failure(result))

        return to_response(ok(UserResponse(**result.first).model_dump()))

    except Exception as e:
        return to_response(unexpected_error("get user", e))


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    payload: Any = Body(None),
    users_service: UsersService = Depends(get_users_service)
):
    """Replace a user's name and email"""
    user_id_check = validate_id(user_id, "id")
    if not user_id_check.ok:
        return to_response(validation_failed(user_id_check.errors))

    validation = validate_payload(UserInfo, payload)
    if not validation.ok:
        return to_response(validation_failed(validation.errors))

    try:
        info = validation.data
        result = await users_service.update_user(user_id_check.data, info["name"], info["email"])
        if not result.success:
            return to_response(service_failure(result, messages={CONFLICT: EMAIL_TAKEN}))

        return to_response(ok(UserResponse(**result.first).model_dump(), "User updated"))

    except Exception as e:
        return to_response(unexpected_error("update user", e))


@router.delete("/{user_id}")
async def delete_user(user_id: str, users_service: UsersService = Depends(get_users_service)):
    """Delete a user and return the deleted row"""
    user_id_check = validate_id(user_id, "id")
    if not user_id_check.ok:
        return to_response(validation_failed(user_id_check.errors))

    try:
        result = await users_service.delete_user(user_id_check.data)
        if not result.success:
            return to_response(service_failure(
                result,
                messages={FOREIGN_KEY: "User still has addresses; delete them first"}
            ))

        return to_response(ok(UserResponse(**result.first).model_dump(), "User deleted"))

    except Exception as e:
        return to_response(unexpected_error("delete user", e))
