"""
User-related Pydantic models
"""

from typing import List
from pydantic import BaseModel, field_validator
from pydantic_core import PydanticCustomError

from models.address import AddressCreate
from models.validators import require_email, require_min_length


class UserInfo(BaseModel):
    """Fields accepted by PUT /users/{id}"""
    name: str
    email: str

    @field_validator("name")
    @classmethod
    def check_name(cls, value):
        return require_min_length(value, 2, "Name must be at least 2 characters")

    @field_validator("email")
    @classmethod
    def check_email(cls, value):
        return require_email(value)


class UserCreate(UserInfo):
    password: str

    @field_validator("password")
    @classmethod
    def check_password(cls, value):
        return require_min_length(value, 6, "Password must be at least 6 characters")


class UserWithAddresses(UserCreate):
    """Payload of the create-user-with-addresses transaction"""
    addresses: List[AddressCreate]

    @field_validator("addresses")
    @classmethod
    def check_addresses(cls, value):
        if not value:
            raise PydanticCustomError("too_short", "At least one address is required")
        return value


class UserResponse(BaseModel):
    id: int
    name: str
    email: str


class UserAddressCount(UserResponse):
    address_count: int


class TransactionResult(BaseModel):
    userId: int
    addressCount: int
