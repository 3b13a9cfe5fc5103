"""
Address-related Pydantic models
"""

from typing import Optional
from pydantic import BaseModel, field_validator

from models.validators import require_min_length

FIELD_MESSAGES = {
    "address_line": "Address line field is empty",
    "city": "City field is empty",
    "state": "State field is empty",
    "postal_code": "Postal Code field is empty",
    "country": "Country field is empty",
}


class AddressCreate(BaseModel):
    address_line: str
    city: str
    state: str
    postal_code: str
    country: str

    @field_validator(*FIELD_MESSAGES)
    @classmethod
    def check_not_empty(cls, value, info):
        return require_min_length(value, 1, FIELD_MESSAGES[info.field_name])


class AddressUpdate(BaseModel):
    """Partial address update - only the keys sent by the client are kept"""
    address_line: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    # An explicit null is rejected the same way as an empty string
    @field_validator(*FIELD_MESSAGES)
    @classmethod
    def check_not_empty(cls, value, info):
        return require_min_length(value, 1, FIELD_MESSAGES[info.field_name])


class AddressResponse(BaseModel):
    id: int
    user_id: int
    address_line: str
    city: str
    state: str
    postal_code: str
    country: str
