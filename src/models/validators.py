"""
Reusable field checks shared by the request schemas
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic_core import PydanticCustomError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def require_min_length(value: Optional[str], minimum: int, message: str) -> str:
    """Reject missing or too-short strings with a field-specific message"""
    if value is None or len(value) < minimum:
        raise PydanticCustomError("string_too_short", message)
    return value


def require_email(value: Optional[str]) -> str:
    if value is None or not EMAIL_PATTERN.match(value):
        raise PydanticCustomError("email_format", "Invalid email address")
    return value


def _parse_number(value: Any):
    if isinstance(value, int):
        return value

    text = str(value).strip()
    if not text or "_" in text:
        raise PydanticCustomError("id_not_number", "ID must be a number")
    try:
        return int(text)
    except ValueError:
        pass

    # decimal or exponent notation, kept exact
    try:
        number = Decimal(text)
    except InvalidOperation:
        raise PydanticCustomError("id_not_number", "ID must be a number")
    if not number.is_finite():
        raise PydanticCustomError("id_not_number", "ID must be a number")
    return number


def coerce_positive_id(value: Any, max_value: Optional[int] = None) -> int:
    """
    Coerce a loosely typed identifier (usually a path segment) into a positive int.

    Numeric strings such as " 12 ", "12.0" or "1e2" are accepted the same way a
    plain number would be; anything that is not a whole number above zero fails.
    Values above ``max_value`` cannot name a stored row and are rejected.
    """
    if isinstance(value, bool):
        raise PydanticCustomError("id_not_number", "ID must be a number")

    number = _parse_number(value)
    if isinstance(number, Decimal) and number != number.to_integral_value():
        raise PydanticCustomError("id_not_integer", "ID must be an integer")
    if number <= 0:
        raise PydanticCustomError("id_not_positive", "ID must be a positive integer")
    if max_value is not None and number > max_value:
        raise PydanticCustomError("id_out_of_range", "ID is out of range")
    return int(number)
