"""
Non-throwing validation helpers.

Route handlers never see a pydantic ``ValidationError``: every check goes
through ``validate_payload`` or ``validate_id`` and comes back as a
``ValidationResult`` carrying either the typed data or a mapping of field
name to human-readable messages.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticCustomError

from config import settings
from models.validators import coerce_positive_id

BODY_FIELD = "body"


@dataclass
class ValidationResult:
    """Outcome of validating untyped input"""
    ok: bool
    data: Any = None
    errors: Dict[str, List[str]] = field(default_factory=dict)


def format_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """Flatten pydantic errors into {"field.path": [messages]}"""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        key = ".".join(str(part) for part in loc) or BODY_FIELD
        errors.setdefault(key, []).append(error.get("msg", "Invalid value"))
    return errors


def validate_payload(schema: Type[BaseModel], raw: Any, partial: bool = False) -> ValidationResult:
    """
    Validate a parsed JSON body against ``schema``.

    With ``partial=True`` the returned dict only holds the keys that were
    actually present in the input. Unknown keys are always dropped.
    """
    try:
        model = schema.model_validate(raw)
    except ValidationError as e:
        return ValidationResult(ok=False, errors=format_errors(e))

    return ValidationResult(ok=True, data=model.model_dump(exclude_unset=partial))


def validate_id(raw: Any, field_name: str = "id", max_value: Optional[int] = None) -> ValidationResult:
    """Coerce a path parameter into a positive integer id no larger than MAX_ID"""
    try:
        value = coerce_positive_id(raw, max_value or settings.MAX_ID)
    except PydanticCustomError as e:
        return ValidationResult(ok=False, errors={field_name: [e.message()]})
    return ValidationResult(ok=True, data=value)


def merge_errors(*results: Optional[ValidationResult]) -> Dict[str, List[str]]:
    """Combine the errors of several failed validations"""
    errors: Dict[str, List[str]] = {}
    for result in results:
        if result is None or result.ok:
            continue
        for key, messages in result.errors.items():
            errors.setdefault(key, []).extend(messages)
    return errors
