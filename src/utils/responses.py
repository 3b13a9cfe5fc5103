"""
Uniform response envelope.

Handlers build an ``ApiResult``; ``build_envelope`` turns it into the
``{"success", "data", "message"}`` body every endpoint returns.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

DEFAULT_SUCCESS_MESSAGE = "OK"
DEFAULT_FAILURE_MESSAGE = "Request Failed"


@dataclass
class ApiResult:
    """Tagged outcome of a handler: the status code decides success or failure"""
    status_code: int
    data: Any = None
    message: Optional[str] = None
    errors: Optional[Dict[str, List[str]]] = None

    @property
    def success(self) -> bool:
        return is_success_status(self.status_code)


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 400


def ok(data: Any = None, message: Optional[str] = None, status_code: int = 200) -> ApiResult:
    return ApiResult(status_code=status_code, data=data, message=message)


def created(data: Any = None, message: Optional[str] = None) -> ApiResult:
    return ApiResult(status_code=201, data=data, message=message)


def fail(status_code: int, message: Optional[str] = None,
         errors: Optional[Dict[str, List[str]]] = None) -> ApiResult:
    return ApiResult(status_code=status_code, message=message, errors=errors)


def validation_failed(errors: Dict[str, List[str]], message: str = "Validation failed") -> ApiResult:
    return fail(400, message, errors)


def build_envelope(result: ApiResult) -> Dict[str, Any]:
    """Pure transform from a result to the response body"""
    success = result.success
    envelope = {
        "success": success,
        "data": result.data if success else None,
        "message": result.message if result.message is not None else (
            DEFAULT_SUCCESS_MESSAGE if success else DEFAULT_FAILURE_MESSAGE
        ),
    }
    if result.errors:
        envelope["errors"] = result.errors
    return envelope


def to_response(result: ApiResult, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=result.status_code,
        content=jsonable_encoder(build_envelope(result)),
        headers=headers,
    )
