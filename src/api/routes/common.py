"""
Helpers shared by the route modules
"""

import logging
from typing import Dict, Optional

from services.base_service import (
    ServiceResult, NOT_FOUND, CONFLICT, FOREIGN_KEY, TRANSACTION_FAILED
)
from utils.responses import ApiResult, fail

logger = logging.getLogger(__name__)

DATABASE_ERROR_MESSAGE = "Database error"

DEFAULT_STATUS_BY_TYPE = {
    NOT_FOUND: 404,
    CONFLICT: 409,
    FOREIGN_KEY: 409,
    TRANSACTION_FAILED: 500,
}


def service_failure(result: ServiceResult, messages: Optional[Dict[str, str]] = None,
                    statuses: Optional[Dict[str, int]] = None) -> ApiResult:
    """
    Translate a failed ServiceResult into an error ApiResult.

    ``messages`` and ``statuses`` override the defaults per error_type;
    anything unrecognised becomes a generic 500 so no database detail leaks.
    """
    messages = messages or {}
    status_by_type = dict(DEFAULT_STATUS_BY_TYPE, **(statuses or {}))

    status_code = status_by_type.get(result.error_type, 500)
    if status_code == 500 and result.error_type != TRANSACTION_FAILED:
        return fail(500, messages.get(result.error_type, DATABASE_ERROR_MESSAGE))
    return fail(status_code, messages.get(result.error_type, result.error))


def unexpected_error(context: str, exc: Exception) -> ApiResult:
    logger.error(f"Failed to {context}: {exc}", exc_info=True)
    return fail(500, DATABASE_ERROR_MESSAGE)
