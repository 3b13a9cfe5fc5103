"""
Request logging middleware: one line per request with its final status and latency
"""

import logging
import time
import uuid
from datetime import datetime

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from utils.error_handling import request_id_var

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs ``[time] METHOD path status (Nms)`` once the whole request is done.

    The status is read from the response that actually leaves the app, so it
    reflects exception handlers and envelope construction. A failure while
    logging is reported and swallowed; it never changes the response.
    """

    async def dispatch(self, request: Request, call_next):
        trace_id = str(uuid.uuid4())[:8]
        request_id_var.set(trace_id)
        request.state.trace_id = trace_id

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Trace-ID"] = trace_id
            return response
        finally:
            self._log(request, status_code, start)

    @staticmethod
    def _log(request: Request, status_code: int, start: float):
        try:
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            timestamp = datetime.now().strftime("%H:%M:%S")
            logger.info(
                f"[{timestamp}] {request.method} {request.url.path} {status_code} ({elapsed_ms}ms)"
            )
        except Exception as e:
            logger.warning(f"Request logging failed: {e}")
