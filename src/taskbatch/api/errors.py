"""
Error handling: maps taskbatch errors to JSON error responses.
"""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from taskbatch.api.schemas import ErrorResponse
from taskbatch.core.errors import TaskBatchError
from taskbatch.core.logging import get_logger

logger = get_logger(__name__)

# ── Error code → HTTP status mapping ─────────────────────────────────────

ERROR_CODE_TO_STATUS: dict[str, int] = {
    "AGGREGATE_FAILURE": 500,
    "UNIT_FAILURE": 500,
    "BATCH_TIMEOUT": 504,
    "POOL_CLOSED": 503,
    "INTERNAL": 500,
}


def status_for_error_code(code: str) -> int:
    """Resolve an error code to HTTP status, defaulting to 500."""
    return ERROR_CODE_TO_STATUS.get(code, 500)


def error_response(*, status: int, message: str, code: str | None = None) -> JSONResponse:
    body = ErrorResponse(message=message, code=code)
    return JSONResponse(status_code=status, content=body.model_dump())


async def taskbatch_error_handler(request: Request, exc: TaskBatchError) -> JSONResponse:
    """Translate a :class:`TaskBatchError` raised by an endpoint."""
    status = status_for_error_code(exc.code)
    logger.error("api.request_failed", path=request.url.path, status=status, **exc.to_dict())
    return error_response(status=status, message=exc.message, code=exc.code)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions: returns 500 with ErrorResponse."""
    logger.exception("api.unhandled_error", path=request.url.path)
    detail = str(exc) if request.app.state.settings.debug else "An unexpected error occurred."
    return error_response(status=500, message=detail, code="INTERNAL")
