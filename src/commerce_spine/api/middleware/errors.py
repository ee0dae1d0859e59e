"""
Error-handling middleware - maps data access errors to RFC 7807 responses.

``DataAccessError`` already knows its HTTP status (409 conflict, 400
invalid reference / input, 404 not found, 503 timeout, 500 otherwise), so
the handler only shapes the body.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from commerce_spine.api.schemas import ErrorDetail, ProblemDetail
from commerce_spine.core.errors import DataAccessError, InvalidInputError
from commerce_spine.core.logging import get_logger

logger = get_logger(__name__)

_TITLES: dict[int, str] = {
    400: "Bad Request",
    404: "Not Found",
    403: "Forbidden",
    409: "Conflict",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def problem_response(
    *,
    status: int,
    title: str,
    detail: str = "",
    instance: str = "",
    code: str | None = None,
    retryable: bool = False,
    errors: list[dict[str, Any]] | None = None,
) -> JSONResponse:
    """Build a RFC 7807 JSON error response."""
    body = ProblemDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance,
        code=code,
        retryable=retryable,
    )
    if errors:
        body.errors = [ErrorDetail(**e) for e in errors]
    headers = {"Retry-After": "1"} if retryable else None
    return JSONResponse(
        status_code=status,
        content=body.model_dump(),
        media_type="application/problem+json",
        headers=headers,
    )


async def data_access_error_handler(request: Request, exc: DataAccessError) -> JSONResponse:
    """Classified errors → ProblemDetail with the error's own status."""
    if exc.http_status >= 500:
        logger.error("request_failed", path=request.url.path, **exc.to_dict())
    errors = exc.errors if isinstance(exc, InvalidInputError) else None
    return problem_response(
        status=exc.http_status,
        title=_TITLES.get(exc.http_status, "Error"),
        detail=exc.message,
        instance=str(request.url),
        code=exc.category.value,
        retryable=exc.retryable,
        errors=errors,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions - returns 500 with ProblemDetail."""
    logger.exception("request_unhandled_error", path=request.url.path, error_type=type(exc).__name__)
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred.",
        instance=str(request.url),
        code="INTERNAL",
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Route guards raise ``HTTPException``; give them the same body shape."""
    return problem_response(
        status=exc.status_code,
        title=_TITLES.get(exc.status_code, "Error"),
        detail=str(exc.detail),
        instance=str(request.url),
    )
