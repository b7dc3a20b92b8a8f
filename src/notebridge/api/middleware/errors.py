"""
Error handlers: map exceptions to RFC 7807 responses.

* ``NotebridgeError``          status and code carried by the exception
* ``RequestValidationError``   400 with one ``ErrorDetail`` per field
* ``HTTPException``            wrapped with its own status
* anything else                500, detail only exposed when ``debug``

Manifesto:
    Clients parse one error shape.  Internal detail stays in the logs
    unless ``debug`` is on.

Tags:
    notebridge, api, middleware, errors, rfc7807

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notebridge.api.schemas.common import ErrorDetail, ProblemDetail
from notebridge.core.errors import GenerationError, NotebridgeError
from notebridge.core.logging import get_logger

logger = get_logger(__name__)

_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    429: "Too Many Requests",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
}


def problem_response(
    *,
    status: int,
    title: str,
    detail: str = "",
    instance: str = "",
    code: str | None = None,
    errors: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> JSONResponse:
    """Build a RFC 7807 JSON error response."""
    body = ProblemDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance,
        code=code,
        errors=[ErrorDetail(**e) for e in errors or []],
        **extra,
    )
    return JSONResponse(status_code=status, content=body.to_content(), headers=headers)


async def notebridge_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, NotebridgeError)
    log = logger.error if exc.status >= 500 else logger.info
    log("request_error", **exc.to_dict())

    extra: dict[str, Any] = {}
    if isinstance(exc, GenerationError):
        extra = {
            "validation_errors": exc.validation_errors,
            "validation_warnings": exc.validation_warnings,
        }
    return problem_response(
        status=exc.status,
        title=exc.message,
        detail=exc.message,
        instance=request.url.path,
        code=exc.code,
        **extra,
    )


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Request-body validation failures are reported as 400."""
    assert isinstance(exc, RequestValidationError)
    errors = [
        {
            "code": str(err.get("type", "invalid")).upper(),
            "message": str(err.get("msg", "Invalid value")),
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body") or None,
        }
        for err in exc.errors()
    ]
    return problem_response(
        status=400,
        title="Validation failed",
        detail=errors[0]["message"] if errors else "Invalid request",
        instance=request.url.path,
        code="VALIDATION_FAILED",
        errors=errors,
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, StarletteHTTPException)
    detail = exc.detail if isinstance(exc.detail, str) else _TITLES.get(exc.status_code, "Error")
    return problem_response(
        status=exc.status_code,
        title=_TITLES.get(exc.status_code, detail),
        detail=detail,
        instance=request.url.path,
        headers=dict(exc.headers) if exc.headers else None,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions: returns 500 with ProblemDetail."""
    logger.exception("unhandled_exception", path=request.url.path, error_type=type(exc).__name__)
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail=str(exc) if request.app.state.settings.debug else "An unexpected error occurred.",
        instance=request.url.path,
        code="INTERNAL",
    )
