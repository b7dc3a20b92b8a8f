"""Request context middleware for log correlation.

Tags:
    notebridge, api, middleware, request-id, structlog

Doc-Types:
    api-reference
"""

from __future__ import annotations

import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notebridge.core.logging import bind_context, clear_context, get_logger

# request ID for the current request, readable outside the request object
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

logger = get_logger(__name__)


def get_request_id() -> str:
    """Get the current request ID from context."""
    return request_id_var.get()


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, bind it into structlog and echo ``X-Request-ID``."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        clear_context()
        bind_context(request_id=request_id, method=request.method, path=request.url.path)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception("request_failed", error=str(e))
            raise
        finally:
            request_id_var.reset(token)

        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        response.headers["X-Request-ID"] = request_id
        clear_context()
        return response
