"""API middleware and exception handlers."""

from notebridge.api.middleware.errors import (
    http_exception_handler,
    notebridge_error_handler,
    problem_response,
    unhandled_exception_handler,
    validation_exception_handler,
)
from notebridge.api.middleware.rate_limit import RateLimiter, RateLimitMiddleware
from notebridge.api.middleware.request_context import RequestContextMiddleware, get_request_id

__all__ = [
    "http_exception_handler",
    "notebridge_error_handler",
    "problem_response",
    "unhandled_exception_handler",
    "validation_exception_handler",
    "RateLimiter",
    "RateLimitMiddleware",
    "RequestContextMiddleware",
    "get_request_id",
]
