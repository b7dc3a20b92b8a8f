"""
Structured error types for notebridge.

Services raise these instead of returning sentinel values; the API layer
maps them onto RFC 7807 ``ProblemDetail`` responses through a single
exception handler (see ``notebridge.api.middleware.errors``).

Hierarchy::

    NotebridgeError                 (INTERNAL, 500)
      ├── NotFoundError             (NOT_FOUND, 404)
      ├── ConflictError             (CONFLICT, 409)
      ├── InvalidInputError         (INVALID_INPUT, 400)
      ├── AuthenticationError       (UNAUTHORIZED, 401)
      ├── AuthorizationError        (FORBIDDEN, 403)
      ├── ConfigError               (CONFIG, 503)
      ├── UpstreamError             (UPSTREAM, 502)   IAM / WatsonX failures
      └── GenerationError           (GENERATION_FAILED, 500)

Usage::

    from notebridge.core.errors import NotFoundError

    if record is None:
        raise NotFoundError("Case not found")

Manifesto:
    Every failure carries a machine-readable code and an HTTP status from
    the moment it is raised.

Tags:
    notebridge, core, errors, exceptions

Doc-Types:
    api-reference
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and logging."""

    VALIDATION = "VALIDATION"
    AUTH = "AUTH"
    DATABASE = "DATABASE"
    STORAGE = "STORAGE"
    CONFIG = "CONFIG"
    UPSTREAM = "UPSTREAM"
    INTERNAL = "INTERNAL"


class NotebridgeError(Exception):
    """Base exception for all notebridge errors.

    Subclasses set ``default_code``, ``default_status`` and
    ``default_category``; any of them can be overridden per instance.
    """

    default_code = "INTERNAL"
    default_status = 500
    default_category = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status: int | None = None,
        category: ErrorCategory | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status = status or self.default_status
        self.category = category or self.default_category
        self.details = details or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "status": self.status,
            "category": self.category.value,
        }
        if self.details:
            result["details"] = self.details
        if self.cause is not None:
            result["cause"] = repr(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"


class NotFoundError(NotebridgeError):
    """Row does not exist or is not owned by the caller."""

    default_code = "NOT_FOUND"
    default_status = 404
    default_category = ErrorCategory.DATABASE


class ConflictError(NotebridgeError):
    """Operation conflicts with the current state (duplicate email, unapproved case)."""

    default_code = "CONFLICT"
    default_status = 409
    default_category = ErrorCategory.VALIDATION


class InvalidInputError(NotebridgeError):
    """Request is well-formed but semantically invalid."""

    default_code = "INVALID_INPUT"
    default_status = 400
    default_category = ErrorCategory.VALIDATION


class AuthenticationError(NotebridgeError):
    """Missing, invalid or expired credentials."""

    default_code = "UNAUTHORIZED"
    default_status = 401
    default_category = ErrorCategory.AUTH


class AuthorizationError(NotebridgeError):
    """Authenticated caller lacks the required role."""

    default_code = "FORBIDDEN"
    default_status = 403
    default_category = ErrorCategory.AUTH


class ConfigError(NotebridgeError):
    """A required setting is missing (e.g. WatsonX credentials)."""

    default_code = "CONFIG"
    default_status = 503
    default_category = ErrorCategory.CONFIG


class UpstreamError(NotebridgeError):
    """IAM or WatsonX returned an error or an unusable payload."""

    default_code = "UPSTREAM"
    default_status = 502
    default_category = ErrorCategory.UPSTREAM

    def __init__(self, message: str, *, upstream_status: int | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.upstream_status = upstream_status


class GenerationError(NotebridgeError):
    """Model output still fails validation after the retry."""

    default_code = "GENERATION_FAILED"
    default_status = 500
    default_category = ErrorCategory.UPSTREAM

    def __init__(
        self,
        message: str,
        *,
        validation_errors: list[str] | None = None,
        validation_warnings: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.validation_errors = validation_errors or []
        self.validation_warnings = validation_warnings or []


__all__ = [
    "ErrorCategory",
    "NotebridgeError",
    "NotFoundError",
    "ConflictError",
    "InvalidInputError",
    "AuthenticationError",
    "AuthorizationError",
    "ConfigError",
    "UpstreamError",
    "GenerationError",
]
