"""
Common API schemas: RFC 7807 errors and the shared request base.

Every non-2xx response is a :class:`ProblemDetail`. Request bodies accept
camelCase keys (the frontend's convention) and are read in snake_case.

Tags:
    notebridge, api, schemas, pydantic, rfc7807

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ErrorDetail(BaseModel):
    """Field-level error detail."""

    code: str = Field(description="Machine-readable error code (e.g., 'REQUIRED', 'INVALID_FORMAT')")
    message: str = Field(description="Human-readable error description")
    field: str | None = Field(default=None, description="Field path if error is field-specific")


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs».

    Error codes:
        - ``NOT_FOUND`` (404): row missing or owned by another clinician
        - ``VALIDATION_FAILED`` (400): request body failed validation
        - ``INVALID_INPUT`` (400): well-formed but rejected input
        - ``UNAUTHORIZED`` (401): missing or invalid credentials
        - ``CONFLICT`` / ``NOT_APPROVED`` (409): state conflict
        - ``RATE_LIMITED`` (429): too many requests
        - ``GENERATION_FAILED`` (500): model output failed validation twice
        - ``UPSTREAM`` (502): IAM or WatsonX failure
        - ``CONFIG`` (503): WatsonX not configured
        - ``INTERNAL`` (500): unexpected server error

    Example:
        {
            "type": "about:blank",
            "title": "Case not found",
            "status": 404,
            "detail": "Case not found",
            "instance": "/cases/abc-123",
            "code": "NOT_FOUND",
            "errors": []
        }
    """

    type: str = Field(default="about:blank", description="Error type URI (usually 'about:blank')")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code")
    detail: str = Field(default="", description="Human-readable explanation of the error")
    instance: str = Field(default="", description="Path of the failing request")
    code: str | None = Field(default=None, description="Machine-readable error code")
    errors: list[ErrorDetail] = Field(default_factory=list)
    # generation failures carry the validator output
    validation_errors: list[str] | None = Field(default=None, alias="validationErrors")
    validation_warnings: list[str] | None = Field(default=None, alias="validationWarnings")

    model_config = ConfigDict(populate_by_name=True)

    def to_content(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CamelRequest(BaseModel):
    """Base for request bodies: accepts ``camelCase`` or ``snake_case`` keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class CamelResponse(BaseModel):
    """Base for responses rendered with ``camelCase`` keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
