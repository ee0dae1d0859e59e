"""
API schemas - lifecycle and health responses plus RFC 7807 errors.

Every non-2xx response body is a :class:`ProblemDetail`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Field-level error inside a problem response."""

    code: str = Field(default="INVALID", description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    field: str | None = Field(default=None, description="Field path if error is field-specific")


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs».

    Error Codes:
        - ``CONFLICT`` (409): uniqueness violated
        - ``REFERENCE`` (400): referenced record does not exist
        - ``VALIDATION`` (400): invalid input
        - ``NOT_FOUND`` (404): entity does not exist
        - ``TIMEOUT`` (503): store busy or unreachable, retry later
        - ``STORE`` / ``LIFECYCLE`` / ``CONFIG`` (500): server-side failure
    """

    type: str = Field(default="about:blank", description="URI identifying the problem type")
    title: str = Field(description="Short summary of the problem")
    status: int = Field(description="HTTP status code")
    detail: str = Field(default="", description="Explanation specific to this occurrence")
    instance: str = Field(default="", description="URI of the request that failed")
    code: str | None = Field(default=None, description="Error category")
    retryable: bool = Field(default=False, description="Whether repeating the request may succeed")
    errors: list[ErrorDetail] = Field(default_factory=list)


class LifecycleResponse(BaseModel):
    """Outcome of a schema lifecycle operation."""

    success: bool
    message: str
    counts: dict[str, int] | None = Field(default=None, description="Rows created per entity (seed only)")


class HealthResponse(BaseModel):
    """Store reachability and entity counts."""

    status: str = Field(description="healthy, degraded or unhealthy")
    relational: bool
    document: bool
    counts: dict[str, int | None] = Field(default_factory=dict)
    errors: dict[str, Any] = Field(default_factory=dict)
