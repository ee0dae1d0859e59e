"""Document models for reviews and operational logs.

Documents reference relational entities (``product_id``, ``user_id``) by
integer id only. Those references are advisory: neither store checks them.

Timestamps are naive UTC ``datetime`` values, matching what PyMongo hands
back from BSON dates.
"""

from __future__ import annotations

import datetime
from typing import Any

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

from commerce_spine.core.enums import LogCategory, LogLevel
from commerce_spine.core.schemas import PartialUpdate


def utcnow() -> datetime.datetime:
    """Naive UTC now, truncated to BSON's millisecond precision."""
    now = datetime.datetime.now(datetime.UTC).replace(tzinfo=None)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class _Document(BaseModel):
    model_config = ConfigDict(extra="forbid", use_enum_values=True)


class ReviewCreate(_Document):
    product_id: int
    user_id: int
    rating: int = Field(ge=1, le=5)
    title: str = Field(min_length=1, max_length=200)
    comment: str = Field(min_length=1)
    is_verified: bool = True
    is_helpful: bool = False
    helpful_count: int = Field(default=0, ge=0)
    images: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None


class ReviewUpdate(PartialUpdate, _Document):
    """Editable review fields. ``helpful_count`` moves only via its counter."""

    nullable = frozenset({"metadata"})

    rating: int | None = Field(default=None, ge=1, le=5)
    title: str | None = Field(default=None, min_length=1, max_length=200)
    comment: str | None = Field(default=None, min_length=1)
    is_verified: bool | None = None
    is_helpful: bool | None = None
    images: list[str] | None = None
    metadata: dict[str, Any] | None = None


class LogCreate(_Document):
    level: LogLevel
    category: LogCategory
    message: str = Field(min_length=1)
    user_id: int | None = None
    session_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    endpoint: str | None = None
    method: str | None = None
    status_code: int | None = None
    response_time: float | None = Field(default=None, ge=0)
    request_data: Any = None
    response_data: Any = None
    error_details: Any = None
    metadata: dict[str, Any] | None = None
    expires_at: datetime.datetime | None = None


class LogUpdate(PartialUpdate, _Document):
    """Partial log change; level, category, message and expiry cannot be cleared."""

    nullable = frozenset(
        {"status_code", "response_time", "response_data", "error_details", "metadata"}
    )

    level: LogLevel | None = None
    category: LogCategory | None = None
    message: str | None = Field(default=None, min_length=1)
    status_code: int | None = None
    response_time: float | None = Field(default=None, ge=0)
    response_data: Any = None
    error_details: Any = None
    metadata: dict[str, Any] | None = None
    expires_at: datetime.datetime | None = None


def to_mongo(model: BaseModel, *, exclude_unset: bool = False) -> dict[str, Any]:
    """Dump a model to a BSON-ready dict."""
    return model.model_dump(mode="python", exclude_unset=exclude_unset)


def from_mongo(document: dict[str, Any] | None) -> dict[str, Any] | None:
    """Replace ``_id`` with its string form under ``id``."""
    if document is None:
        return None
    result = dict(document)
    object_id = result.pop("_id", None)
    result["id"] = str(object_id) if isinstance(object_id, ObjectId) else object_id
    return result


__all__ = [
    "ReviewCreate",
    "ReviewUpdate",
    "LogCreate",
    "LogUpdate",
    "to_mongo",
    "from_mongo",
    "utcnow",
]
