"""Shared helpers for repository classes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement

from commerce_spine.core.errors import InvalidInputError


@dataclass(frozen=True, slots=True)
class PageSlice:
    """Result cap used by document list operations."""

    limit: int = 100
    offset: int = 0

    def __post_init__(self) -> None:
        if self.limit < 1 or self.offset < 0:
            raise InvalidInputError(f"Invalid page: limit={self.limit} offset={self.offset}")


def _build_where(model: type, attrs: dict[str, str], conditions: dict[str, Any]) -> list[ColumnElement[bool]]:
    """Equality conditions for every non-``None`` filter value.

    Keys are column names; unknown names are rejected rather than ignored.
    """
    clauses: list[ColumnElement[bool]] = []
    for key, value in conditions.items():
        if value is None:
            continue
        if key not in attrs:
            raise InvalidInputError(f"Unknown filter {key!r} for {model.__tablename__}")
        clauses.append(getattr(model, attrs[key]) == value)
    return clauses


def _document_filter(conditions: dict[str, Any]) -> dict[str, Any]:
    """Mongo equality filter from the non-``None`` conditions."""
    return {key: value for key, value in conditions.items() if value is not None}


def _reject_unknown_filters(collection: str, unknown: dict[str, Any]) -> None:
    """Document finders take named filters only; anything else is a caller error."""
    if unknown:
        names = ", ".join(sorted(unknown))
        raise InvalidInputError(f"Unknown filter(s) {names} for {collection}")
