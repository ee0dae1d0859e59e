"""Declarative base, mixins and row serialization for the relational store.

Uses SQLAlchemy 2.0 ``DeclarativeBase`` with a ``type_annotation_map``
that maps Python types to portable column types, so the same models work
on PostgreSQL (production) and SQLite (development and tests).

Mixins
------
* **TimestampMixin** - ``created_at`` / ``updated_at`` with server defaults.
"""

from __future__ import annotations

import datetime
import decimal
import enum
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Integer, Numeric, Text, func, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class CommerceBase(DeclarativeBase):
    """Shared declarative base for every relational entity.

    * ``str``   → ``Text``
    * ``int``   → ``Integer``
    * ``bool``  → ``Boolean``
    * ``decimal.Decimal`` → ``Numeric(10, 2)`` (money)
    * ``datetime.datetime`` → ``DateTime``
    * ``dict`` / ``list`` → ``JSON``
    """

    type_annotation_map = {
        str: Text,
        int: Integer,
        bool: Boolean,
        decimal.Decimal: Numeric(10, 2),
        datetime.datetime: DateTime,
        dict: JSON,
        list: JSON,
    }


class TimestampMixin:
    """Adds ``created_at`` and ``updated_at`` maintained by the database clock."""

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


def _plain(value: Any) -> Any:
    if isinstance(value, decimal.Decimal):
        return float(value)
    if isinstance(value, enum.Enum):
        return value.value
    return value


def to_dict(obj: CommerceBase, _seen: set[int] | None = None) -> dict[str, Any]:
    """Serialize a mapped instance, following only relationships already loaded.

    Unloaded relationships are left out rather than lazily fetched, so the
    shape of the result tells the caller which relations were resolved.
    Back-references to an object already on the path are skipped.
    """
    seen = set(_seen or ())
    seen.add(id(obj))

    state = inspect(obj)
    mapper = state.mapper
    result: dict[str, Any] = {}

    for attr in mapper.column_attrs:
        result[attr.columns[0].name] = _plain(getattr(obj, attr.key))

    for rel in mapper.relationships:
        if rel.key in state.unloaded:
            continue
        value = getattr(obj, rel.key)
        if value is None:
            result[rel.key] = None
        elif rel.uselist:
            result[rel.key] = [to_dict(child, seen) for child in value if id(child) not in seen]
        elif id(value) not in seen:
            result[rel.key] = to_dict(value, seen)

    return result


def attribute_names(model: type[CommerceBase]) -> dict[str, str]:
    """Map column keys to mapped attribute names (``metadata`` → ``meta``)."""
    return {attr.columns[0].name: attr.key for attr in inspect(model).column_attrs}
