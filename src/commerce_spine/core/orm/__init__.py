"""SQLAlchemy models for the relational store."""

from .base import CommerceBase, TimestampMixin, attribute_names, to_dict
from .tables import (
    ENUM_TYPES,
    TABLES_IN_DEPENDENCY_ORDER,
    CategoryTable,
    OrderItemTable,
    OrderTable,
    ProductTable,
    UserTable,
)

__all__ = [
    "CommerceBase",
    "TimestampMixin",
    "to_dict",
    "attribute_names",
    "UserTable",
    "CategoryTable",
    "ProductTable",
    "OrderTable",
    "OrderItemTable",
    "ENUM_TYPES",
    "TABLES_IN_DEPENDENCY_ORDER",
]
