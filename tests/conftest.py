"""
Shared pytest fixtures for commerce-spine tests.

This module provides:
- A file-backed SQLite relational adapter per test (foreign keys enforced)
- An in-memory mongomock document adapter per test
- A ``facade`` with the schema already created
- Sample users, catalog entries and orders

Usage:
    def test_something(facade, user):
        order = facade.orders.create({"user_id": user["id"], "subtotal": "10"})
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import mongomock
import pytest

from commerce_spine.core.adapters import (
    DocumentAdapter,
    DocumentConfig,
    RelationalAdapter,
    RelationalConfig,
)
from commerce_spine.core.facade import DataAccessFacade


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if test_path.parts[0] == "api":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Stores
# =============================================================================


@pytest.fixture
def relational(tmp_path: Path) -> Iterator[RelationalAdapter]:
    adapter = RelationalAdapter(RelationalConfig(url=f"sqlite:///{tmp_path / 'commerce.db'}"))
    yield adapter
    adapter.disconnect()


@pytest.fixture
def document() -> Iterator[DocumentAdapter]:
    adapter = DocumentAdapter(
        DocumentConfig(database="commerce_test", schema_validation=False),
        client=mongomock.MongoClient(),
    )
    yield adapter
    adapter.disconnect()


@pytest.fixture
def facade(relational: RelationalAdapter, document: DocumentAdapter) -> DataAccessFacade:
    facade = DataAccessFacade(relational, document, legacy_tables=[], legacy_enum_types=[])
    result = facade.recreate_schema()
    assert result.success, result.message
    return facade


# =============================================================================
# Sample data
# =============================================================================


@pytest.fixture
def user(facade: DataAccessFacade) -> dict[str, Any]:
    return facade.users.create(
        {
            "email": "ada@shop.test",
            "password_hash": "x" * 60,
            "first_name": "Ada",
            "last_name": "Lovelace",
        }
    )


@pytest.fixture
def category(facade: DataAccessFacade) -> dict[str, Any]:
    return facade.categories.create({"name": "Books", "sort_order": 1})


@pytest.fixture
def product(facade: DataAccessFacade, category: dict[str, Any]) -> dict[str, Any]:
    return facade.products.create(
        {
            "name": "Analytical Engine Manual",
            "description": "First edition",
            "price": "19.99",
            "stock": 5,
            "images": ["manual.png"],
            "category_id": category["id"],
        }
    )


@pytest.fixture
def order(facade: DataAccessFacade, user: dict[str, Any]) -> dict[str, Any]:
    return facade.orders.create(
        {
            "user_id": user["id"],
            "subtotal": "39.98",
            "tax_amount": "3.20",
            "shipping_amount": "5.00",
            "discount_amount": "2.00",
            "shipping_address": {"city": "London"},
        }
    )


@pytest.fixture
def order_item(
    facade: DataAccessFacade, order: dict[str, Any], product: dict[str, Any]
) -> dict[str, Any]:
    return facade.order_items.create(
        {"order_id": order["id"], "product_id": product["id"], "quantity": 2}
    )
