"""Tests for ORM table definitions and row serialization."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import inspect as sa_inspect

from commerce_spine.core.enums import OrderStatus
from commerce_spine.core.orm import (
    TABLES_IN_DEPENDENCY_ORDER,
    CategoryTable,
    OrderTable,
    ProductTable,
    UserTable,
    attribute_names,
    to_dict,
)
from commerce_spine.core.orm.base import _plain


class TestTables:
    def test_dependency_order(self):
        assert [t.name for t in TABLES_IN_DEPENDENCY_ORDER] == [
            "app_users",
            "categories",
            "app_products",
            "orders",
            "order_items",
        ]

    def test_foreign_key_rules(self):
        fks = {
            (fk.parent.table.name, fk.parent.name): fk.ondelete
            for table in TABLES_IN_DEPENDENCY_ORDER
            for fk in table.foreign_keys
        }
        assert fks == {
            ("app_products", "category_id"): "SET NULL",
            ("orders", "user_id"): "CASCADE",
            ("order_items", "order_id"): "CASCADE",
            ("order_items", "product_id"): "CASCADE",
        }

    def test_unique_columns(self):
        assert UserTable.__table__.c.email.unique
        assert OrderTable.__table__.c.order_number.unique

    def test_metadata_column_name(self):
        assert "metadata" in CategoryTable.__table__.c
        assert attribute_names(ProductTable)["metadata"] == "meta"

    def test_created_tables_match(self, facade):
        inspector = sa_inspect(facade.relational.engine)
        columns = {c["name"] for c in inspector.get_columns("orders")}
        assert {"order_number", "total_amount", "shipping_address", "shipped_at"} <= columns


class TestSerialization:
    def test_plain_values(self):
        assert _plain(Decimal("1.50")) == 1.5
        assert _plain(OrderStatus.SHIPPED) == "shipped"
        assert _plain("x") == "x"

    def test_unloaded_relations_are_omitted(self):
        user = UserTable(
            id=1,
            email="a@b.c",
            password_hash="h",
            first_name="A",
            last_name="B",
        )
        data = to_dict(user)
        assert data["email"] == "a@b.c"
        assert "orders" not in data

    def test_loaded_relation_cycle_is_broken(self):
        category = CategoryTable(id=1, name="Books", sort_order=0, is_active=True)
        product = ProductTable(id=2, name="Pen", description="", price=Decimal("2"), stock=1, images=[])
        category.products = [product]
        product.category = category

        data = to_dict(category)
        assert data["products"][0]["name"] == "Pen"
        assert "category" not in data["products"][0]
