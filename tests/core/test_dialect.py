"""Tests for lifecycle SQL dialects."""

import pytest

from commerce_spine.core.dialect import (
    Dialect,
    PostgreSQLDialect,
    SQLiteDialect,
    get_dialect,
    quote_ident,
    sequence_name,
)
from commerce_spine.core.errors import ConfigError


class TestHelpers:
    def test_quote_ident(self):
        assert quote_ident("orders") == '"orders"'
        assert quote_ident('we"ird') == '"we""ird"'

    def test_sequence_name(self):
        assert sequence_name("app_users") == "app_users_id_seq"


class TestPostgreSQLDialect:
    d = PostgreSQLDialect()

    def test_drop_table_cascades(self):
        assert str(self.d.drop_table("orders")) == 'DROP TABLE IF EXISTS "orders" CASCADE'

    def test_rewind(self):
        assert str(self.d.rewind_identity("app_users")) == 'ALTER SEQUENCE "app_users_id_seq" RESTART WITH 1'

    def test_drop_sequence_and_type(self):
        assert str(self.d.drop_sequence("orders")) == 'DROP SEQUENCE IF EXISTS "orders_id_seq" CASCADE'
        assert str(self.d.drop_type("order_status")) == 'DROP TYPE IF EXISTS "order_status" CASCADE'

    def test_delete_all(self):
        assert str(self.d.delete_all("order_items")) == 'DELETE FROM "order_items"'


class TestSQLiteDialect:
    d = SQLiteDialect()

    def test_drop_table(self):
        assert str(self.d.drop_table("orders")) == 'DROP TABLE IF EXISTS "orders"'

    def test_rewind_uses_sqlite_sequence(self):
        statement = self.d.rewind_identity("orders")
        assert "sqlite_sequence" in str(statement)
        assert statement.compile().params == {"table": "orders"}

    def test_no_sequences_or_types(self):
        assert self.d.drop_sequence("orders") is None
        assert self.d.drop_type("order_status") is None


class TestGetDialect:
    @pytest.mark.parametrize("name,cls", [("sqlite", SQLiteDialect), ("postgresql", PostgreSQLDialect)])
    def test_known(self, name, cls):
        dialect = get_dialect(name)
        assert isinstance(dialect, cls)
        assert isinstance(dialect, Dialect)
        assert dialect.name == name

    def test_unknown(self):
        with pytest.raises(ConfigError):
            get_dialect("mssql")
