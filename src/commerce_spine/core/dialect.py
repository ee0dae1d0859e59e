"""SQL dialect abstraction for schema lifecycle statements.

The ORM covers ordinary reads and writes portably. Reset and drop
operations do not: PostgreSQL restarts sequences and drops types with
``CASCADE``, while SQLite keeps identities in ``sqlite_sequence`` and knows
neither enum types nor ``CASCADE``. The lifecycle manager asks a
``Dialect`` for each statement instead of branching on the backend.

Examples:
    >>> d = PostgreSQLDialect()
    >>> str(d.drop_table("orders"))
    'DROP TABLE IF EXISTS "orders" CASCADE'
    >>> str(d.rewind_identity("orders"))
    'ALTER SEQUENCE "orders_id_seq" RESTART WITH 1'
    >>> SQLiteDialect().drop_type("order_status") is None
    True
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from sqlalchemy import text
from sqlalchemy.sql.elements import TextClause

from commerce_spine.core.errors import ConfigError


def quote_ident(name: str) -> str:
    """Double-quote an identifier (embedded quotes doubled)."""
    return '"' + name.replace('"', '""') + '"'


def sequence_name(table: str) -> str:
    """Name PostgreSQL gives the implicit sequence of ``<table>.id``."""
    return f"{table}_id_seq"


@runtime_checkable
class Dialect(Protocol):
    """Lifecycle statement contract.

    Methods return ready-to-execute ``TextClause`` objects, or ``None``
    when the backend has no equivalent (the step is then skipped).
    """

    @property
    def name(self) -> str: ...

    def delete_all(self, table: str) -> TextClause: ...

    def drop_table(self, table: str) -> TextClause: ...

    def rewind_identity(self, table: str) -> TextClause | None: ...

    def drop_sequence(self, table: str) -> TextClause | None: ...

    def drop_type(self, type_name: str) -> TextClause | None: ...


class SQLiteDialect:
    """SQLite: ``sqlite_sequence`` identities, no types, no CASCADE."""

    @property
    def name(self) -> str:
        return "sqlite"

    def delete_all(self, table: str) -> TextClause:
        return text(f"DELETE FROM {quote_ident(table)}")

    def drop_table(self, table: str) -> TextClause:
        return text(f"DROP TABLE IF EXISTS {quote_ident(table)}")

    def rewind_identity(self, table: str) -> TextClause | None:
        return text("DELETE FROM sqlite_sequence WHERE name = :table").bindparams(table=table)

    def drop_sequence(self, table: str) -> TextClause | None:
        return None

    def drop_type(self, type_name: str) -> TextClause | None:
        return None


class PostgreSQLDialect:
    """PostgreSQL: named sequences, native enum types, ``CASCADE`` drops."""

    @property
    def name(self) -> str:
        return "postgresql"

    def delete_all(self, table: str) -> TextClause:
        return text(f"DELETE FROM {quote_ident(table)}")

    def drop_table(self, table: str) -> TextClause:
        return text(f"DROP TABLE IF EXISTS {quote_ident(table)} CASCADE")

    def rewind_identity(self, table: str) -> TextClause | None:
        return text(f"ALTER SEQUENCE {quote_ident(sequence_name(table))} RESTART WITH 1")

    def drop_sequence(self, table: str) -> TextClause | None:
        return text(f"DROP SEQUENCE IF EXISTS {quote_ident(sequence_name(table))} CASCADE")

    def drop_type(self, type_name: str) -> TextClause | None:
        return text(f"DROP TYPE IF EXISTS {quote_ident(type_name)} CASCADE")


_DIALECTS: dict[str, type] = {
    "sqlite": SQLiteDialect,
    "postgresql": PostgreSQLDialect,
}


def get_dialect(name: str) -> Dialect:
    """Dialect for a SQLAlchemy dialect name (``engine.dialect.name``)."""
    try:
        return _DIALECTS[name]()
    except KeyError:
        raise ConfigError(f"Unsupported relational dialect: {name}") from None


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    "get_dialect",
    "quote_ident",
    "sequence_name",
]
