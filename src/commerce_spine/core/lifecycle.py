"""
Schema lifecycle manager: soft reset, hard reset and schema recreation.

All three operations are idempotent, run statement-by-statement on an
AUTOCOMMIT connection, and return a :class:`LifecycleResult` instead of
raising, so an operator endpoint can always answer with a structured body::

    {"success": true, "message": "Soft reset complete: ..."}

Operations:
    soft_reset()       delete every row child-first
                       (order_items → orders → app_products → categories →
                       app_users), skipping tables that do not exist; empty
                       the reviews and logs collections; rewind identities
                       to 1 (rewind failures are logged, not fatal)
    hard_reset()       drop current and legacy tables, enum types and
                       identity sequences, then both collections; each drop
                       stands alone and failures are counted in the message
    recreate_schema()  enum types → app_users → categories → app_products →
                       orders → order_items, each only if missing; then
                       provision collections (indexes, TTL, validators)

State machine::

    absent ──recreate──▶ present-empty ──writes──▶ present-populated
       ▲                      ▲                           │
       │                      └────────soft reset─────────┘
       └──────────hard reset (from any present state)─────┘

Guardrails:
    ❌ DON'T: run lifecycle operations concurrently with traffic or each other
    ✅ DO: invoke them serially from an operator (no internal locking exists)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from commerce_spine.core.adapters.document import COLLECTIONS, DocumentAdapter
from commerce_spine.core.adapters.relational import RelationalAdapter
from commerce_spine.core.dialect import get_dialect
from commerce_spine.core.errors import SchemaLifecycleError
from commerce_spine.core.logging import get_logger
from commerce_spine.core.orm.tables import ENUM_TYPES, TABLES_IN_DEPENDENCY_ORDER
from commerce_spine.core.settings import DEFAULT_LEGACY_ENUM_TYPES, DEFAULT_LEGACY_TABLES

logger = get_logger(__name__)


@dataclass
class LifecycleResult:
    """Outcome of one lifecycle operation."""

    operation: str
    success: bool = True
    message: str = ""
    completed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)
    counts: dict[str, int] = field(default_factory=dict)
    error: SchemaLifecycleError | None = None

    def to_dict(self, *, detailed: bool = False) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.counts:
            result["counts"] = dict(self.counts)
        if detailed:
            result["completed"] = list(self.completed)
            result["skipped"] = list(self.skipped)
            result["failures"] = dict(self.failures)
        return result


class SchemaLifecycleManager:
    """Resets and rebuilds both stores in dependency order."""

    def __init__(
        self,
        relational: RelationalAdapter,
        document: DocumentAdapter,
        *,
        legacy_tables: list[str] | None = None,
        legacy_enum_types: list[str] | None = None,
    ):
        self._relational = relational
        self._document = document
        self._legacy_tables = list(DEFAULT_LEGACY_TABLES if legacy_tables is None else legacy_tables)
        self._legacy_enum_types = list(
            DEFAULT_LEGACY_ENUM_TYPES if legacy_enum_types is None else legacy_enum_types
        )

    # -- soft reset ------------------------------------------------------------

    def soft_reset(self) -> LifecycleResult:
        result = LifecycleResult("soft_reset")
        logger.info("soft_reset_started")
        try:
            dialect = get_dialect(self._relational.dialect_name)
            present = self._relational.table_names()
            cleared: list[str] = []

            with self._relational.autocommit() as conn:
                for table in reversed(TABLES_IN_DEPENDENCY_ORDER):
                    if table.name not in present:
                        result.skipped.append(table.name)
                        logger.info("soft_reset_table_absent", table=table.name)
                        continue
                    deleted = conn.execute(dialect.delete_all(table.name)).rowcount
                    cleared.append(table.name)
                    result.completed.append(table.name)
                    logger.info("soft_reset_table_cleared", table=table.name, rows=deleted)

            for name in COLLECTIONS:
                deleted = self._document.collection(name).delete_many({}).deleted_count
                result.completed.append(name)
                logger.info("soft_reset_collection_cleared", collection=name, documents=deleted)

            rewound = 0
            with self._relational.autocommit() as conn:
                for table_name in cleared:
                    statement = dialect.rewind_identity(table_name)
                    if statement is None:
                        continue
                    try:
                        conn.execute(statement)
                        rewound += 1
                    except SQLAlchemyError as e:
                        result.failures[f"rewind:{table_name}"] = str(getattr(e, "orig", e))
                        logger.warning("identity_rewind_failed", table=table_name, error=str(e))

        except Exception as e:
            return self._failed(result, e)

        result.message = (
            f"Soft reset complete: cleared {len(cleared)} table(s) and "
            f"{len(COLLECTIONS)} collection(s), rewound {rewound} identity sequence(s)"
        )
        if result.skipped:
            result.message += f"; skipped missing table(s): {', '.join(result.skipped)}"
        logger.info("soft_reset_completed", cleared=cleared, rewound=rewound)
        return result

    # -- hard reset ------------------------------------------------------------

    def hard_reset(self) -> LifecycleResult:
        result = LifecycleResult("hard_reset")
        logger.warning("hard_reset_started")
        try:
            dialect = get_dialect(self._relational.dialect_name)
            current = [table.name for table in reversed(TABLES_IN_DEPENDENCY_ORDER)]
            tables = current + [name for name in self._legacy_tables if name not in current]
            type_names = [enum.name for enum in ENUM_TYPES] + self._legacy_enum_types

            with self._relational.autocommit() as conn:
                for name in tables:
                    self._attempt(result, f"table:{name}", lambda n=name: conn.execute(dialect.drop_table(n)))
                for name in current:
                    statement = dialect.drop_sequence(name)
                    if statement is not None:
                        self._attempt(result, f"sequence:{name}", lambda s=statement: conn.execute(s))
                for name in type_names:
                    statement = dialect.drop_type(name)
                    if statement is not None:
                        self._attempt(result, f"type:{name}", lambda s=statement: conn.execute(s))
        except Exception as e:
            return self._failed(result, e)

        for name in COLLECTIONS:
            self._attempt(
                result,
                f"collection:{name}",
                lambda n=name: self._document.database.drop_collection(n),
            )

        counts: dict[str, int] = {}
        for label in result.completed:
            kind = label.split(":", 1)[0]
            counts[kind] = counts.get(kind, 0) + 1

        result.message = (
            f"Hard reset complete: dropped {counts.get('table', 0)} table(s), "
            f"{counts.get('sequence', 0)} sequence(s), {counts.get('type', 0)} type(s), "
            f"{counts.get('collection', 0)} collection(s); {len(result.failures)} step(s) failed"
        )
        logger.warning("hard_reset_completed", **counts, failed=len(result.failures))
        return result

    # -- recreate --------------------------------------------------------------

    def recreate_schema(self) -> LifecycleResult:
        result = LifecycleResult("recreate_schema")
        logger.info("recreate_schema_started")
        try:
            dialect = get_dialect(self._relational.dialect_name)
            present = self._relational.table_names()

            with self._relational.autocommit() as conn:
                if dialect.name == "postgresql":
                    for enum in ENUM_TYPES:
                        enum.create(conn, checkfirst=True)
                for table in TABLES_IN_DEPENDENCY_ORDER:
                    if table.name in present:
                        result.skipped.append(table.name)
                        continue
                    table.create(conn, checkfirst=True)
                    result.completed.append(table.name)
                    logger.info("table_created", table=table.name)

            collections = self._document.ensure_collections()
        except Exception as e:
            return self._failed(result, e)

        result.message = (
            f"Schema recreated: created {len(result.completed)} table(s), "
            f"{len(result.skipped)} already present; provisioned {len(collections)} collection(s)"
        )
        logger.info("recreate_schema_completed", created=result.completed, skipped=result.skipped)
        return result

    # -- helpers ---------------------------------------------------------------

    def _attempt(self, result: LifecycleResult, label: str, step: Callable[[], Any]) -> None:
        try:
            step()
            result.completed.append(label)
        except Exception as e:
            result.failures[label] = str(getattr(e, "orig", e))
            logger.warning("lifecycle_step_failed", operation=result.operation, step=label, error=str(e))

    def _failed(self, result: LifecycleResult, cause: Exception) -> LifecycleResult:
        return fail(result, cause)


def fail(result: LifecycleResult, cause: Exception) -> LifecycleResult:
    """Mark *result* failed with a ``SchemaLifecycleError`` wrapping *cause*."""
    error = SchemaLifecycleError(
        result.operation,
        f"{result.operation.replace('_', ' ').capitalize()} failed: {cause}",
        cause=cause,
    )
    logger.error("lifecycle_failed", **error.to_dict())
    result.success = False
    result.message = error.message
    result.error = error
    return result


__all__ = ["LifecycleResult", "SchemaLifecycleManager", "fail"]
