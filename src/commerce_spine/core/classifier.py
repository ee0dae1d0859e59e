"""
Error classifier: store-native failures → DataAccessError taxonomy.

Classification looks at structured codes only, never at message text:

==========================  ============================  =====================
Relational                  Document                      Result
==========================  ============================  =====================
SQLSTATE 23505 / SQLite     11000, 11001 (duplicate key)  ConflictError
2067, 1555 (unique / pk)
SQLSTATE 23503 / SQLite 787                               InvalidReferenceError
SQLSTATE 23514, 23502 /     121 (document validation)     InvalidInputError
SQLite 275, 1299
pool ``TimeoutError``       server selection / network /  StoreTimeoutError
                            50 (max time expired)
anything else               anything else                 InternalStoreError
==========================  ============================  =====================

PostgreSQL codes are read from ``orig.sqlstate`` (psycopg 3) or
``orig.pgcode`` (psycopg2); SQLite extended result codes from
``orig.sqlite_errorcode`` (Python 3.11+). Errors that reach the fallback
branch are logged with their native code so new mappings can be added.

Examples:
    >>> classifier = ErrorClassifier()
    >>> err = classifier.classify(integrity_error, entity="user", operation="create")
    >>> type(err).__name__, err.http_status
    ('ConflictError', 409)
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError
from pymongo.errors import (
    BulkWriteError,
    ExecutionTimeout,
    NetworkTimeout,
    OperationFailure,
    PyMongoError,
    ServerSelectionTimeoutError,
    WriteError,
)
from sqlalchemy import exc as sa_exc

from commerce_spine.core.errors import (
    ConflictError,
    DataAccessError,
    ErrorContext,
    InternalStoreError,
    InvalidInputError,
    InvalidReferenceError,
    StoreTimeoutError,
)
from commerce_spine.core.logging import get_logger

logger = get_logger(__name__)

# PostgreSQL SQLSTATE
PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"
PG_CHECK_VIOLATION = "23514"
PG_NOT_NULL_VIOLATION = "23502"

# SQLite extended result codes
SQLITE_CONSTRAINT_UNIQUE = 2067
SQLITE_CONSTRAINT_PRIMARYKEY = 1555
SQLITE_CONSTRAINT_FOREIGNKEY = 787
SQLITE_CONSTRAINT_NOTNULL = 1299
SQLITE_CONSTRAINT_CHECK = 275

# MongoDB server codes
MONGO_DUPLICATE_KEY = (11000, 11001)
MONGO_DOCUMENT_VALIDATION_FAILURE = 121
MONGO_MAX_TIME_EXPIRED = 50

_CONFLICT_CODES = {PG_UNIQUE_VIOLATION, str(SQLITE_CONSTRAINT_UNIQUE), str(SQLITE_CONSTRAINT_PRIMARYKEY)}
_REFERENCE_CODES = {PG_FOREIGN_KEY_VIOLATION, str(SQLITE_CONSTRAINT_FOREIGNKEY)}
_INPUT_CODES = {
    PG_CHECK_VIOLATION,
    PG_NOT_NULL_VIOLATION,
    str(SQLITE_CONSTRAINT_CHECK),
    str(SQLITE_CONSTRAINT_NOTNULL),
}


def relational_code(error: sa_exc.SQLAlchemyError) -> str | None:
    """Extract the driver error code wrapped by a SQLAlchemy DBAPIError."""
    orig = getattr(error, "orig", None)
    if orig is None:
        return None
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    code = getattr(orig, "sqlite_errorcode", None)
    if code is not None:
        return str(code)
    return None


def relational_constraint(error: sa_exc.SQLAlchemyError) -> str | None:
    """Constraint name from psycopg diagnostics, when the driver exposes it."""
    diag = getattr(getattr(error, "orig", None), "diag", None)
    return getattr(diag, "constraint_name", None) if diag is not None else None


def document_code(error: PyMongoError) -> int | None:
    """Extract the server error code from a PyMongo error."""
    if isinstance(error, BulkWriteError):
        write_errors = (error.details or {}).get("writeErrors") or []
        if write_errors:
            return write_errors[0].get("code")
    if isinstance(error, (OperationFailure, WriteError)):
        return error.code
    return None


class ErrorClassifier:
    """
    Translate raw store exceptions into the application taxonomy.

    Stateless; one instance is shared by the facade.
    """

    def classify(
        self,
        error: BaseException,
        *,
        entity: str | None = None,
        operation: str | None = None,
        entity_id: Any = None,
    ) -> DataAccessError:
        """Return the DataAccessError for *error*.

        Already-classified errors pass through unchanged (context is only
        filled where empty).
        """
        if isinstance(error, DataAccessError):
            if error.context.entity is None and entity is not None:
                error.with_context(entity=entity, operation=operation)
            return error

        if isinstance(error, ValidationError):
            return InvalidInputError(
                f"Invalid {entity or 'input'}: {error.error_count()} validation error(s)",
                errors=_validation_errors(error),
                context=ErrorContext(entity=entity, operation=operation, entity_id=entity_id),
                cause=error,
            )

        if isinstance(error, sa_exc.SQLAlchemyError):
            return self._classify_relational(error, entity, operation, entity_id)

        if isinstance(error, PyMongoError):
            return self._classify_document(error, entity, operation, entity_id)

        logger.error(
            "store_error_unclassified",
            error_type=type(error).__name__,
            error=str(error),
            entity=entity,
            operation=operation,
        )
        return InternalStoreError(
            f"Unexpected error during {operation or 'store operation'}",
            context=ErrorContext(entity=entity, operation=operation, entity_id=entity_id),
            cause=error,
        )

    # -- relational ---------------------------------------------------------

    def _classify_relational(
        self,
        error: sa_exc.SQLAlchemyError,
        entity: str | None,
        operation: str | None,
        entity_id: Any,
    ) -> DataAccessError:
        code = relational_code(error)
        context = ErrorContext(
            store="relational",
            entity=entity,
            operation=operation,
            entity_id=entity_id,
            native_code=code,
            constraint=relational_constraint(error),
        )
        subject = entity or "record"

        if isinstance(error, sa_exc.TimeoutError):
            return StoreTimeoutError(
                "Timed out waiting for a relational connection", context=context, cause=error
            )
        if code in _CONFLICT_CODES:
            return ConflictError(f"{subject} already exists", context=context, cause=error)
        if code in _REFERENCE_CODES:
            return InvalidReferenceError(
                f"{subject} references a record that does not exist", context=context, cause=error
            )
        if code in _INPUT_CODES:
            return InvalidInputError(
                f"{subject} violates a data constraint", context=context, cause=error
            )

        logger.error(
            "store_error_unclassified",
            store="relational",
            error_type=type(error).__name__,
            native_code=code,
            error=str(getattr(error, "orig", error)),
            entity=entity,
            operation=operation,
        )
        return InternalStoreError("Relational store error", context=context, cause=error)

    # -- document -----------------------------------------------------------

    def _classify_document(
        self,
        error: PyMongoError,
        entity: str | None,
        operation: str | None,
        entity_id: Any,
    ) -> DataAccessError:
        code = document_code(error)
        context = ErrorContext(
            store="document",
            entity=entity,
            operation=operation,
            entity_id=entity_id,
            native_code=str(code) if code is not None else None,
        )
        subject = entity or "document"

        if isinstance(error, (ServerSelectionTimeoutError, NetworkTimeout, ExecutionTimeout)) or (
            code == MONGO_MAX_TIME_EXPIRED
        ):
            return StoreTimeoutError("Document store timed out", context=context, cause=error)
        if code in MONGO_DUPLICATE_KEY:
            return ConflictError(f"{subject} already exists", context=context, cause=error)
        if code == MONGO_DOCUMENT_VALIDATION_FAILURE:
            return InvalidInputError(
                f"{subject} failed document validation", context=context, cause=error
            )

        logger.error(
            "store_error_unclassified",
            store="document",
            error_type=type(error).__name__,
            native_code=code,
            error=str(error),
            entity=entity,
            operation=operation,
        )
        return InternalStoreError("Document store error", context=context, cause=error)


def _validation_errors(error: ValidationError) -> list[dict[str, Any]]:
    return [
        {"field": ".".join(str(part) for part in item["loc"]), "message": item["msg"]}
        for item in error.errors()
    ]


__all__ = ["ErrorClassifier", "relational_code", "document_code"]
