"""
Structured error taxonomy for the commerce data access layer.

Every failure that leaves the data access facade is one of the typed errors
defined here. Store-native exceptions (SQLAlchemy/DB-API errors, PyMongo
errors, pydantic validation errors) are translated into this hierarchy by
:mod:`commerce_spine.core.classifier`; callers never see driver internals.

Each DataAccessError carries:
- **Category:** What kind of failure (conflict, reference, input, ...)
- **Retryable:** Whether repeating the same call may succeed
- **HTTP status:** The status an outer HTTP layer should answer with
- **Context:** Store, entity, operation and the native error code
- **Cause:** The chained driver exception for root cause analysis

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                      DataAccessError                          │
        │   (category, retryable, http_status, context, cause)          │
        ├──────────────────────────────────────────────────────────────┤
        │                                                                │
        │  ConflictError        InvalidReferenceError   InvalidInputError│
        │  (409, CONFLICT)      (400, REFERENCE)        (400, VALIDATION)│
        │                                                                │
        │  NotFoundError        InternalStoreError      StoreTimeoutError│
        │  (404, NOT_FOUND)     (500, STORE)            (503, retryable) │
        │                                                                │
        │  SchemaLifecycleError ConfigError                              │
        │  (500, LIFECYCLE)     (500, CONFIG)                            │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ConflictError("email already registered")
    >>> error.http_status
    409
    >>> error.with_context(store="relational", entity="user", native_code="23505")
    ConflictError('email already registered', category=CONFLICT)
    >>> error.to_dict()["context"]["native_code"]
    '23505'

Guardrails:
    ❌ DON'T: Let sqlalchemy.exc / pymongo.errors escape the facade
    ✅ DO: Route them through ErrorClassifier.classify()

    ❌ DON'T: Mark conflict or validation errors retryable
    ✅ DO: Reserve retryable=True for StoreTimeoutError

Tags:
    error-handling, exception-hierarchy, data-access, classification
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Classification buckets for data access failures.

    The category decides how an outer layer reacts: conflicts and invalid
    input are client mistakes, timeouts are retryable infrastructure
    trouble, store/lifecycle/config errors are operator problems.
    """

    # Client-caused
    CONFLICT = "CONFLICT"              # uniqueness violated
    REFERENCE = "REFERENCE"            # foreign key target missing
    VALIDATION = "VALIDATION"          # check/not-null/schema violations
    NOT_FOUND = "NOT_FOUND"            # entity absent

    # Infrastructure
    TIMEOUT = "TIMEOUT"                # pool exhausted, server unreachable
    STORE = "STORE"                    # anything else from a store

    # Operator
    LIFECYCLE = "LIFECYCLE"            # reset / recreate failures
    CONFIG = "CONFIG"                  # missing or invalid settings


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a data access error.

    Attributes:
        store: ``"relational"`` or ``"document"``
        entity: Entity family (user, order, review, ...)
        operation: Repository operation (create, find_by_id, ...)
        entity_id: Identifier involved, when there is one
        native_code: Driver-level code (SQLSTATE, SQLite extended code,
            MongoDB error code) the classification was based on
        constraint: Constraint or index name reported by the store
        metadata: Additional key-value pairs
    """

    store: str | None = None
    entity: str | None = None
    operation: str | None = None
    entity_id: Any = None
    native_code: str | None = None
    constraint: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["store", "entity", "operation", "entity_id", "native_code", "constraint"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DataAccessError(Exception):
    """
    Base exception for every error surfaced by the data access layer.

    Subclasses set ``default_category``, ``default_retryable`` and
    ``http_status`` so call sites only pass a message (and usually a
    ``cause``).

    Examples:
        >>> error = DataAccessError("boom")
        >>> error.category
        <ErrorCategory.STORE: 'STORE'>
        >>> error.retryable
        False
        >>> error.http_status
        500
    """

    default_category: ErrorCategory = ErrorCategory.STORE
    default_retryable: bool = False
    http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DataAccessError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NotFoundError("order missing").with_context(
                entity="order", entity_id=42
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
            "http_status": self.http_status,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CLIENT ERRORS
# =============================================================================


class ConflictError(DataAccessError):
    """A uniqueness constraint was violated (duplicate email, order number, ...)."""

    default_category = ErrorCategory.CONFLICT
    http_status = 409


class InvalidReferenceError(DataAccessError):
    """A foreign key points at a row that does not exist."""

    default_category = ErrorCategory.REFERENCE
    http_status = 400


class InvalidInputError(DataAccessError):
    """
    Input rejected by boundary validation or by a store constraint.

    Never retryable - the payload must be fixed.
    """

    default_category = ErrorCategory.VALIDATION
    http_status = 400

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.errors:
            result["errors"] = self.errors
        return result


class NotFoundError(DataAccessError):
    """The requested entity does not exist."""

    default_category = ErrorCategory.NOT_FOUND
    http_status = 404

    def __init__(self, entity: str, entity_id: Any, message: str | None = None):
        super().__init__(message or f"{entity} not found: {entity_id}")
        self.with_context(entity=entity, entity_id=entity_id)


# =============================================================================
# STORE ERRORS
# =============================================================================


class InternalStoreError(DataAccessError):
    """Any store failure that does not map to a more specific class."""

    default_category = ErrorCategory.STORE
    http_status = 500


class StoreTimeoutError(DataAccessError):
    """
    The store could not be reached in time.

    Raised for connection pool exhaustion and for MongoDB server selection
    or network timeouts. Retryable by default.
    """

    default_category = ErrorCategory.TIMEOUT
    default_retryable = True
    http_status = 503


# =============================================================================
# OPERATOR ERRORS
# =============================================================================


class SchemaLifecycleError(DataAccessError):
    """A soft reset, hard reset or schema recreation step failed."""

    default_category = ErrorCategory.LIFECYCLE
    http_status = 500

    def __init__(self, operation: str, message: str, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.with_context(operation=operation)


class ConfigError(DataAccessError):
    """Configuration is missing or invalid."""

    default_category = ErrorCategory.CONFIG
    http_status = 500


def is_retryable(error: BaseException) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, DataAccessError):
        return error.retryable
    return False


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DataAccessError",
    "ConflictError",
    "InvalidReferenceError",
    "InvalidInputError",
    "NotFoundError",
    "InternalStoreError",
    "StoreTimeoutError",
    "SchemaLifecycleError",
    "ConfigError",
    "is_retryable",
]
