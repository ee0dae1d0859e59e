"""Commerce Spine Core -- relational and document data access.

Architecture::

    Layer 1 -- Types & Errors
        errors.py          DataAccessError hierarchy (Conflict, NotFound, ...)
        enums.py           Roles, order/payment statuses, log levels
        schemas.py         pydantic inputs for relational entities
        documents.py       pydantic inputs for reviews and logs

    Layer 2 -- Stores
        adapters/          RelationalAdapter (SQLAlchemy), DocumentAdapter (PyMongo)
        orm/               Declarative tables and row serialization
        dialect.py         Lifecycle DDL per relational backend

    Layer 3 -- Access
        relations.py       Relation-fallback resolver and per-entity ladders
        repositories/      One repository per entity
        classifier.py      Driver error → DataAccessError translation
        lifecycle.py       Soft reset, hard reset, recreate
        seed.py            Sample storefront for empty databases
        facade.py          DataAccessFacade, the single entry point

    Layer 4 -- Ambient
        settings.py        pydantic-settings configuration (COMMERCE_*)
        logging.py         structlog configuration
"""

from .classifier import ErrorClassifier
from .errors import (
    ConfigError,
    ConflictError,
    DataAccessError,
    ErrorCategory,
    InternalStoreError,
    InvalidInputError,
    InvalidReferenceError,
    NotFoundError,
    SchemaLifecycleError,
    StoreTimeoutError,
)
from .facade import DataAccessFacade
from .lifecycle import LifecycleResult, SchemaLifecycleManager
from .settings import Settings

__all__ = [
    "ConfigError",
    "ConflictError",
    "DataAccessError",
    "DataAccessFacade",
    "ErrorCategory",
    "ErrorClassifier",
    "InternalStoreError",
    "InvalidInputError",
    "InvalidReferenceError",
    "LifecycleResult",
    "NotFoundError",
    "SchemaLifecycleError",
    "SchemaLifecycleManager",
    "Settings",
    "StoreTimeoutError",
]
