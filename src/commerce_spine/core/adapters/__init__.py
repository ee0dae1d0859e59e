"""
Store adapters for the relational (SQLAlchemy) and document (PyMongo) stores.

Adapters own driver resources only: engines, pools, sessions, clients and
collection provisioning. They hold no entity knowledge; repositories sit on
top of them and the facade wires both together.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────┐
        │                    StoreAdapter                      │
        │         connect() · disconnect() · ping()            │
        ├──────────────────────────┬──────────────────────────┤
        │  RelationalAdapter       │  DocumentAdapter         │
        │  engine + QueuePool      │  MongoClient             │
        │  session_scope()         │  collection(name)        │
        │  autocommit()            │  provision(name)         │
        └──────────────────────────┴──────────────────────────┘
"""

from .base import StoreAdapter
from .document import COLLECTIONS, LOG_VALIDATOR, LOGS, REVIEW_VALIDATOR, REVIEWS, DocumentAdapter
from .relational import CommerceSession, RelationalAdapter, create_commerce_engine
from .types import DatabaseType, DocumentConfig, RelationalConfig, normalize_url

__all__ = [
    "StoreAdapter",
    "RelationalAdapter",
    "DocumentAdapter",
    "CommerceSession",
    "create_commerce_engine",
    "DatabaseType",
    "RelationalConfig",
    "DocumentConfig",
    "normalize_url",
    "REVIEWS",
    "LOGS",
    "COLLECTIONS",
    "REVIEW_VALIDATOR",
    "LOG_VALIDATOR",
]
