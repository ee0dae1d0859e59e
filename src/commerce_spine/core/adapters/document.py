"""Document store adapter (PyMongo).

One ``MongoClient`` per process; PyMongo pools connections internally and
the client is thread-safe, so repositories share it.

Collections
-----------
* ``reviews`` - product reviews; indexed by product, user and recency.
* ``logs``    - operational logs; TTL index on ``expires_at`` removes entries
  after the retention window (90 days by default).

When ``schema_validation`` is enabled each collection also carries a
``$jsonSchema`` validator mirroring the pydantic document models, so writes
that bypass the facade are still checked (MongoDB error code 121).
"""

from __future__ import annotations

from typing import Any

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import CollectionInvalid, PyMongoError

from commerce_spine.core.enums import LogCategory, LogLevel
from commerce_spine.core.logging import get_logger

from .base import StoreAdapter
from .types import DocumentConfig

logger = get_logger(__name__)

REVIEWS = "reviews"
LOGS = "logs"
COLLECTIONS = (REVIEWS, LOGS)

_ID_TYPES = ["int", "long"]

REVIEW_VALIDATOR: dict[str, Any] = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["product_id", "user_id", "rating", "title", "comment"],
        "properties": {
            "product_id": {"bsonType": _ID_TYPES},
            "user_id": {"bsonType": _ID_TYPES},
            "rating": {"bsonType": _ID_TYPES, "minimum": 1, "maximum": 5},
            "title": {"bsonType": "string"},
            "comment": {"bsonType": "string"},
            "is_verified": {"bsonType": "bool"},
            "is_helpful": {"bsonType": "bool"},
            "helpful_count": {"bsonType": _ID_TYPES, "minimum": 0},
            "images": {"bsonType": "array", "items": {"bsonType": "string"}},
        },
    }
}

LOG_VALIDATOR: dict[str, Any] = {
    "$jsonSchema": {
        "bsonType": "object",
        "required": ["level", "category", "message"],
        "properties": {
            "level": {"enum": [level.value for level in LogLevel]},
            "category": {"enum": [category.value for category in LogCategory]},
            "message": {"bsonType": "string"},
            "status_code": {"bsonType": ["int", "long", "null"]},
            "expires_at": {"bsonType": "date"},
        },
    }
}

_VALIDATORS = {REVIEWS: REVIEW_VALIDATOR, LOGS: LOG_VALIDATOR}


class DocumentAdapter(StoreAdapter):
    """
    MongoDB client holder and collection provisioner.

    A ``client`` may be injected (``mongomock.MongoClient`` in tests);
    otherwise one is created lazily from *config*.
    """

    store_name = "document"

    def __init__(
        self,
        config: DocumentConfig | None = None,
        *,
        client: MongoClient | None = None,
    ):
        super().__init__()
        self._config = config or DocumentConfig()
        self._client = client
        self._connected = client is not None

    # --- lifecycle ---

    def connect(self) -> None:
        if self._client is None:
            self._client = MongoClient(
                self._config.uri,
                serverSelectionTimeoutMS=self._config.timeout_ms,
                connectTimeoutMS=self._config.timeout_ms,
            )
            self._connected = True
            logger.info("document_client_created", database=self._config.database)

    def disconnect(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            self._connected = False

    def ping(self) -> bool:
        try:
            self.client.server_info()
            return True
        except PyMongoError as e:
            logger.warning("document_ping_failed", error=str(e))
            return False

    # --- access ---

    @property
    def client(self) -> MongoClient:
        if self._client is None:
            self.connect()
        return self._client

    @property
    def database(self) -> Database:
        return self.client[self._config.database]

    @property
    def config(self) -> DocumentConfig:
        return self._config

    def collection(self, name: str) -> Collection:
        return self.database[name]

    @property
    def reviews(self) -> Collection:
        return self.collection(REVIEWS)

    @property
    def logs(self) -> Collection:
        return self.collection(LOGS)

    # --- provisioning ---

    def provision(self, name: str) -> None:
        """Create *name* if missing, then (re)apply its indexes.

        Safe to call repeatedly.
        """
        db = self.database
        validator = _VALIDATORS[name] if self._config.schema_validation else None

        if name not in db.list_collection_names():
            try:
                if validator is not None:
                    db.create_collection(name, validator=validator)
                else:
                    db.create_collection(name)
            except CollectionInvalid:
                pass  # created concurrently
        elif validator is not None:
            db.command("collMod", name, validator=validator)

        collection = db[name]
        if name == REVIEWS:
            collection.create_index([("product_id", ASCENDING), ("created_at", DESCENDING)])
            collection.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
        elif name == LOGS:
            collection.create_index(
                [("expires_at", ASCENDING)],
                expireAfterSeconds=self._config.log_retention_days * 86400,
            )
            collection.create_index([("created_at", DESCENDING)])
            collection.create_index([("level", ASCENDING), ("created_at", DESCENDING)])
            collection.create_index([("category", ASCENDING), ("created_at", DESCENDING)])

        logger.debug("collection_provisioned", collection=name, validator=validator is not None)

    def ensure_collections(self) -> list[str]:
        """Provision every collection the layer owns."""
        for name in COLLECTIONS:
            self.provision(name)
        return list(COLLECTIONS)


__all__ = [
    "DocumentAdapter",
    "REVIEWS",
    "LOGS",
    "COLLECTIONS",
    "REVIEW_VALIDATOR",
    "LOG_VALIDATOR",
]
