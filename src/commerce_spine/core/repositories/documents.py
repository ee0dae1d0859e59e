"""Document repositories - ``reviews`` and ``logs`` collections.

Every write touches exactly one document. Counters move with ``$inc``
inside a single ``find_one_and_update`` so concurrent adjustments never
lose updates. List reads sort by ``created_at`` descending and are capped
(default 100).
"""

from __future__ import annotations

import datetime
from typing import Any, ClassVar

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection

from commerce_spine.core.adapters.document import LOGS, REVIEWS, DocumentAdapter
from commerce_spine.core.documents import (
    LogCreate,
    from_mongo,
    to_mongo,
    utcnow,
)
from commerce_spine.core.enums import LogCategory, LogLevel
from commerce_spine.core.errors import InvalidInputError, NotFoundError
from commerce_spine.core.logging import get_logger

from ._helpers import PageSlice, _document_filter, _reject_unknown_filters

logger = get_logger(__name__)

DEFAULT_LIMIT = 100


def object_id(value: str | ObjectId, entity: str = "document") -> ObjectId:
    """Parse a document id; malformed ids are invalid input, not not-found."""
    if isinstance(value, ObjectId):
        return value
    try:
        # ObjectId(None) would mint a fresh id
        if not isinstance(value, str):
            raise TypeError(f"expected a string id, got {type(value).__name__}")
        return ObjectId(value)
    except (InvalidId, TypeError) as e:
        raise InvalidInputError(f"Invalid {entity} id: {value!r}", cause=e).with_context(
            store="document", entity=entity, entity_id=value
        )


def _enum_value(enum_cls: type, value: Any) -> str | None:
    if value is None:
        return None
    try:
        return enum_cls(value).value
    except ValueError as e:
        raise InvalidInputError(f"Invalid {enum_cls.__name__}: {value!r}", cause=e)


def _time_range(start: datetime.datetime | None, end: datetime.datetime | None) -> dict[str, Any]:
    bounds: dict[str, Any] = {}
    if start is not None:
        bounds["$gte"] = start
    if end is not None:
        bounds["$lte"] = end
    return {"created_at": bounds} if bounds else {}


class DocumentRepository:
    """CRUD over one collection; documents come back with a string ``id``."""

    collection_name: ClassVar[str]
    entity: ClassVar[str]

    def __init__(self, adapter: DocumentAdapter):
        self._adapter = adapter

    @property
    def collection(self) -> Collection:
        return self._adapter.collection(self.collection_name)

    # -- reads -----------------------------------------------------------------

    def find_by_id(self, document_id: str) -> dict[str, Any] | None:
        oid = object_id(document_id, self.entity)
        return from_mongo(self.collection.find_one({"_id": oid}))

    def get(self, document_id: str) -> dict[str, Any]:
        found = self.find_by_id(document_id)
        if found is None:
            raise NotFoundError(self.entity, document_id)
        return found

    def _find(self, query: dict[str, Any], limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
        page = PageSlice(limit=limit)
        cursor = (
            self.collection.find(query)
            .sort([("created_at", DESCENDING), ("_id", DESCENDING)])
            .skip(page.offset)
            .limit(page.limit)
        )
        return [from_mongo(doc) for doc in cursor]

    def count(self) -> int:
        return self.collection.count_documents({})

    # -- writes ----------------------------------------------------------------

    def create(self, data: BaseModel) -> dict[str, Any]:
        document = self._prepare_create(to_mongo(data))
        now = utcnow()
        document["created_at"] = now
        document["updated_at"] = now
        result = self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        logger.debug("document_created", entity=self.entity, id=str(result.inserted_id))
        return from_mongo(document)

    def update(self, document_id: str, data: BaseModel) -> dict[str, Any] | None:
        """Set the fields the caller sent; ``None`` when the document is absent."""
        oid = object_id(document_id, self.entity)
        changes = to_mongo(data, exclude_unset=True)
        changes["updated_at"] = utcnow()
        updated = self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        return from_mongo(updated)

    def delete(self, document_id: str) -> bool:
        oid = object_id(document_id, self.entity)
        return self.collection.delete_one({"_id": oid}).deleted_count == 1

    def _prepare_create(self, document: dict[str, Any]) -> dict[str, Any]:
        return document


class ReviewRepository(DocumentRepository):
    collection_name = REVIEWS
    entity = "review"

    def find_all(
        self,
        *,
        product_id: int | None = None,
        user_id: int | None = None,
        is_verified: bool | None = None,
        min_rating: int | None = None,
        start: datetime.datetime | None = None,
        end: datetime.datetime | None = None,
        limit: int = DEFAULT_LIMIT,
        **unknown: Any,
    ) -> list[dict[str, Any]]:
        _reject_unknown_filters(self.collection_name, unknown)
        query = _document_filter(
            {"product_id": product_id, "user_id": user_id, "is_verified": is_verified}
        )
        if min_rating is not None:
            query["rating"] = {"$gte": min_rating}
        query.update(_time_range(start, end))
        return self._find(query, limit)

    def find_by_product(self, product_id: int, limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
        return self.find_all(product_id=product_id, limit=limit)

    def find_by_user(self, user_id: int, limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
        return self.find_all(user_id=user_id, limit=limit)

    def adjust_helpful_count(self, review_id: str, increment: bool = True) -> dict[str, Any] | None:
        """Atomically move ``helpful_count`` by one; it never drops below zero.

        Returns the review after the change, the unchanged review when a
        decrement hits the floor, or ``None`` when the review does not exist.
        """
        oid = object_id(review_id, self.entity)
        query: dict[str, Any] = {"_id": oid}
        if not increment:
            query["helpful_count"] = {"$gt": 0}

        updated = self.collection.find_one_and_update(
            query,
            {"$inc": {"helpful_count": 1 if increment else -1}, "$set": {"updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if updated is None and not increment:
            return self.find_by_id(review_id)
        return from_mongo(updated)


class LogRepository(DocumentRepository):
    collection_name = LOGS
    entity = "log"

    def _prepare_create(self, document: dict[str, Any]) -> dict[str, Any]:
        # TTL clock starts at insert unless the caller pinned it
        if document.get("expires_at") is None:
            document["expires_at"] = utcnow()
        return document

    def find_all(
        self,
        *,
        level: LogLevel | str | None = None,
        category: LogCategory | str | None = None,
        user_id: int | None = None,
        start: datetime.datetime | None = None,
        end: datetime.datetime | None = None,
        limit: int = DEFAULT_LIMIT,
        **unknown: Any,
    ) -> list[dict[str, Any]]:
        _reject_unknown_filters(self.collection_name, unknown)
        query = _document_filter(
            {
                "level": _enum_value(LogLevel, level),
                "category": _enum_value(LogCategory, category),
                "user_id": user_id,
            }
        )
        query.update(_time_range(start, end))
        return self._find(query, limit)

    def find_by_level(self, level: LogLevel | str, limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
        return self.find_all(level=level, limit=limit)

    def find_by_category(
        self, category: LogCategory | str, limit: int = DEFAULT_LIMIT
    ) -> list[dict[str, Any]]:
        return self.find_all(category=category, limit=limit)

    def find_by_user(self, user_id: int, limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
        return self.find_all(user_id=user_id, limit=limit)

    def find_by_date_range(
        self,
        start: datetime.datetime,
        end: datetime.datetime,
        limit: int = DEFAULT_LIMIT,
    ) -> list[dict[str, Any]]:
        if start > end:
            raise InvalidInputError(f"start {start.isoformat()} is after end {end.isoformat()}")
        return self.find_all(start=start, end=end, limit=limit)

    # -- helpers ---------------------------------------------------------------

    def log_api_request(
        self,
        method: str,
        endpoint: str,
        status_code: int,
        response_time: float,
        *,
        user_id: int | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        request_data: Any = None,
        response_data: Any = None,
    ) -> dict[str, Any]:
        """Record one API request; 4xx/5xx responses are logged at error level."""
        return self.create(
            LogCreate(
                level=LogLevel.ERROR if status_code >= 400 else LogLevel.INFO,
                category=LogCategory.API_REQUEST,
                message=f"{method} {endpoint} - {status_code}",
                user_id=user_id,
                ip_address=ip_address,
                user_agent=user_agent,
                endpoint=endpoint,
                method=method,
                status_code=status_code,
                response_time=response_time,
                request_data=request_data,
                response_data=response_data,
            )
        )

    def log_error(
        self,
        message: str,
        error_details: Any = None,
        *,
        user_id: int | None = None,
        category: LogCategory = LogCategory.ERROR,
    ) -> dict[str, Any]:
        return self.create(
            LogCreate(
                level=LogLevel.ERROR,
                category=category,
                message=message,
                user_id=user_id,
                error_details=error_details,
            )
        )


__all__ = [
    "DocumentRepository",
    "ReviewRepository",
    "LogRepository",
    "object_id",
    "DEFAULT_LIMIT",
]
