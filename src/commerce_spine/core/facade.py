"""
Data access facade: the single entry point to both stores.

The facade exposes one surface per entity family plus the schema
lifecycle operations and a connectivity probe::

    facade = DataAccessFacade.from_settings(Settings())

    user = facade.users.create({"email": "a@shop.test", ...})
    order = facade.orders.get(17)                      # with user + items
    facade.reviews.increment_helpful(review["id"])
    facade.soft_reset().to_dict()                      # {"success": ..., "message": ...}
    facade.seed().counts                               # {"user": 3, "category": 4, ...}

Every surface method:
    1. validates dict input into its pydantic model (unknown fields and bad
       values become ``InvalidInputError``)
    2. dispatches to the repository
    3. translates any failure through :class:`ErrorClassifier`, so only
       ``DataAccessError`` subclasses leave the facade

Lifecycle operations never raise; their outcome is a ``LifecycleResult``.
"""

from __future__ import annotations

import datetime
import functools
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel
from pymongo.errors import PyMongoError
from sqlalchemy.exc import SQLAlchemyError

from commerce_spine.core.adapters.document import DocumentAdapter
from commerce_spine.core.adapters.relational import RelationalAdapter
from commerce_spine.core.classifier import ErrorClassifier
from commerce_spine.core.documents import LogCreate, LogUpdate, ReviewCreate, ReviewUpdate
from commerce_spine.core.enums import LogCategory, LogLevel
from commerce_spine.core.errors import InvalidInputError
from commerce_spine.core.lifecycle import LifecycleResult, SchemaLifecycleManager
from commerce_spine.core.logging import get_logger
from commerce_spine.core.relations import RelationFallbackResolver
from commerce_spine.core.repositories import (
    CategoryRepository,
    LogRepository,
    OrderItemRepository,
    OrderRepository,
    ProductRepository,
    ReviewRepository,
    UserRepository,
)
from commerce_spine.core.schemas import (
    CategoryCreate,
    CategoryUpdate,
    OrderCreate,
    OrderItemCreate,
    OrderItemUpdate,
    OrderUpdate,
    ProductCreate,
    ProductUpdate,
    UserCreate,
    UserUpdate,
)
from commerce_spine.core.seed import seed_sample_data
from commerce_spine.core.settings import Settings

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])
M = TypeVar("M", bound=BaseModel)

Payload = Mapping[str, Any] | BaseModel


def classified(operation: str) -> Callable[[F], F]:
    """Route every exception raised by a surface method through the classifier."""

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(self: EntitySurface, *args: Any, **kwargs: Any) -> Any:
            try:
                return fn(self, *args, **kwargs)
            except Exception as e:
                entity_id = args[0] if args and isinstance(args[0], (int, str)) else None
                error = self._classifier.classify(
                    e, entity=self.entity, operation=operation, entity_id=entity_id
                )
                if error is e:
                    raise
                raise error from e

        return wrapper  # type: ignore[return-value]

    return decorator


def validate(model: type[M], data: Payload) -> M:
    """Coerce *data* into *model*; raises pydantic ``ValidationError``."""
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    elif not isinstance(data, Mapping):
        raise InvalidInputError(f"Expected an object for {model.__name__}, got {type(data).__name__}")
    return model.model_validate(dict(data))


def relational_id(value: Any, entity: str) -> int:
    """Relational ids are integers; anything else is rejected before the store sees it."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"Invalid {entity} id: {value!r}").with_context(
            store="relational", entity=entity, entity_id=repr(value)
        )
    return value


class EntitySurface:
    """Uniform CRUD surface over one repository."""

    create_model: type[BaseModel]
    update_model: type[BaseModel]

    def __init__(self, repository: Any, classifier: ErrorClassifier):
        self._repository = repository
        self._classifier = classifier
        self.entity: str = repository.entity

    @property
    def repository(self) -> Any:
        return self._repository

    @classified("create")
    def create(self, data: Payload) -> dict[str, Any]:
        return self._repository.create(validate(self.create_model, data))

    @classified("find_by_id")
    def find_by_id(self, entity_id: Any) -> dict[str, Any] | None:
        return self._repository.find_by_id(self._id(entity_id))

    @classified("get")
    def get(self, entity_id: Any) -> dict[str, Any]:
        return self._repository.get(self._id(entity_id))

    @classified("find_all")
    def find_all(self, **filters: Any) -> list[dict[str, Any]]:
        return self._repository.find_all(**filters)

    @classified("update")
    def update(self, entity_id: Any, data: Payload) -> dict[str, Any] | None:
        return self._repository.update(self._id(entity_id), validate(self.update_model, data))

    @classified("delete")
    def delete(self, entity_id: Any) -> bool:
        return self._repository.delete(self._id(entity_id))

    @classified("count")
    def count(self) -> int:
        return self._repository.count()

    def _id(self, entity_id: Any) -> Any:
        # document ids are parsed by the repository
        return entity_id


class RelationalSurface(EntitySurface):
    """Surface over a relational repository; ids must be integers."""

    def _id(self, entity_id: Any) -> int:
        return relational_id(entity_id, self.entity)


class UserSurface(RelationalSurface):
    create_model = UserCreate
    update_model = UserUpdate

    @classified("find_by_email")
    def find_by_email(self, email: str) -> dict[str, Any] | None:
        return self._repository.find_by_email(email)


class CategorySurface(RelationalSurface):
    create_model = CategoryCreate
    update_model = CategoryUpdate


class ProductSurface(RelationalSurface):
    create_model = ProductCreate
    update_model = ProductUpdate

    @classified("find_by_category")
    def find_by_category(self, category_id: int) -> list[dict[str, Any]]:
        return self._repository.find_by_category(relational_id(category_id, "category"))


class OrderSurface(RelationalSurface):
    create_model = OrderCreate
    update_model = OrderUpdate

    @classified("find_by_user")
    def find_by_user(self, user_id: int) -> list[dict[str, Any]]:
        return self._repository.find_by_user(relational_id(user_id, "user"))


class OrderItemSurface(RelationalSurface):
    create_model = OrderItemCreate
    update_model = OrderItemUpdate

    @classified("find_by_order")
    def find_by_order(self, order_id: int) -> list[dict[str, Any]]:
        return self._repository.find_by_order(relational_id(order_id, "order"))


class ReviewSurface(EntitySurface):
    create_model = ReviewCreate
    update_model = ReviewUpdate

    @classified("find_by_product")
    def find_by_product(self, product_id: int, limit: int = 100) -> list[dict[str, Any]]:
        return self._repository.find_by_product(product_id, limit)

    @classified("find_by_user")
    def find_by_user(self, user_id: int, limit: int = 100) -> list[dict[str, Any]]:
        return self._repository.find_by_user(user_id, limit)

    @classified("increment_helpful")
    def increment_helpful(self, review_id: str) -> dict[str, Any] | None:
        return self._repository.adjust_helpful_count(review_id, increment=True)

    @classified("decrement_helpful")
    def decrement_helpful(self, review_id: str) -> dict[str, Any] | None:
        return self._repository.adjust_helpful_count(review_id, increment=False)


class LogSurface(EntitySurface):
    create_model = LogCreate
    update_model = LogUpdate

    @classified("find_by_level")
    def find_by_level(self, level: LogLevel | str, limit: int = 100) -> list[dict[str, Any]]:
        return self._repository.find_by_level(level, limit)

    @classified("find_by_category")
    def find_by_category(self, category: LogCategory | str, limit: int = 100) -> list[dict[str, Any]]:
        return self._repository.find_by_category(category, limit)

    @classified("find_by_user")
    def find_by_user(self, user_id: int, limit: int = 100) -> list[dict[str, Any]]:
        return self._repository.find_by_user(user_id, limit)

    @classified("find_by_date_range")
    def find_by_date_range(
        self, start: datetime.datetime, end: datetime.datetime, limit: int = 100
    ) -> list[dict[str, Any]]:
        return self._repository.find_by_date_range(start, end, limit)

    @classified("log_api_request")
    def log_api_request(
        self, method: str, endpoint: str, status_code: int, response_time: float, **extra: Any
    ) -> dict[str, Any]:
        return self._repository.log_api_request(method, endpoint, status_code, response_time, **extra)

    @classified("log_error")
    def log_error(self, message: str, error_details: Any = None, **extra: Any) -> dict[str, Any]:
        return self._repository.log_error(message, error_details, **extra)


class DataAccessFacade:
    """Both stores behind one object; see module docstring."""

    def __init__(
        self,
        relational: RelationalAdapter,
        document: DocumentAdapter,
        *,
        classifier: ErrorClassifier | None = None,
        legacy_tables: list[str] | None = None,
        legacy_enum_types: list[str] | None = None,
    ):
        self._relational = relational
        self._document = document
        self._classifier = classifier or ErrorClassifier()
        resolver = RelationFallbackResolver(relational)

        self.users = UserSurface(UserRepository(relational, resolver), self._classifier)
        self.categories = CategorySurface(CategoryRepository(relational, resolver), self._classifier)
        self.products = ProductSurface(ProductRepository(relational, resolver), self._classifier)
        self.orders = OrderSurface(OrderRepository(relational, resolver), self._classifier)
        self.order_items = OrderItemSurface(
            OrderItemRepository(relational, resolver), self._classifier
        )
        self.reviews = ReviewSurface(ReviewRepository(document), self._classifier)
        self.logs = LogSurface(LogRepository(document), self._classifier)

        self._lifecycle = SchemaLifecycleManager(
            relational,
            document,
            legacy_tables=legacy_tables,
            legacy_enum_types=legacy_enum_types,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> DataAccessFacade:
        return cls(
            RelationalAdapter(settings.relational_config()),
            DocumentAdapter(settings.document_config()),
            legacy_tables=settings.legacy_tables,
            legacy_enum_types=settings.legacy_enum_types,
        )

    @property
    def relational(self) -> RelationalAdapter:
        return self._relational

    @property
    def document(self) -> DocumentAdapter:
        return self._document

    # -- schema lifecycle ------------------------------------------------------

    def soft_reset(self) -> LifecycleResult:
        return self._lifecycle.soft_reset()

    def hard_reset(self) -> LifecycleResult:
        return self._lifecycle.hard_reset()

    def recreate_schema(self) -> LifecycleResult:
        return self._lifecycle.recreate_schema()

    def seed(self) -> LifecycleResult:
        """Write the sample storefront into every empty entity family."""
        return seed_sample_data(self)

    # -- health ----------------------------------------------------------------

    def check_connections(self) -> dict[str, Any]:
        """Reachability and row/document counts for both stores.

        Order tables are counted separately so a broken order schema does
        not mark the whole relational store as down.
        """
        report: dict[str, Any] = {"relational": False, "document": False, "counts": {}, "errors": {}}
        counts, errors = report["counts"], report["errors"]

        try:
            for surface in (self.users, self.products, self.categories):
                counts[surface.entity] = surface.repository.count()
            report["relational"] = True
        except SQLAlchemyError as e:
            errors["relational"] = str(getattr(e, "orig", e))
            logger.warning("health_relational_failed", error=errors["relational"])

        if report["relational"]:
            for surface in (self.orders, self.order_items):
                try:
                    counts[surface.entity] = surface.repository.count()
                except SQLAlchemyError as e:
                    counts[surface.entity] = None
                    errors[surface.entity] = str(getattr(e, "orig", e))
                    logger.warning("health_count_failed", entity=surface.entity, error=errors[surface.entity])

        try:
            for surface in (self.reviews, self.logs):
                counts[surface.entity] = surface.repository.count()
            report["document"] = True
        except PyMongoError as e:
            errors["document"] = str(e)
            logger.warning("health_document_failed", error=errors["document"])

        return report

    def close(self) -> None:
        self._relational.disconnect()
        self._document.disconnect()


__all__ = [
    "DataAccessFacade",
    "EntitySurface",
    "classified",
    "validate",
]
