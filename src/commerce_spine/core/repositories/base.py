"""Base repository for relational entities.

Every relational repository shares the same contract::

    create(data)            -> dict
    find_by_id(id)          -> dict | None
    get(id)                 -> dict              (NotFoundError when absent)
    find_all(**filters)     -> list[dict]
    update(id, data)        -> dict | None       (None when absent)
    delete(id)              -> bool              (True exactly once)
    count()                 -> int

Reads run through the :class:`RelationFallbackResolver` using the
subclass ``ladder``; the returned dicts contain exactly the relations that
were loaded. Writes are one unit of work per call, committed before
returning, and never expand relations.

Subclasses customise via ``model``, ``entity``, ``ladder``, ``order_by()``
and the ``_prepare_create`` / ``_prepare_update`` hooks.
"""

from __future__ import annotations

from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from commerce_spine.core.adapters.relational import RelationalAdapter
from commerce_spine.core.errors import NotFoundError
from commerce_spine.core.logging import get_logger
from commerce_spine.core.orm.base import CommerceBase, attribute_names, to_dict
from commerce_spine.core.relations import (
    RelationFallbackResolver,
    RelationLadder,
    Relations,
    ResolvedRead,
    loader_options,
)

from ._helpers import _build_where

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=CommerceBase)


class RelationalRepository(Generic[ModelT]):
    """CRUD over one mapped table."""

    model: ClassVar[type[CommerceBase]]
    entity: ClassVar[str]
    ladder: ClassVar[RelationLadder]

    def __init__(
        self,
        adapter: RelationalAdapter,
        resolver: RelationFallbackResolver | None = None,
    ):
        self._adapter = adapter
        self._resolver = resolver or RelationFallbackResolver(adapter)
        self._attrs = attribute_names(self.model)

    def order_by(self) -> tuple[Any, ...]:
        return (self.model.id,)

    # -- reads -----------------------------------------------------------------

    def find_by_id_resolved(self, entity_id: int) -> ResolvedRead[dict[str, Any] | None]:
        """Single read plus the relation set that was actually loaded."""

        def read(session: Session, relations: Relations) -> dict[str, Any] | None:
            stmt = (
                select(self.model)
                .where(self.model.id == entity_id)
                .options(*loader_options(self.model, relations))
            )
            obj = session.scalars(stmt).first()
            return to_dict(obj) if obj is not None else None

        return self._resolver.resolve(self.ladder, read)

    def find_by_id(self, entity_id: int) -> dict[str, Any] | None:
        return self.find_by_id_resolved(entity_id).value

    def get(self, entity_id: int) -> dict[str, Any]:
        found = self.find_by_id(entity_id)
        if found is None:
            raise NotFoundError(self.entity, entity_id)
        return found

    def find_all_resolved(
        self,
        ladder: RelationLadder | None = None,
        **filters: Any,
    ) -> ResolvedRead[list[dict[str, Any]]]:
        """Collection read plus the relation set that was actually loaded."""
        where = _build_where(self.model, self._attrs, filters)

        def read(session: Session, relations: Relations) -> list[dict[str, Any]]:
            stmt = (
                select(self.model)
                .where(*where)
                .order_by(*self.order_by())
                .options(*loader_options(self.model, relations))
            )
            return [to_dict(obj) for obj in session.scalars(stmt).all()]

        return self._resolver.resolve(ladder or self.ladder, read)

    def find_all(self, **filters: Any) -> list[dict[str, Any]]:
        return self.find_all_resolved(**filters).value

    def count(self) -> int:
        with self._adapter.session_scope() as session:
            return session.scalar(select(func.count()).select_from(self.model)) or 0

    # -- writes ----------------------------------------------------------------

    def create(self, data: BaseModel) -> dict[str, Any]:
        """Insert one row and return it as stored (server defaults included)."""
        values = data.model_dump()
        with self._adapter.session_scope() as session:
            values = self._prepare_create(session, values)
            obj = self.model(**self._to_attrs(values))
            session.add(obj)
            session.flush()
            session.refresh(obj)
            created = to_dict(obj)
        logger.debug("entity_created", entity=self.entity, id=created["id"])
        return created

    def update(self, entity_id: int, data: BaseModel) -> dict[str, Any] | None:
        """Apply the fields the caller set; ``None`` when the row is absent."""
        values = data.model_dump(exclude_unset=True)
        with self._adapter.session_scope() as session:
            obj = session.get(self.model, entity_id)
            if obj is None:
                return None
            values = self._prepare_update(session, obj, values)
            for key, value in self._to_attrs(values).items():
                setattr(obj, key, value)
            session.flush()
            session.refresh(obj)
            return to_dict(obj)

    def delete(self, entity_id: int) -> bool:
        """Delete by id in a single statement; True only if a row went away.

        Dependent rows follow the store's ON DELETE rules.
        """
        with self._adapter.session_scope() as session:
            result = session.execute(delete(self.model).where(self.model.id == entity_id))
            deleted = result.rowcount > 0
        if deleted:
            logger.debug("entity_deleted", entity=self.entity, id=entity_id)
        return deleted

    # -- hooks -----------------------------------------------------------------

    def _prepare_create(self, session: Session, values: dict[str, Any]) -> dict[str, Any]:
        return values

    def _prepare_update(
        self, session: Session, obj: Any, values: dict[str, Any]
    ) -> dict[str, Any]:
        return values

    def _to_attrs(self, values: dict[str, Any]) -> dict[str, Any]:
        return {self._attrs.get(key, key): value for key, value in values.items()}


__all__ = ["RelationalRepository"]
