"""
Relation-fallback resolution for relationship-bearing reads.

A read that expands related entities (an order with its user, items and
item products) can fail when the relational schema is partially broken: a
related table was dropped, a column renamed, a join target is missing.
Rather than failing the whole read, the resolver retries it with a
strictly narrower set of relations until it reaches the bare entity.

The ladder is data; one loop walks it::

    ORDER_LADDER = RelationLadder("order", [
        ("user", "items", "items.product"),
        ("user",),
    ])                                     # () is appended as the floor

    resolved = resolver.resolve(ORDER_LADDER, read)
    resolved.value       # the entity (or list, or None when absent)
    resolved.relations   # the set that actually succeeded

Rules:
    - every attempt runs in its own session (a failed statement poisons
      the transaction it ran in)
    - any ``SQLAlchemyError`` raised while expanding relations, or an unknown
      relation name, narrows the ladder; pool ``TimeoutError`` does not,
      because a narrower read would queue for the same pool
    - a failure of the bare read propagates to the caller
    - ``None`` from a read means "confirmed absent" and ends the walk
    - writes never go through the resolver
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.interfaces import LoaderOption

from commerce_spine.core.adapters.relational import RelationalAdapter
from commerce_spine.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Relations = tuple[str, ...]


@dataclass(frozen=True)
class RelationLadder:
    """Ordered relation sets for one entity family, richest first.

    The empty set is appended automatically. Each step must be a strict
    subset of the one before it.
    """

    entity: str
    steps: Sequence[Iterable[str]]
    _resolved: tuple[Relations, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        resolved = [tuple(step) for step in self.steps]
        if not resolved or resolved[-1]:
            resolved.append(())
        for wider, narrower in zip(resolved, resolved[1:]):
            if not set(narrower) < set(wider):
                raise ValueError(
                    f"{self.entity} ladder step {narrower!r} is not strictly narrower than {wider!r}"
                )
        object.__setattr__(self, "_resolved", tuple(resolved))

    @property
    def sets(self) -> tuple[Relations, ...]:
        return self._resolved

    @property
    def richest(self) -> Relations:
        return self._resolved[0]

    def __iter__(self):
        return iter(self._resolved)

    def __len__(self) -> int:
        return len(self._resolved)


@dataclass
class ResolvedRead(Generic[T]):
    """Outcome of a resolved read. ``relations`` is at least what was loaded."""

    value: T
    relations: Relations
    attempts: int = 1

    @property
    def degraded(self) -> bool:
        return self.attempts > 1


class UnknownRelationError(AttributeError):
    """A relation path names an attribute the model does not have."""


def loader_options(model: type, relations: Iterable[str]) -> list[LoaderOption]:
    """Build ``selectinload`` chains from dotted relation paths.

    ``("items", "items.product")`` becomes
    ``selectinload(Order.items)`` and
    ``selectinload(Order.items).selectinload(OrderItem.product)``.
    """
    options: list[LoaderOption] = []
    for path in relations:
        current_model = model
        option = None
        for name in path.split("."):
            attr = getattr(current_model, name, None)
            prop = getattr(attr, "property", None)
            mapper = getattr(prop, "mapper", None)
            if mapper is None:
                raise UnknownRelationError(f"{current_model.__name__} has no relation {name!r}")
            option = selectinload(attr) if option is None else option.selectinload(attr)
            current_model = mapper.class_
        options.append(option)
    return options


class RelationFallbackResolver:
    """Walks a :class:`RelationLadder` until a read succeeds."""

    def __init__(self, adapter: RelationalAdapter):
        self._adapter = adapter

    def resolve(
        self,
        ladder: RelationLadder,
        read: Callable[[Session, Relations], T],
    ) -> ResolvedRead[T]:
        """Run ``read(session, relations)`` down the ladder.

        Raises:
            Whatever the bare (floor) read raises; pool timeouts from any step.
        """
        sets = ladder.sets
        for attempt, relations in enumerate(sets, start=1):
            is_floor = attempt == len(sets)
            try:
                with self._adapter.session_scope() as session:
                    value = read(session, relations)
            except sa_exc.TimeoutError:
                raise
            except (sa_exc.SQLAlchemyError, UnknownRelationError) as e:
                if is_floor:
                    raise
                logger.warning(
                    "relation_fallback",
                    entity=ladder.entity,
                    failed=list(relations),
                    next=list(sets[attempt]),
                    error_type=type(e).__name__,
                    error=str(getattr(e, "orig", e)),
                )
                continue

            if attempt > 1:
                logger.info(
                    "relation_fallback_resolved",
                    entity=ladder.entity,
                    relations=list(relations),
                    attempts=attempt,
                )
            return ResolvedRead(value=value, relations=relations, attempts=attempt)

        raise AssertionError("relation ladder is never empty")  # pragma: no cover


# ── Ladders per entity family ────────────────────────────────────────────

CATEGORY_LADDER = RelationLadder("category", [("products",)])
PRODUCT_LADDER = RelationLadder("product", [("category",)])
ORDER_LADDER = RelationLadder("order", [("user", "items", "items.product"), ("user",)])
ORDER_ITEM_LADDER = RelationLadder("order_item", [("product", "order"), ("product",)])
ORDER_ITEMS_BY_ORDER_LADDER = RelationLadder("order_item", [("product",)])


__all__ = [
    "RelationLadder",
    "ResolvedRead",
    "RelationFallbackResolver",
    "UnknownRelationError",
    "loader_options",
    "CATEGORY_LADDER",
    "PRODUCT_LADDER",
    "ORDER_LADDER",
    "ORDER_ITEM_LADDER",
    "ORDER_ITEMS_BY_ORDER_LADDER",
]
