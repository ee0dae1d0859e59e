"""Order repositories - ``orders`` and ``order_items``.

Monetary invariants are enforced here, on top of the input models:

* ``orders.total_amount`` is always recomputed from its components, on
  create and whenever an update touches any of them. A caller-supplied
  total that disagrees is rejected.
* ``order_items.total_price`` is ``quantity * unit_price``; ``unit_price``
  defaults to the product's current price and ``product_snapshot`` captures
  the product as it was when the line was created.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from commerce_spine.core.errors import InvalidInputError, InvalidReferenceError
from commerce_spine.core.orm.tables import OrderItemTable, OrderTable, ProductTable
from commerce_spine.core.relations import (
    ORDER_ITEM_LADDER,
    ORDER_ITEMS_BY_ORDER_LADDER,
    ORDER_LADDER,
)
from commerce_spine.core.schemas import AMOUNT_FIELDS, generate_order_number, order_total

from .base import RelationalRepository


class OrderRepository(RelationalRepository[OrderTable]):
    """Orders read with user, items and each item's product; newest first."""

    model = OrderTable
    entity = "order"
    ladder = ORDER_LADDER

    def order_by(self) -> tuple[Any, ...]:
        return (OrderTable.created_at.desc(), OrderTable.id.desc())

    def find_by_user(self, user_id: int) -> list[dict[str, Any]]:
        return self.find_all(user_id=user_id)

    def _prepare_create(self, session: Session, values: dict[str, Any]) -> dict[str, Any]:
        if not values.get("order_number"):
            values["order_number"] = generate_order_number()
        derived = order_total(*(values[name] for name in AMOUNT_FIELDS))
        supplied = values.get("total_amount")
        if supplied is not None and Decimal(supplied) != derived:
            raise InvalidInputError(
                f"total_amount {supplied} does not match derived total {derived}"
            )
        values["total_amount"] = derived
        return values

    def _prepare_update(
        self, session: Session, obj: OrderTable, values: dict[str, Any]
    ) -> dict[str, Any]:
        touched = [name for name in AMOUNT_FIELDS if values.get(name) is not None]
        supplied = values.pop("total_amount", None)
        if not touched and supplied is None:
            return values

        amounts = {
            name: Decimal(values[name]) if values.get(name) is not None else Decimal(getattr(obj, name))
            for name in AMOUNT_FIELDS
        }
        derived = order_total(*(amounts[name] for name in AMOUNT_FIELDS))
        if derived < 0:
            raise InvalidInputError("discount_amount exceeds the order amount")
        if supplied is not None and Decimal(supplied) != derived:
            raise InvalidInputError(
                f"total_amount {supplied} does not match derived total {derived}"
            )
        values["total_amount"] = derived
        return values


class OrderItemRepository(RelationalRepository[OrderItemTable]):
    """Order lines read with product and parent order."""

    model = OrderItemTable
    entity = "order_item"
    ladder = ORDER_ITEM_LADDER

    def find_by_order(self, order_id: int) -> list[dict[str, Any]]:
        return self.find_all_resolved(ORDER_ITEMS_BY_ORDER_LADDER, order_id=order_id).value

    def _prepare_create(self, session: Session, values: dict[str, Any]) -> dict[str, Any]:
        product = session.get(ProductTable, values["product_id"])
        if product is None:
            raise InvalidReferenceError(
                f"product {values['product_id']} does not exist"
            ).with_context(store="relational", entity=self.entity, operation="create")

        if values.get("unit_price") is None:
            values["unit_price"] = product.price
        if values.get("product_snapshot") is None:
            values["product_snapshot"] = {
                "name": product.name,
                "description": product.description,
                "price": float(product.price),
                "images": list(product.images or []),
                "category_id": product.category_id,
            }

        derived = values["quantity"] * Decimal(values["unit_price"])
        supplied = values.get("total_price")
        if supplied is not None and Decimal(supplied) != derived:
            raise InvalidInputError(
                f"total_price {supplied} does not equal quantity * unit_price ({derived})"
            )
        values["total_price"] = derived
        return values

    def _prepare_update(
        self, session: Session, obj: OrderItemTable, values: dict[str, Any]
    ) -> dict[str, Any]:
        if values.get("quantity") is None and values.get("unit_price") is None:
            return values
        quantity = values["quantity"] if values.get("quantity") is not None else obj.quantity
        unit_price = Decimal(
            values["unit_price"] if values.get("unit_price") is not None else obj.unit_price
        )
        values["total_price"] = quantity * unit_price
        return values
