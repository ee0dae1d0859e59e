"""
Input models for relational entities.

Every facade write is validated into one of these models first. Unknown
fields are rejected (``extra="forbid"``) and a pydantic ``ValidationError``
surfaces to callers as ``InvalidInputError``.

``*Create`` models carry defaults; ``*Update`` models are all-optional and
are applied with ``model_dump(exclude_unset=True)`` so only fields the
caller actually sent are written.

Derived values:
    - ``Order.total_amount`` = subtotal + tax + shipping - discount
    - ``OrderItem.total_price`` = quantity * unit_price
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from commerce_spine.core.enums import OrderStatus, PaymentStatus, UserRole

Money = Decimal


class _Input(BaseModel):
    model_config = ConfigDict(extra="forbid")


class PartialUpdate(BaseModel):
    """Base for ``*Update`` models.

    Every field is optional so callers send only what changes, but an
    explicit ``null`` is accepted only for fields listed in ``nullable``.
    """

    nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_explicit_nulls(self) -> PartialUpdate:
        nulled = sorted(
            name
            for name in self.model_fields_set
            if getattr(self, name) is None and name not in self.nullable
        )
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
        return self


def money_field(default: Any = ..., **kwargs: Any) -> Any:
    return Field(default, ge=0, max_digits=10, decimal_places=2, **kwargs)


def order_total(subtotal: Decimal, tax: Decimal, shipping: Decimal, discount: Decimal) -> Decimal:
    return subtotal + tax + shipping - discount


def generate_order_number(now: datetime.datetime | None = None) -> str:
    """``ORD-YYYYMMDD-XXXXXXXX`` with a random upper-case hex suffix."""
    now = now or datetime.datetime.now(datetime.UTC)
    return f"ORD-{now:%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


# ── Users ────────────────────────────────────────────────────────────────


class UserCreate(_Input):
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password_hash: str = Field(min_length=1)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: UserRole = UserRole.CUSTOMER
    is_active: bool = True


class UserUpdate(PartialUpdate, _Input):
    email: str | None = Field(default=None, min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password_hash: str | None = Field(default=None, min_length=1)
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    role: UserRole | None = None
    is_active: bool | None = None


# ── Catalog ──────────────────────────────────────────────────────────────


class CategoryCreate(_Input):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    sort_order: int = 0
    is_active: bool = True
    metadata: dict[str, Any] | None = None


class CategoryUpdate(PartialUpdate, _Input):
    nullable = frozenset({"description", "metadata"})

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    sort_order: int | None = None
    is_active: bool | None = None
    metadata: dict[str, Any] | None = None


class ProductCreate(_Input):
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    price: Money = money_field()
    stock: int = Field(default=0, ge=0)
    images: list[str] = Field(default_factory=list)
    category_id: int | None = None
    is_available: bool = True
    metadata: dict[str, Any] | None = None


class ProductUpdate(PartialUpdate, _Input):
    nullable = frozenset({"category_id", "metadata"})

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    price: Money | None = money_field(None)
    stock: int | None = Field(default=None, ge=0)
    images: list[str] | None = None
    category_id: int | None = None
    is_available: bool | None = None
    metadata: dict[str, Any] | None = None


# ── Orders ───────────────────────────────────────────────────────────────


class OrderCreate(_Input):
    """New order. ``total_amount`` may be omitted; when sent it must agree."""

    user_id: int
    order_number: str | None = Field(default=None, min_length=1, max_length=50)
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    subtotal: Money = money_field()
    tax_amount: Money = money_field(Decimal("0"))
    shipping_amount: Money = money_field(Decimal("0"))
    discount_amount: Money = money_field(Decimal("0"))
    total_amount: Money | None = money_field(None)
    shipping_address: dict[str, Any] | None = None
    billing_address: dict[str, Any] | None = None
    payment_method: str | None = Field(default=None, max_length=50)
    payment_metadata: dict[str, Any] | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _check_total(self) -> OrderCreate:
        derived = order_total(
            self.subtotal, self.tax_amount, self.shipping_amount, self.discount_amount
        )
        if derived < 0:
            raise ValueError("discount_amount exceeds the order amount")
        if self.total_amount is not None and self.total_amount != derived:
            raise ValueError(
                f"total_amount {self.total_amount} does not equal "
                f"subtotal + tax_amount + shipping_amount - discount_amount ({derived})"
            )
        self.total_amount = derived
        return self


class OrderUpdate(PartialUpdate, _Input):
    """Partial order change. Any component change recomputes the total."""

    nullable = frozenset(
        {
            "shipping_address",
            "billing_address",
            "payment_method",
            "payment_metadata",
            "notes",
            "shipped_at",
            "delivered_at",
        }
    )

    status: OrderStatus | None = None
    payment_status: PaymentStatus | None = None
    subtotal: Money | None = money_field(None)
    tax_amount: Money | None = money_field(None)
    shipping_amount: Money | None = money_field(None)
    discount_amount: Money | None = money_field(None)
    total_amount: Money | None = money_field(None)
    shipping_address: dict[str, Any] | None = None
    billing_address: dict[str, Any] | None = None
    payment_method: str | None = Field(default=None, max_length=50)
    payment_metadata: dict[str, Any] | None = None
    notes: str | None = None
    shipped_at: datetime.datetime | None = None
    delivered_at: datetime.datetime | None = None


AMOUNT_FIELDS = ("subtotal", "tax_amount", "shipping_amount", "discount_amount")


class OrderItemCreate(_Input):
    """New order line. ``unit_price`` defaults to the product's current price."""

    order_id: int
    product_id: int
    quantity: int = Field(gt=0)
    unit_price: Money | None = money_field(None)
    total_price: Money | None = money_field(None)
    product_snapshot: dict[str, Any] | None = None


class OrderItemUpdate(PartialUpdate, _Input):
    nullable = frozenset({"product_snapshot"})

    quantity: int | None = Field(default=None, gt=0)
    unit_price: Money | None = money_field(None)
    product_snapshot: dict[str, Any] | None = None


__all__ = [
    "UserCreate",
    "UserUpdate",
    "CategoryCreate",
    "CategoryUpdate",
    "ProductCreate",
    "ProductUpdate",
    "OrderCreate",
    "OrderUpdate",
    "OrderItemCreate",
    "OrderItemUpdate",
    "PartialUpdate",
    "AMOUNT_FIELDS",
    "order_total",
    "generate_order_number",
]
