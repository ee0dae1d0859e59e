"""ORM table definitions for the relational store.

Five tables, declared parent-first::

    app_users ─┐
               └─< orders ─< order_items >─ app_products >─ categories

* ``orders.user_id``          → ``app_users.id``     ON DELETE CASCADE
* ``order_items.order_id``    → ``orders.id``        ON DELETE CASCADE
* ``order_items.product_id``  → ``app_products.id``  ON DELETE CASCADE
* ``app_products.category_id`` → ``categories.id``   ON DELETE SET NULL

Status columns use native PostgreSQL enum types (``user_role``,
``order_status``, ``payment_status``); on SQLite they degrade to VARCHAR.
``sqlite_autoincrement`` keeps SQLite identities in ``sqlite_sequence`` so
soft reset can rewind them the same way PostgreSQL sequences are restarted.
"""

from __future__ import annotations

import datetime
import decimal

from sqlalchemy import JSON, CheckConstraint, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from commerce_spine.core.enums import OrderStatus, PaymentStatus, UserRole
from commerce_spine.core.orm.base import CommerceBase, TimestampMixin


def _values(enum_cls: type) -> list[str]:
    return [member.value for member in enum_cls]


user_role_type = Enum(UserRole, name="user_role", values_callable=_values)
order_status_type = Enum(OrderStatus, name="order_status", values_callable=_values)
payment_status_type = Enum(PaymentStatus, name="payment_status", values_callable=_values)

ENUM_TYPES = (user_role_type, order_status_type, payment_status_type)

_AUTOINCREMENT = {"sqlite_autoincrement": True}


# ── Users ────────────────────────────────────────────────────────────────


class UserTable(TimestampMixin, CommerceBase):
    """Registered shop user."""

    __tablename__ = "app_users"
    __table_args__ = _AUTOINCREMENT

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        user_role_type, nullable=False, default=UserRole.CUSTOMER
    )
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)

    orders: Mapped[list[OrderTable]] = relationship(
        back_populates="user", passive_deletes=True
    )


# ── Catalog ──────────────────────────────────────────────────────────────


class CategoryTable(TimestampMixin, CommerceBase):
    """Product grouping; ordered by ``sort_order`` then ``name``."""

    __tablename__ = "categories"
    __table_args__ = _AUTOINCREMENT

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(nullable=True)
    sort_order: Mapped[int] = mapped_column(nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)
    meta: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)

    products: Mapped[list[ProductTable]] = relationship(
        back_populates="category", passive_deletes=True
    )


class ProductTable(TimestampMixin, CommerceBase):
    """Sellable item. ``category_id`` is optional and nulled when its category goes."""

    __tablename__ = "app_products"
    __table_args__ = _AUTOINCREMENT

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(nullable=False, default="")
    price: Mapped[decimal.Decimal] = mapped_column(nullable=False)
    stock: Mapped[int] = mapped_column(nullable=False, default=0)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    is_available: Mapped[bool] = mapped_column(nullable=False, default=True)
    meta: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)

    category: Mapped[CategoryTable | None] = relationship(back_populates="products")


# ── Orders ───────────────────────────────────────────────────────────────


class OrderTable(TimestampMixin, CommerceBase):
    """Customer order. ``total_amount`` is derived by the repository."""

    __tablename__ = "orders"
    __table_args__ = _AUTOINCREMENT

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("app_users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    order_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        order_status_type, nullable=False, default=OrderStatus.PENDING
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        payment_status_type, nullable=False, default=PaymentStatus.PENDING
    )
    subtotal: Mapped[decimal.Decimal] = mapped_column(nullable=False)
    tax_amount: Mapped[decimal.Decimal] = mapped_column(nullable=False, default=0)
    shipping_amount: Mapped[decimal.Decimal] = mapped_column(nullable=False, default=0)
    discount_amount: Mapped[decimal.Decimal] = mapped_column(nullable=False, default=0)
    total_amount: Mapped[decimal.Decimal] = mapped_column(nullable=False)
    shipping_address: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    billing_address: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    payment_metadata: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    notes: Mapped[str | None] = mapped_column(nullable=True)
    shipped_at: Mapped[datetime.datetime | None] = mapped_column(nullable=True)
    delivered_at: Mapped[datetime.datetime | None] = mapped_column(nullable=True)

    user: Mapped[UserTable] = relationship(back_populates="orders")
    items: Mapped[list[OrderItemTable]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class OrderItemTable(TimestampMixin, CommerceBase):
    """Line of an order. ``total_price`` is ``quantity * unit_price``."""

    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        _AUTOINCREMENT,
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("app_products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(nullable=False)
    unit_price: Mapped[decimal.Decimal] = mapped_column(nullable=False)
    total_price: Mapped[decimal.Decimal] = mapped_column(nullable=False)
    product_snapshot: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    order: Mapped[OrderTable] = relationship(back_populates="items")
    product: Mapped[ProductTable] = relationship()


# Creation order; deletion runs in reverse.
TABLES_IN_DEPENDENCY_ORDER = (
    UserTable.__table__,
    CategoryTable.__table__,
    ProductTable.__table__,
    OrderTable.__table__,
    OrderItemTable.__table__,
)

__all__ = [
    "UserTable",
    "CategoryTable",
    "ProductTable",
    "OrderTable",
    "OrderItemTable",
    "ENUM_TYPES",
    "TABLES_IN_DEPENDENCY_ORDER",
]
