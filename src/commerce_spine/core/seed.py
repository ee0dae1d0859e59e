"""
Sample data seeding for development and demo environments.

``seed_sample_data(facade)`` writes a small storefront through the facade
surfaces, parents before children::

    users → categories → products → orders → order items → reviews → logs

Each entity family is seeded only while it is empty; a family that already
holds rows is skipped and its existing rows are reused as parents for the
families after it. Re-running a completed seed therefore changes nothing.

Seeded accounts carry a locked password hash (``!``) and cannot sign in
until a real hash is set.
"""

from __future__ import annotations

import datetime
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from commerce_spine.core.enums import LogCategory, LogLevel, UserRole
from commerce_spine.core.errors import DataAccessError
from commerce_spine.core.lifecycle import LifecycleResult, fail
from commerce_spine.core.logging import get_logger

if TYPE_CHECKING:
    from commerce_spine.core.facade import DataAccessFacade, EntitySurface

logger = get_logger(__name__)

LOCKED_PASSWORD_HASH = "!"

SEED_USERS: list[dict[str, Any]] = [
    {"email": "admin@commerce.test", "first_name": "Store", "last_name": "Admin", "role": UserRole.ADMIN},
    {"email": "jane.doe@commerce.test", "first_name": "Jane", "last_name": "Doe"},
    {"email": "john.smith@commerce.test", "first_name": "John", "last_name": "Smith"},
]

SEED_CATEGORIES: list[dict[str, Any]] = [
    {"name": "Electronics", "description": "Electronic devices and gadgets", "sort_order": 1},
    {"name": "Clothing", "description": "Fashion and apparel", "sort_order": 2},
    {"name": "Books", "description": "Books and educational materials", "sort_order": 3},
    {"name": "Home & Garden", "description": "Home improvement and garden supplies", "sort_order": 4},
]

# "category" indexes SEED_CATEGORIES
SEED_PRODUCTS: list[dict[str, Any]] = [
    {
        "name": "Gaming Laptop Pro",
        "description": "High-performance gaming laptop with a dedicated GPU",
        "price": "2499.99",
        "stock": 25,
        "images": ["laptop-front.jpg", "laptop-side.jpg"],
        "category": 0,
        "metadata": {"brand": "TechPro", "warranty": "2 years", "featured": True},
    },
    {
        "name": "Premium Wireless Headphones",
        "description": "Noise-cancelling over-ear headphones",
        "price": "299.99",
        "stock": 50,
        "images": ["headphones.jpg"],
        "category": 0,
        "metadata": {"brand": "AudioMax", "battery_hours": 30},
    },
    {
        "name": "Designer Winter Jacket",
        "description": "Waterproof insulated jacket",
        "price": "189.99",
        "stock": 30,
        "images": ["jacket.jpg"],
        "category": 1,
        "metadata": {"sizes": ["S", "M", "L", "XL"]},
    },
    {
        "name": "Programming Complete Guide",
        "description": "From first program to production systems",
        "price": "49.99",
        "stock": 100,
        "images": ["guide-cover.jpg"],
        "category": 2,
        "metadata": {"pages": 850, "format": "paperback"},
    },
]

# "customer" indexes the customer accounts; "products" indexes SEED_PRODUCTS
SEED_ORDERS: list[dict[str, Any]] = [
    {
        "order_number": "ORD-2025-001",
        "customer": 0,
        "products": [0, 1],
        "status": "delivered",
        "payment_status": "completed",
        "payment_method": "credit_card",
        "subtotal": "2799.98",
        "tax_amount": "224.00",
        "shipping_amount": "0",
        "shipping_address": {"street": "12 Market St", "city": "Springfield", "zip": "12345", "country": "US"},
    },
    {
        "order_number": "ORD-2025-002",
        "customer": 1,
        "products": [2],
        "status": "shipped",
        "payment_status": "completed",
        "payment_method": "paypal",
        "subtotal": "189.99",
        "tax_amount": "15.20",
        "shipping_amount": "9.99",
        "shipping_address": {"street": "48 Oak Ave", "city": "Riverton", "zip": "67890", "country": "US"},
    },
    {
        "order_number": "ORD-2025-003",
        "customer": 0,
        "products": [3],
        "status": "pending",
        "payment_status": "pending",
        "payment_method": "bank_transfer",
        "subtotal": "49.99",
        "tax_amount": "4.00",
        "shipping_amount": "5.99",
        "shipping_address": {"street": "12 Market St", "city": "Springfield", "zip": "12345", "country": "US"},
    },
    {
        "order_number": "ORD-2025-004",
        "customer": 1,
        "products": [1],
        "status": "processing",
        "payment_status": "completed",
        "payment_method": "credit_card",
        "subtotal": "299.99",
        "tax_amount": "24.00",
        "shipping_amount": "0",
        "discount_amount": "25.00",
        "shipping_address": {"street": "48 Oak Ave", "city": "Riverton", "zip": "67890", "country": "US"},
    },
]

# "product" indexes SEED_PRODUCTS; "customer" indexes the customer accounts
SEED_REVIEWS: list[dict[str, Any]] = [
    {
        "product": 0,
        "customer": 0,
        "rating": 5,
        "title": "Outstanding Gaming Performance",
        "comment": "Runs everything on high settings without breaking a sweat.",
    },
    {
        "product": 1,
        "customer": 1,
        "rating": 4,
        "title": "Great Sound Quality",
        "comment": "Excellent noise cancelling; the headband gets warm after a few hours.",
    },
    {
        "product": 2,
        "customer": 1,
        "rating": 5,
        "title": "Perfect for Cold Weather",
        "comment": "Kept me warm all winter and sheds rain easily.",
    },
    {
        "product": 3,
        "customer": 0,
        "rating": 4,
        "title": "Comprehensive Programming Guide",
        "comment": "Covers a lot of ground; some chapters could use more examples.",
        "is_verified": False,
    },
]

SEED_LOGS: list[dict[str, Any]] = [
    {
        "level": LogLevel.INFO,
        "category": LogCategory.SYSTEM,
        "message": "Database seed data initialization completed",
    },
    {
        "level": LogLevel.INFO,
        "category": LogCategory.USER_ACTION,
        "message": "User authentication successful",
        "customer": 0,
        "endpoint": "/auth/login",
        "method": "POST",
        "status_code": 200,
    },
    {
        "level": LogLevel.WARN,
        "category": LogCategory.API_REQUEST,
        "message": "High number of API requests detected",
        "endpoint": "/products",
        "method": "GET",
        "metadata": {"requests_per_minute": 450},
    },
    {
        "level": LogLevel.ERROR,
        "category": LogCategory.PAYMENT,
        "message": "Failed payment processing attempt",
        "customer": 1,
        "error_details": {"code": "card_declined", "gateway": "stripe"},
    },
]


class SampleDataSeeder:
    """Populates empty entity families with the sample storefront."""

    def __init__(self, facade: DataAccessFacade):
        self._facade = facade
        self._result = LifecycleResult("seed")

    def run(self) -> LifecycleResult:
        result = self._result
        try:
            users = self._seed(self._facade.users, self._users)
            customers = [u for u in users if u["role"] == UserRole.CUSTOMER] or users
            categories = self._seed(self._facade.categories, self._categories)
            products = self._seed(self._facade.products, lambda: self._products(categories))
            orders = self._seed(self._facade.orders, lambda: self._orders(customers))
            self._seed(self._facade.order_items, lambda: self._order_items(orders, products))
            self._seed(self._facade.reviews, lambda: self._reviews(products, customers))
            self._seed(self._facade.logs, lambda: self._logs(customers))
        except DataAccessError as e:
            return fail(result, e)

        created = ", ".join(f"{entity}={n}" for entity, n in result.counts.items()) or "nothing"
        result.message = f"Seed complete: created {created}; {len(result.skipped)} populated entity(ies) skipped"
        logger.info("seed_completed", **result.counts, skipped=result.skipped)
        return result

    def _seed(self, surface: EntitySurface, build: Callable[[], list[dict[str, Any]]]) -> list[dict[str, Any]]:
        """Create *build()*'s payloads unless *surface* already holds rows."""
        if surface.count() > 0:
            self._result.skipped.append(surface.entity)
            logger.debug("seed_skipped", entity=surface.entity)
            return surface.find_all()

        rows = [surface.create(payload) for payload in build()]
        self._result.completed.append(surface.entity)
        self._result.counts[surface.entity] = len(rows)
        return rows

    # -- payloads --------------------------------------------------------------

    def _users(self) -> list[dict[str, Any]]:
        return [{"password_hash": LOCKED_PASSWORD_HASH, **spec} for spec in SEED_USERS]

    def _categories(self) -> list[dict[str, Any]]:
        return [{**spec, "metadata": {"seeded": True}} for spec in SEED_CATEGORIES]

    def _products(self, categories: list[dict[str, Any]]) -> list[dict[str, Any]]:
        payloads = []
        for spec in SEED_PRODUCTS:
            payload = {k: v for k, v in spec.items() if k != "category"}
            payload["category_id"] = _pick(categories, spec["category"])["id"] if categories else None
            payloads.append(payload)
        return payloads

    def _orders(self, customers: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not customers:
            return []
        return [
            {
                **{k: v for k, v in spec.items() if k not in ("customer", "products")},
                "user_id": _pick(customers, spec["customer"])["id"],
            }
            for spec in SEED_ORDERS
        ]

    def _order_items(self, orders: list[dict[str, Any]], products: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not products:
            return []
        by_number = {o["order_number"]: o for o in orders}
        payloads = []
        for spec in SEED_ORDERS:
            order = by_number.get(spec["order_number"])
            if order is None:
                continue
            for index in spec["products"]:
                product = _pick(products, index)
                payloads.append(
                    {
                        "order_id": order["id"],
                        "product_id": product["id"],
                        "quantity": 1,
                        "product_snapshot": {"name": product["name"], "price": str(product["price"])},
                    }
                )
        return payloads

    def _reviews(self, products: list[dict[str, Any]], customers: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not (products and customers):
            return []
        payloads = []
        for spec in SEED_REVIEWS:
            customer = _pick(customers, spec["customer"])
            payload = {k: v for k, v in spec.items() if k not in ("product", "customer")}
            payload["product_id"] = _pick(products, spec["product"])["id"]
            payload["user_id"] = customer["id"]
            payload["metadata"] = {
                "user_name": f"{customer['first_name']} {customer['last_name']}",
                "user_email": customer["email"],
            }
            payloads.append(payload)
        return payloads

    def _logs(self, customers: list[dict[str, Any]]) -> list[dict[str, Any]]:
        now = datetime.datetime.now(datetime.timezone.utc)
        payloads = []
        for spec in SEED_LOGS:
            payload = {k: v for k, v in spec.items() if k != "customer"}
            if "customer" in spec and customers:
                payload["user_id"] = _pick(customers, spec["customer"])["id"]
            payload["metadata"] = {**payload.get("metadata", {}), "seeded_at": now.isoformat()}
            payloads.append(payload)
        return payloads


def _pick(rows: list[dict[str, Any]], index: int) -> dict[str, Any]:
    # fewer existing parents than sample rows: wrap around
    return rows[index % len(rows)]


def seed_sample_data(facade: DataAccessFacade) -> LifecycleResult:
    """Seed every empty entity family; never raises."""
    return SampleDataSeeder(facade).run()


__all__ = ["SampleDataSeeder", "seed_sample_data"]
