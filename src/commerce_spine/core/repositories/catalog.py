"""Catalog repositories - ``categories`` and ``app_products``.

Categories read with their products and are listed by ``sort_order`` then
``name``. Products read with their category.
"""

from __future__ import annotations

from typing import Any

from commerce_spine.core.orm.tables import CategoryTable, ProductTable
from commerce_spine.core.relations import CATEGORY_LADDER, PRODUCT_LADDER

from .base import RelationalRepository


class CategoryRepository(RelationalRepository[CategoryTable]):
    model = CategoryTable
    entity = "category"
    ladder = CATEGORY_LADDER

    def order_by(self) -> tuple[Any, ...]:
        return (CategoryTable.sort_order, CategoryTable.name)


class ProductRepository(RelationalRepository[ProductTable]):
    model = ProductTable
    entity = "product"
    ladder = PRODUCT_LADDER

    def find_by_category(self, category_id: int) -> list[dict[str, Any]]:
        return self.find_all(category_id=category_id)
