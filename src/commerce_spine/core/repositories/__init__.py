"""Entity repositories for both stores.

Relational (SQLAlchemy, reads via the relation-fallback resolver):
    UserRepository, CategoryRepository, ProductRepository,
    OrderRepository, OrderItemRepository

Document (PyMongo):
    ReviewRepository, LogRepository
"""

from .base import RelationalRepository
from .catalog import CategoryRepository, ProductRepository
from .documents import DocumentRepository, LogRepository, ReviewRepository, object_id
from .orders import OrderItemRepository, OrderRepository
from .users import UserRepository

__all__ = [
    "RelationalRepository",
    "DocumentRepository",
    "UserRepository",
    "CategoryRepository",
    "ProductRepository",
    "OrderRepository",
    "OrderItemRepository",
    "ReviewRepository",
    "LogRepository",
    "object_id",
]
