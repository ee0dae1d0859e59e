"""Enumerations shared by the relational models, document models and schemas."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class LogLevel(str, Enum):
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class LogCategory(str, Enum):
    USER_ACTION = "user_action"
    SYSTEM = "system"
    API_REQUEST = "api_request"
    DATABASE = "database"
    PAYMENT = "payment"
    SECURITY = "security"
    ERROR = "error"


__all__ = ["UserRole", "OrderStatus", "PaymentStatus", "LogLevel", "LogCategory"]
