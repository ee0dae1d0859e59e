"""Store configuration types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from commerce_spine.core.errors import ConfigError


class DatabaseType(str, Enum):
    """Supported relational dialects."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


@dataclass
class RelationalConfig:
    """
    Configuration for the relational store.

    ``url`` is a SQLAlchemy URL. Plain ``postgresql://`` URLs are rewritten
    to the psycopg (v3) driver by :func:`normalize_url`.
    """

    url: str = "sqlite:///commerce.db"

    # Connection pool (ignored for SQLite)
    pool_size: int = 10
    pool_timeout: float = 5.0
    idle_timeout: float = 30.0
    pre_ping: bool = True

    # Connection
    connect_timeout: int = 5
    ssl_mode: str = "prefer"  # disable, prefer, require, verify-ca, verify-full

    echo: bool = False

    # Extra driver-specific connect args
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def db_type(self) -> DatabaseType:
        if self.url.startswith("sqlite"):
            return DatabaseType.SQLITE
        if self.url.startswith(("postgresql", "postgres")):
            return DatabaseType.POSTGRESQL
        raise ConfigError(f"Unsupported relational URL scheme: {self.url.split(':', 1)[0]}")


@dataclass
class DocumentConfig:
    """Configuration for the MongoDB document store."""

    uri: str = "mongodb://localhost:27017"
    database: str = "commerce"
    timeout_ms: int = 5000
    schema_validation: bool = True
    log_retention_days: int = 90


def normalize_url(url: str) -> str:
    """Point bare PostgreSQL URLs at the psycopg v3 driver.

    >>> normalize_url("postgres://u:p@db/shop")
    'postgresql+psycopg://u:p@db/shop'
    """
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


__all__ = [
    "DatabaseType",
    "RelationalConfig",
    "DocumentConfig",
    "normalize_url",
]
