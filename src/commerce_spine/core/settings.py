"""Environment-driven settings for commerce-spine.

``Settings`` is read once at startup (``COMMERCE_`` prefix, ``.env``
support) and converted into explicit :class:`RelationalConfig` /
:class:`DocumentConfig` objects that are handed to the store adapters.
Nothing below the facade reads the environment.

Relational connection can be given either as a single URL::

    COMMERCE_DATABASE_URL=postgresql://shop:secret@db:5432/shop

or as parts (``COMMERCE_DB_HOST``, ``COMMERCE_DB_PORT``, ``COMMERCE_DB_USER``,
``COMMERCE_DB_PASSWORD``, ``COMMERCE_DB_NAME``). The URL wins when both are set.

Examples:
    >>> settings = Settings(database_url="sqlite:///shop.db", environment="test")
    >>> settings.relational_config().db_type.value
    'sqlite'
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

from commerce_spine.core.adapters.types import DocumentConfig, RelationalConfig, normalize_url

# Tables and enum types left behind by earlier schema generations. Only hard
# reset touches them.
DEFAULT_LEGACY_TABLES = ["products", "discount_categories", "discounts", "migrations"]
DEFAULT_LEGACY_ENUM_TYPES = [
    "app_users_role_enum",
    "users_role_enum",
    "orders_status_enum",
    "orders_paymentstatus_enum",
    "orders_payment_status_enum",
]


class Settings(BaseSettings):
    """Process-wide configuration.

    Fields
    ──────
    environment      : development / test / production
    database_url     : Full relational URL (overrides the db_* parts)
    db_pool_size     : Maximum pooled relational connections
    db_pool_timeout  : Seconds a caller waits for a pooled connection
    db_idle_timeout  : Seconds before an idle connection is recycled
    db_ssl_mode      : libpq sslmode for PostgreSQL
    mongo_uri        : MongoDB connection string
    api_key          : Operator key for the admin API (None disables the check)
    """

    model_config = SettingsConfigDict(
        env_prefix="COMMERCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Runtime ──────────────────────────────────────────────────
    environment: str = "development"
    service_name: str = "commerce-spine"
    log_level: str = "INFO"
    log_format: str = "auto"  # auto, json, console

    # ── Relational store ─────────────────────────────────────────
    database_url: str | None = None
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "postgres"
    db_password: str = ""
    db_name: str = "commerce"
    db_pool_size: int = Field(default=10, ge=1)
    db_pool_timeout: float = Field(default=5.0, gt=0)
    db_idle_timeout: float = Field(default=30.0, gt=0)
    db_connect_timeout: int = Field(default=5, ge=1)
    db_ssl_mode: str = "prefer"
    db_echo: bool = False

    # ── Document store ───────────────────────────────────────────
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_database: str = "commerce"
    mongo_timeout_ms: int = Field(default=5000, ge=1)
    mongo_schema_validation: bool = True
    log_retention_days: int = Field(default=90, ge=1)

    # ── Lifecycle ────────────────────────────────────────────────
    legacy_tables: list[str] = Field(default_factory=lambda: list(DEFAULT_LEGACY_TABLES))
    legacy_enum_types: list[str] = Field(default_factory=lambda: list(DEFAULT_LEGACY_ENUM_TYPES))

    # ── API ──────────────────────────────────────────────────────
    api_key: str | None = None

    @field_validator("environment")
    @classmethod
    def _lower_environment(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def json_logs(self) -> bool | None:
        if self.log_format == "auto":
            return None
        return self.log_format == "json"

    def relational_url(self) -> str:
        """Resolve the relational URL from ``database_url`` or the parts."""
        if self.database_url:
            return normalize_url(self.database_url)
        url = URL.create(
            "postgresql+psycopg",
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)

    def relational_config(self) -> RelationalConfig:
        return RelationalConfig(
            url=self.relational_url(),
            pool_size=self.db_pool_size,
            pool_timeout=self.db_pool_timeout,
            idle_timeout=self.db_idle_timeout,
            connect_timeout=self.db_connect_timeout,
            ssl_mode=self.db_ssl_mode,
            echo=self.db_echo,
        )

    def document_config(self) -> DocumentConfig:
        return DocumentConfig(
            uri=self.mongo_uri,
            database=self.mongo_database,
            timeout_ms=self.mongo_timeout_ms,
            schema_validation=self.mongo_schema_validation,
            log_retention_days=self.log_retention_days,
        )


__all__ = ["Settings", "DEFAULT_LEGACY_TABLES", "DEFAULT_LEGACY_ENUM_TYPES"]
