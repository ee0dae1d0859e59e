"""Relational store adapter (SQLAlchemy 2.0).

Owns the engine, its bounded connection pool and the session factory.
PostgreSQL runs through psycopg 3 behind a ``QueuePool`` whose size is the
hard connection limit (``max_overflow=0``); callers queue for at most
``pool_timeout`` seconds before SQLAlchemy raises its pool ``TimeoutError``,
which the classifier turns into a retryable ``StoreTimeoutError``.

SQLite (development and tests) gets foreign keys switched on per
connection, since it ships with them disabled.

Examples:
    >>> adapter = RelationalAdapter(RelationalConfig(url="sqlite:///shop.db"))
    >>> with adapter.session_scope() as session:
    ...     session.execute(text("SELECT 1")).scalar()
    1
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from commerce_spine.core.logging import get_logger

from .base import StoreAdapter
from .types import DatabaseType, RelationalConfig, normalize_url

logger = get_logger(__name__)


def create_commerce_engine(config: RelationalConfig) -> Engine:
    """Create a SQLAlchemy engine from *config*.

    Pool settings apply to PostgreSQL only. ``idle_timeout`` maps onto
    ``pool_recycle`` and ``pool_pre_ping`` discards connections the server
    has already dropped.
    """
    url = normalize_url(config.url)

    if config.db_type is DatabaseType.SQLITE:
        engine = create_engine(
            url,
            echo=config.echo,
            connect_args={"check_same_thread": False, **config.options},
        )

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    connect_args: dict[str, Any] = {
        "connect_timeout": config.connect_timeout,
        "sslmode": config.ssl_mode,
    }
    connect_args.update(config.options)

    return create_engine(
        url,
        echo=config.echo,
        pool_size=config.pool_size,
        max_overflow=0,
        pool_timeout=config.pool_timeout,
        pool_recycle=int(config.idle_timeout),
        pool_pre_ping=config.pre_ping,
        connect_args=connect_args,
    )


class CommerceSession(Session):
    """Session with ``expire_on_commit=False``.

    Entities are serialized after commit; expiring them would trigger
    reloads against a session that is already closed.
    """

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


class RelationalAdapter(StoreAdapter):
    """
    Engine + session factory for the relational store.

    An ``engine`` may be injected (tests share one SQLite file engine);
    otherwise it is built lazily from *config* on first use.
    """

    store_name = "relational"

    def __init__(
        self,
        config: RelationalConfig | None = None,
        *,
        engine: Engine | None = None,
    ):
        super().__init__()
        self._config = config or RelationalConfig()
        self._engine: Engine | None = engine
        self._sessions: sessionmaker[CommerceSession] | None = None
        if engine is not None:
            self._bind(engine)

    def _bind(self, engine: Engine) -> None:
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, class_=CommerceSession)
        self._connected = True

    # --- lifecycle ---

    def connect(self) -> None:
        if self._engine is None:
            self._bind(create_commerce_engine(self._config))
            logger.info(
                "relational_engine_created",
                dialect=self._engine.dialect.name,
                pool_size=self._config.pool_size,
            )

    def disconnect(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._sessions = None
            self._connected = False

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("relational_ping_failed", error=str(e))
            return False

    # --- properties ---

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self.connect()
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    @property
    def config(self) -> RelationalConfig:
        return self._config

    # --- sessions / connections ---

    def session(self) -> CommerceSession:
        """Open a new session; the caller owns closing it."""
        if self._sessions is None:
            self.connect()
        return self._sessions()

    @contextmanager
    def session_scope(self) -> Iterator[CommerceSession]:
        """Session that commits on success and rolls back on any error."""
        session = self.session()
        try:
            yield session
            session.commit()
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def autocommit(self) -> Iterator[Connection]:
        """Connection where every statement commits on its own (DDL, resets)."""
        with self.engine.connect() as conn:
            yield conn.execution_options(isolation_level="AUTOCOMMIT")

    def table_names(self) -> set[str]:
        """Tables currently present (fresh inspection, never cached)."""
        return set(inspect(self.engine).get_table_names())


__all__ = [
    "CommerceSession",
    "RelationalAdapter",
    "create_commerce_engine",
]
