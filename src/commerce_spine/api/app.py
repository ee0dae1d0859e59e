"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers and lifespan
events into a single ``FastAPI`` instance. The facade is created once at
startup and closed on shutdown; tests pass their own.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException

from commerce_spine import __version__
from commerce_spine.api.deps import get_settings
from commerce_spine.api.middleware import (
    AuthMiddleware,
    data_access_error_handler,
    http_exception_handler,
    unhandled_exception_handler,
)
from commerce_spine.api.routers import admin_router, health_router
from commerce_spine.core.errors import DataAccessError
from commerce_spine.core.facade import DataAccessFacade
from commerce_spine.core.logging import configure_logging, get_logger
from commerce_spine.core.settings import Settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup / shutdown hooks."""
    settings: Settings = app.state.settings
    configure_logging(level=settings.log_level, json_format=settings.json_logs, service=settings.service_name)
    log = get_logger("commerce_spine.api")

    owns_facade = getattr(app.state, "facade", None) is None
    if owns_facade:
        app.state.facade = DataAccessFacade.from_settings(settings)
    log.info("api_starting", version=app.version, environment=settings.environment)

    yield

    if owns_facade:
        app.state.facade.close()
    log.info("api_stopped")


def create_app(
    *,
    settings: Settings | None = None,
    facade: DataAccessFacade | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : Settings | None
        Override settings (useful for testing). When ``None`` the cached
        singleton from :func:`get_settings` is used.
    facade : DataAccessFacade | None
        Pre-built facade. When ``None`` one is built from *settings* at
        startup and closed at shutdown.
    """
    settings = settings or get_settings()

    app = FastAPI(title=settings.service_name, version=__version__, lifespan=lifespan)

    app.state.settings = settings
    app.state.facade = facade
    app.dependency_overrides[get_settings] = lambda: settings

    # ── Middleware ───────────────────────────────────────────────────
    app.add_middleware(AuthMiddleware, api_key=settings.api_key)

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(DataAccessError, data_access_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    app.include_router(health_router)
    app.include_router(admin_router)

    return app
