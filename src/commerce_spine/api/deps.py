"""
Dependency injection for FastAPI routes.

Provides cached settings, the process-wide facade and the admin role
guard as reusable ``Depends()`` callables.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request

from commerce_spine.core.facade import DataAccessFacade
from commerce_spine.core.settings import Settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings (reads env once per process)."""
    return Settings()


def get_facade(request: Request) -> DataAccessFacade:
    """The facade built at startup and stored on ``app.state``."""
    return request.app.state.facade


def require_admin(x_role: Annotated[str | None, Header()] = None) -> str:
    """Lifecycle routes are restricted to the admin role."""
    if (x_role or "").strip().lower() != "admin":
        raise HTTPException(status_code=403, detail="Admin role required")
    return x_role


SettingsDep = Annotated[Settings, Depends(get_settings)]
FacadeDep = Annotated[DataAccessFacade, Depends(get_facade)]
AdminDep = Annotated[str, Depends(require_admin)]
