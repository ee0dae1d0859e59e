"""
Admin router - schema lifecycle operations and sample seeding.

All four operations are refused when ``COMMERCE_ENVIRONMENT`` is
``production``; the refusal is reported in the body as
``{"success": false, ...}`` with status 403.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from commerce_spine.api.deps import AdminDep, FacadeDep, SettingsDep
from commerce_spine.api.schemas import LifecycleResponse
from commerce_spine.core.lifecycle import LifecycleResult
from commerce_spine.core.logging import get_logger
from commerce_spine.core.settings import Settings

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _run(
    settings: Settings, label: str, operation: Callable[[], LifecycleResult]
) -> LifecycleResponse | JSONResponse:
    if settings.is_production:
        logger.warning("lifecycle_refused", operation=label, environment=settings.environment)
        body = LifecycleResponse(success=False, message=f"{label} not allowed in production")
        return JSONResponse(status_code=403, content=body.model_dump(exclude_none=True))
    result = operation()
    return LifecycleResponse(**result.to_dict())


@router.post("/soft-reset", response_model=LifecycleResponse, response_model_exclude_none=True)
def soft_reset(facade: FacadeDep, settings: SettingsDep, _role: AdminDep):
    """Remove all rows and documents, keep the schema."""
    return _run(settings, "Soft reset", facade.soft_reset)


@router.post("/hard-reset", response_model=LifecycleResponse, response_model_exclude_none=True)
def hard_reset(facade: FacadeDep, settings: SettingsDep, _role: AdminDep):
    """Drop every table, sequence, enum type and collection."""
    return _run(settings, "Hard reset", facade.hard_reset)


@router.post("/recreate-schema", response_model=LifecycleResponse, response_model_exclude_none=True)
def recreate_schema(facade: FacadeDep, settings: SettingsDep, _role: AdminDep):
    """Create whatever part of the schema is missing."""
    return _run(settings, "Schema recreation", facade.recreate_schema)


@router.post("/seed", response_model=LifecycleResponse, response_model_exclude_none=True)
def seed(facade: FacadeDep, settings: SettingsDep, _role: AdminDep):
    """Fill every empty entity family with sample data."""
    return _run(settings, "Seeding", facade.seed)
