"""
Health router - store reachability and entity counts.
"""

from __future__ import annotations

from fastapi import APIRouter

from commerce_spine.api.deps import FacadeDep
from commerce_spine.api.schemas import HealthResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/db", response_model=HealthResponse)
def database_health(facade: FacadeDep) -> HealthResponse:
    """Probe both stores.

    ``degraded`` means both stores answer but some entity could not be
    counted; ``unhealthy`` means at least one store is unreachable.
    """
    report = facade.check_connections()
    if not (report["relational"] and report["document"]):
        status = "unhealthy"
    elif report["errors"]:
        status = "degraded"
    else:
        status = "healthy"
    return HealthResponse(status=status, **report)
