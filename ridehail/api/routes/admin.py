"""
Admin / observability endpoints
===============================

POST /api/v1/admin/cache/reload -- reload the fleet cache from storage
GET  /api/v1/admin/health       -- simple health check
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from ridehail.api.dependencies import get_registry
from ridehail.api.middleware import RATE_LIMIT, limiter
from ridehail.api.schemas import CacheReloadResponse, HealthResponse
from ridehail.domain.entities import StorageFailure
from ridehail.services.vehicle_registry import VehicleRegistry

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/cache/reload",
    response_model=CacheReloadResponse,
    summary="Reload the fleet cache",
    description=(
        "Repairs a cache that drifted from storage, e.g. after a partial "
        "write failure or a change made directly in the database."
    ),
)
@limiter.limit(RATE_LIMIT)
async def reload_cache(
    request: Request,
    registry: VehicleRegistry = Depends(get_registry),
):
    try:
        count = await registry.reload()
    except StorageFailure as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return CacheReloadResponse(vehicles=count)


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
