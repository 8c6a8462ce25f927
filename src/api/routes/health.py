"""
Health check endpoints.

Provides endpoints for monitoring application health and status.
"""

from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from catalog.store import get_catalog_store
from config.settings import get_settings


router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Returns:
        Health status with basic info
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "service": "outfit-search-api",
        "environment": settings.environment,
    }


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    """Liveness probe: the process is up."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness_check():
    """
    Readiness probe: the catalog snapshot can be served.

    Returns 503 when the catalog is empty.
    """
    products = get_catalog_store().get()
    if not products:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": "catalog is empty"},
        )
    return {"status": "ready", "products": len(products)}
