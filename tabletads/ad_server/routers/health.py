"""
Health check endpoints.
"""

from fastapi import APIRouter

from tabletads.common.config import get_settings
from tabletads.common.database import db
from tabletads.schemas.response import HealthResponse

router = APIRouter()


async def _store_healthy() -> bool:
    settings = get_settings()
    if settings.store.backend == "postgres":
        return await db.health_check()
    # Supabase clients are built per request with the caller's token;
    # the best a health check can do without one is confirm the project is configured.
    return bool(settings.supabase.url and settings.supabase.anon_key)


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns service status and store health.
    """
    settings = get_settings()
    store_healthy = await _store_healthy()

    return HealthResponse(
        status="healthy" if store_healthy else "degraded",
        version=settings.app_version,
        backend=settings.store.backend,
        store=store_healthy,
    )


@router.get("/ping")
async def ping() -> dict:
    """Simple ping endpoint."""
    return {"pong": True}


@router.get("/ready")
async def readiness_check() -> dict:
    """Readiness check for Kubernetes."""
    if not await _store_healthy():
        return {"ready": False, "reason": "Store not ready"}

    return {"ready": True}


@router.get("/live")
async def liveness_check() -> dict:
    """Liveness check for Kubernetes."""
    return {"alive": True}
