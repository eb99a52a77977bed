"""
Health check router for observability.
"""
from fastapi import APIRouter, Depends

from pluggable_feed.config import Settings, get_settings
from pluggable_feed.services.dispatcher import Algorithm

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health Check")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/ready", summary="Readiness Check")
async def readiness_check(settings: Settings = Depends(get_settings)) -> dict:
    """
    Readiness check for Kubernetes.
    Reports the configuration that shapes feed behavior.
    """
    return {
        "status": "ready",
        "version": settings.APP_VERSION,
        "strategies": [algorithm.value for algorithm in Algorithm],
        "preference_parse_mode": settings.PREFERENCE_PARSE_MODE,
        "third_party_timeout_sec": settings.THIRD_PARTY_TIMEOUT_SEC,
    }
