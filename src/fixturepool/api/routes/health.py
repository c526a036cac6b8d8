"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter

from fixturepool.api.dependencies import PoolManagerDep
from fixturepool.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(manager: PoolManagerDep) -> dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        dict with status, version and the active environment.
    """
    settings = get_settings()
    return {
        "status": "ok",
        "version": settings.app_version,
        "environment": manager.environment,
    }
