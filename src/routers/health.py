"""Health check endpoint — public, no auth required."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from src.dependencies import AppSettings
from src.models.base import utc_now
from src.services.database import ping

router = APIRouter(tags=["system"])
logger = logging.getLogger("cyclecare.health")


@router.get("/health")
async def health_check(request: Request, settings: AppSettings) -> dict:
    """Liveness probe. Returns 200 if the API process is up.

    Also performs a lightweight profile-store connectivity check.
    """
    db_ok = False
    pool = getattr(request.app.state, "db_pool", None)
    if pool is not None:
        try:
            db_ok = await ping(pool)
        except Exception as exc:
            logger.warning("Health check DB probe failed: %s", exc)

    return {
        "status": "healthy" if db_ok else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected" if db_ok else "unreachable",
        "timestamp": utc_now().isoformat(),
    }
