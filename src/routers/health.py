"""Health check endpoint — public, no auth required."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from src.config import get_settings
from src.cycles.config_loader import get_cycle_config
from src.services.supabase import StorageUnavailableError, fetchval

router = APIRouter(tags=["system"])
logger = logging.getLogger("bloom.health")


@router.get("/health")
async def health_check() -> dict:
    """Liveness probe. Returns 200 if the API process is up.

    Also performs a lightweight DB connectivity check and reports the
    cycle engine's algorithm version.
    """
    settings = get_settings()
    db_ok = False
    try:
        await fetchval("SELECT 1")
        db_ok = True
    except StorageUnavailableError as exc:
        logger.warning("Health check DB probe failed: %s", exc)

    return {
        "status": "healthy" if db_ok else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected" if db_ok else "unreachable",
        "algorithm_version": get_cycle_config().prediction.algorithm_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
