"""Bloom API — FastAPI application entry point.

Run locally:
    uvicorn src.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config import get_settings
from src.cycles.config_loader import get_cycle_config
from src.middleware.clerk_auth import ClerkAuthMiddleware
from src.routers import alerts, cycles, health, period_logs, profile, symptom_logs
from src.services.supabase import StorageUnavailableError, close_pool, init_pool

# ---------- Logging ----------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("bloom")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(
        "Starting Bloom API v%s [%s]",
        settings.app_version,
        settings.environment,
    )
    # Fail fast on a bad engine config rather than on the first request
    get_cycle_config()
    await init_pool(settings)
    yield
    await close_pool()
    logger.info("Bloom API shut down")


# ---------- Error handlers ----------

async def storage_unavailable_handler(request: Request, exc: StorageUnavailableError) -> JSONResponse:
    logger.error("Storage unavailable while serving %s: %s", request.url.path, exc)
    return JSONResponse(
        {"detail": "Storage unavailable"},
        status_code=503,
        headers={"Retry-After": "5"},
    )


# ---------- App factory ----------

def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Bloom API",
        description=(
            "Cycle tracking backend — period and symptom logs, cycle "
            "reconstruction, weighted period forecasts, and symptom patterns."
        ),
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_exception_handler(StorageUnavailableError, storage_unavailable_handler)

    # ---------- Middleware (order matters, outermost first) ----------

    # Clerk JWT authentication
    app.add_middleware(ClerkAuthMiddleware, settings=settings)

    # CORS must be the innermost middleware so it can handle preflight
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Retry-After"],
    )

    # ---------- Health check (outside v1 prefix, always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    v1_prefix = "/api/v1"

    app.include_router(profile.router, prefix=v1_prefix)
    app.include_router(period_logs.router, prefix=v1_prefix)
    app.include_router(symptom_logs.router, prefix=v1_prefix)
    app.include_router(cycles.router, prefix=v1_prefix)
    app.include_router(alerts.router, prefix=v1_prefix)

    return app


app = create_app()
