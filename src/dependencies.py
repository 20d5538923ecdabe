"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request

from src.config import Settings, get_settings
from src.cycles.engine import CycleEngine
from src.cycles.pipeline import RecomputePipeline
from src.services.cycle_store import PostgresCycleStore


@dataclass(frozen=True)
class AuthContext:
    """Authenticated user context extracted from the Clerk JWT."""

    user_id: str  # Clerk user ID (e.g. "user_2x...")
    app_user_id: uuid.UUID | None = None  # Our internal UUID, set via session token claims
    email: str | None = None
    session_id: str | None = None


async def get_current_user(request: Request) -> AuthContext:
    """Extract the authenticated user from the request state.

    The Clerk auth middleware sets ``request.state.auth`` before routes run.
    A token without an internal user id cannot own any cycle data.
    """
    auth: AuthContext | None = getattr(request.state, "auth", None)
    if auth is None or auth.app_user_id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return auth


@lru_cache
def get_cycle_pipeline() -> RecomputePipeline:
    """Process-wide pipeline; its analytics cache and per-user locks are shared."""
    return RecomputePipeline(store=PostgresCycleStore(), engine=CycleEngine())


# Annotated shortcuts for route signatures
CurrentUser = Annotated[AuthContext, Depends(get_current_user)]
AppSettings = Annotated[Settings, Depends(get_settings)]
Pipeline = Annotated[RecomputePipeline, Depends(get_cycle_pipeline)]
