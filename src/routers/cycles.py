"""Cycle endpoints: reconstructed cycles, analytics, and predictions."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query

from src.dependencies import CurrentUser, Pipeline
from src.models.cycles import (
    CycleAnalyticsRead,
    CycleRead,
    PredictionRead,
    PredictionRequest,
    QuickEstimateRead,
)

router = APIRouter(prefix="/cycles", tags=["cycles"])


@router.get("", response_model=list[CycleRead])
async def list_cycles(
    user: CurrentUser,
    pipeline: Pipeline,
    limit: int | None = Query(default=None, ge=1, le=120),
) -> Any:
    """Stored cycles, most recent first."""
    return await pipeline.store.list_cycles(user.app_user_id, limit=limit)


@router.post("/recompute", response_model=list[CycleRead])
async def recompute_cycles(user: CurrentUser, pipeline: Pipeline) -> Any:
    """Rebuild cycles and profile averages from the full period log set."""
    result = await pipeline.recompute(user.app_user_id)
    return list(reversed(result.cycles))


@router.get("/analytics", response_model=CycleAnalyticsRead)
async def get_analytics(user: CurrentUser, pipeline: Pipeline) -> Any:
    return await pipeline.analytics(user.app_user_id)


@router.post("/predictions", response_model=list[PredictionRead])
async def generate_predictions(
    user: CurrentUser, pipeline: Pipeline, body: PredictionRequest | None = None
) -> Any:
    count = body.count if body else None
    return await pipeline.generate_predictions(user.app_user_id, count=count)


@router.get("/estimate", response_model=QuickEstimateRead)
async def quick_estimate(
    user: CurrentUser,
    pipeline: Pipeline,
    count: int = Query(default=3, ge=1, le=12),
) -> Any:
    """Profile-only estimates, identical to what clients compute locally."""
    return await pipeline.quick_estimate(user.app_user_id, count=count)
