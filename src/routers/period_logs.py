"""Period log endpoints.  Every mutation triggers a full cycle recompute."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from src.dependencies import CurrentUser, Pipeline
from src.models.cycles import PeriodLogCreate, PeriodLogRead
from src.services.supabase import execute, fetch, fetchrow

router = APIRouter(prefix="/period-logs", tags=["period logs"])


@router.get("", response_model=list[PeriodLogRead])
async def list_period_logs(
    user: CurrentUser,
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
) -> Any:
    conditions = ["user_id = $1"]
    params: list[Any] = [user.app_user_id]
    idx = 2

    if start_date:
        conditions.append(f"date >= ${idx}")
        params.append(start_date)
        idx += 1
    if end_date:
        conditions.append(f"date <= ${idx}")
        params.append(end_date)
        idx += 1

    where = " AND ".join(conditions)
    rows = await fetch(
        f"SELECT * FROM period_logs WHERE {where} ORDER BY date DESC",
        *params,
        user_id=user.app_user_id,
    )
    return [dict(r) for r in rows]


@router.post("", response_model=PeriodLogRead, status_code=201)
async def add_period_log(user: CurrentUser, body: PeriodLogCreate, pipeline: Pipeline) -> Any:
    row = await fetchrow(
        """
        INSERT INTO period_logs (log_id, user_id, date, flow, notes)
        VALUES (gen_random_uuid(), $1, $2, $3, $4)
        RETURNING *
        """,
        user.app_user_id, body.date, body.flow.value, body.notes,
        user_id=user.app_user_id,
    )
    await pipeline.on_period_logs_changed(user.app_user_id)
    return dict(row)


@router.delete("/{log_id}", status_code=204)
async def remove_period_log(log_id: uuid.UUID, user: CurrentUser, pipeline: Pipeline) -> None:
    result = await execute(
        "DELETE FROM period_logs WHERE log_id = $1 AND user_id = $2",
        log_id, user.app_user_id,
        user_id=user.app_user_id,
    )
    if result == "DELETE 0":
        raise HTTPException(status_code=404, detail="Period log not found")
    await pipeline.on_period_logs_changed(user.app_user_id)
