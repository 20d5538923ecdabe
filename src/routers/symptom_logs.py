"""Symptom log endpoints.  Mutations invalidate the user's cached analytics."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from src.cycles.symptoms import SYMPTOM_CATEGORIES, is_known_symptom, symptoms_by_category
from src.dependencies import CurrentUser, Pipeline
from src.models.cycles import SymptomLogCreate, SymptomLogRead
from src.services.supabase import execute, fetch, fetchrow

router = APIRouter(prefix="/symptom-logs", tags=["symptom logs"])


@router.get("/catalogue")
async def list_symptom_catalogue() -> dict[str, list[dict[str, str]]]:
    """The fixed symptom taxonomy, grouped by category."""
    return {
        category: [
            {"symptom_id": s.symptom_id, "name": s.name}
            for s in symptoms_by_category(category)
        ]
        for category in SYMPTOM_CATEGORIES
    }


@router.get("", response_model=list[SymptomLogRead])
async def list_symptom_logs(
    user: CurrentUser,
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    symptom_id: str | None = Query(default=None),
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
    if symptom_id:
        conditions.append(f"symptom_id = ${idx}")
        params.append(symptom_id)
        idx += 1

    where = " AND ".join(conditions)
    rows = await fetch(
        f"SELECT * FROM symptom_logs WHERE {where} ORDER BY date DESC",
        *params,
        user_id=user.app_user_id,
    )
    return [dict(r) for r in rows]


@router.post("", response_model=SymptomLogRead, status_code=201)
async def add_symptom_log(user: CurrentUser, body: SymptomLogCreate, pipeline: Pipeline) -> Any:
    if not is_known_symptom(body.symptom_id):
        raise HTTPException(status_code=422, detail=f"Unknown symptom '{body.symptom_id}'")

    row = await fetchrow(
        """
        INSERT INTO symptom_logs (log_id, user_id, date, symptom_id, intensity, custom_value, notes)
        VALUES (gen_random_uuid(), $1, $2, $3, $4, $5, $6)
        RETURNING *
        """,
        user.app_user_id,
        body.date, body.symptom_id, body.intensity, body.custom_value, body.notes,
        user_id=user.app_user_id,
    )
    await pipeline.on_symptom_logs_changed(user.app_user_id)
    return dict(row)


@router.delete("/{log_id}", status_code=204)
async def remove_symptom_log(log_id: uuid.UUID, user: CurrentUser, pipeline: Pipeline) -> None:
    result = await execute(
        "DELETE FROM symptom_logs WHERE log_id = $1 AND user_id = $2",
        log_id, user.app_user_id,
        user_id=user.app_user_id,
    )
    if result == "DELETE 0":
        raise HTTPException(status_code=404, detail="Symptom log not found")
    await pipeline.on_symptom_logs_changed(user.app_user_id)
