"""Predictive health alert endpoints."""

from __future__ import annotations

import json
import uuid
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from src.dependencies import CurrentUser, Pipeline
from src.models.cycles import AlertSeverity, AlertType, HealthAlertRead, HealthAlertUpdate
from src.services.supabase import fetch, fetchrow

router = APIRouter(prefix="/alerts", tags=["alerts"])


def _alert_row(row: Any) -> dict[str, Any]:
    data = dict(row)
    if isinstance(data.get("based_on"), str):
        data["based_on"] = json.loads(data["based_on"])
    return data


@router.get("", response_model=list[HealthAlertRead])
async def list_alerts(
    user: CurrentUser,
    type: AlertType | None = Query(default=None),
    severity: AlertSeverity | None = Query(default=None),
    dismissed: bool | None = Query(default=None),
) -> Any:
    conditions = ["user_id = $1"]
    params: list[Any] = [user.app_user_id]
    idx = 2

    if type:
        conditions.append(f"type = ${idx}")
        params.append(type.value)
        idx += 1
    if severity:
        conditions.append(f"severity = ${idx}")
        params.append(severity.value)
        idx += 1
    if dismissed is not None:
        conditions.append(f"dismissed = ${idx}")
        params.append(dismissed)
        idx += 1

    where = " AND ".join(conditions)
    rows = await fetch(
        f"SELECT * FROM health_alerts WHERE {where} ORDER BY created_at DESC",
        *params,
        user_id=user.app_user_id,
    )
    return [_alert_row(r) for r in rows]


@router.post("/generate", response_model=list[HealthAlertRead], status_code=201)
async def generate_alerts(user: CurrentUser, pipeline: Pipeline) -> Any:
    """Generate and store predictive alerts, then return the undismissed set."""
    await pipeline.generate_alerts(user.app_user_id)
    rows = await fetch(
        "SELECT * FROM health_alerts WHERE user_id = $1 AND dismissed = FALSE "
        "ORDER BY created_at DESC",
        user.app_user_id,
        user_id=user.app_user_id,
    )
    return [_alert_row(r) for r in rows]


@router.patch("/{alert_id}", response_model=HealthAlertRead)
async def update_alert(alert_id: uuid.UUID, user: CurrentUser, body: HealthAlertUpdate) -> Any:
    row = await fetchrow(
        """
        UPDATE health_alerts SET dismissed = $3
        WHERE alert_id = $1 AND user_id = $2
        RETURNING *
        """,
        alert_id, user.app_user_id, body.dismissed,
        user_id=user.app_user_id,
    )
    if not row:
        raise HTTPException(status_code=404, detail="Alert not found")
    return _alert_row(row)
