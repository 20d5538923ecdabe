"""Cycle profile endpoints.  Reading a missing profile creates the default."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException

from src.dependencies import CurrentUser
from src.models.cycles import ProfileRead, ProfileUpdate
from src.services.cycle_store import get_or_create_profile_row
from src.services.supabase import fetchrow

router = APIRouter(prefix="/profile", tags=["profile"])

# NOT NULL columns; an explicit null leaves the stored value alone
_NON_NULLABLE = ("average_cycle_length", "average_period_length")


@router.get("", response_model=ProfileRead)
async def get_profile(user: CurrentUser) -> Any:
    return dict(await get_or_create_profile_row(user.app_user_id))


@router.patch("", response_model=ProfileRead)
async def update_profile(user: CurrentUser, body: ProfileUpdate) -> Any:
    updates = body.model_dump(exclude_unset=True)
    for key in _NON_NULLABLE:
        if key in updates and updates[key] is None:
            del updates[key]
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    await get_or_create_profile_row(user.app_user_id)

    set_clauses = []
    params: list[Any] = [user.app_user_id]
    for i, (key, value) in enumerate(updates.items(), start=2):
        set_clauses.append(f"{key} = ${i}")
        params.append(value)
    set_clauses.append("updated_at = NOW()")

    row = await fetchrow(
        f"UPDATE profiles SET {', '.join(set_clauses)} WHERE user_id = $1 RETURNING *",
        *params,
        user_id=user.app_user_id,
    )
    return dict(row)
