"""Postgres-backed store for the cycle recompute pipeline.

Tables (all scoped by ``user_id`` and protected by RLS):
    period_logs       — one row per logged period day
    symptom_logs      — one row per logged symptom
    profiles          — one row per user (averages, pregnancy settings)
    cycles            — reconstructed cycles, replaced wholesale on recompute
    cycle_predictions — forecasts, replaced per (user_id, prediction_date)
    health_alerts     — generated predictive alerts
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import date
from typing import Any

import asyncpg

from src.cycles.models import (
    Cycle,
    HealthAlert,
    PeriodLogEntry,
    Prediction,
    ProfileAverages,
    SymptomLogEntry,
    UserProfile,
)
from src.services.supabase import fetch, fetchrow, get_connection, with_retry

logger = logging.getLogger("bloom.db.cycle_store")

_CYCLE_COLUMNS = (
    "start_date, end_date, length, period_length, predicted_ovulation_date, "
    "predicted_fertile_window_start, predicted_fertile_window_end, cycle_quality_score"
)


def period_log_from_row(row: asyncpg.Record | dict[str, Any]) -> PeriodLogEntry:
    return PeriodLogEntry(
        date=row["date"], flow=row["flow"], notes=row["notes"], log_id=row["log_id"]
    )


def symptom_log_from_row(row: asyncpg.Record | dict[str, Any]) -> SymptomLogEntry:
    return SymptomLogEntry(
        date=row["date"],
        symptom_id=row["symptom_id"],
        intensity=row["intensity"],
        custom_value=row["custom_value"],
        notes=row["notes"],
        log_id=row["log_id"],
    )


def cycle_from_row(row: asyncpg.Record | dict[str, Any]) -> Cycle:
    return Cycle(
        start_date=row["start_date"],
        end_date=row["end_date"],
        length=row["length"],
        period_length=row["period_length"],
        predicted_ovulation_date=row["predicted_ovulation_date"],
        predicted_fertile_window_start=row["predicted_fertile_window_start"],
        predicted_fertile_window_end=row["predicted_fertile_window_end"],
        quality_score=row["cycle_quality_score"],
    )


def profile_from_row(row: asyncpg.Record | dict[str, Any]) -> UserProfile:
    return UserProfile(
        average_cycle_length=row["average_cycle_length"],
        average_period_length=row["average_period_length"],
        last_period_start=row["last_period_start"],
        is_pregnancy_mode=row["is_pregnancy_mode"],
        pregnancy_start_date=row["pregnancy_start_date"],
        pregnancy_due_date=row["pregnancy_due_date"],
        current_week=row["current_week"],
        birth_control_method=row["birth_control_method"],
    )


async def get_or_create_profile_row(user_id: uuid.UUID) -> asyncpg.Record:
    """Return the user's profile row, creating the 28/5 default if missing."""

    async def _run() -> asyncpg.Record:
        async with get_connection(user_id=user_id) as conn:
            await conn.execute(
                """
                INSERT INTO profiles (user_id, average_cycle_length, average_period_length, is_pregnancy_mode)
                VALUES ($1, 28, 5, FALSE)
                ON CONFLICT (user_id) DO NOTHING
                """,
                user_id,
            )
            return await conn.fetchrow("SELECT * FROM profiles WHERE user_id = $1", user_id)

    return await with_retry(_run)


class PostgresCycleStore:
    """``CycleStore`` implementation over the Supabase Postgres database."""

    async def list_period_logs(self, user_id: uuid.UUID) -> list[PeriodLogEntry]:
        rows = await fetch(
            "SELECT * FROM period_logs WHERE user_id = $1 ORDER BY date DESC",
            user_id,
            user_id=user_id,
        )
        return [period_log_from_row(r) for r in rows]

    async def list_symptom_logs(self, user_id: uuid.UUID) -> list[SymptomLogEntry]:
        rows = await fetch(
            "SELECT * FROM symptom_logs WHERE user_id = $1 ORDER BY date DESC",
            user_id,
            user_id=user_id,
        )
        return [symptom_log_from_row(r) for r in rows]

    async def get_profile(self, user_id: uuid.UUID) -> UserProfile:
        return profile_from_row(await get_or_create_profile_row(user_id))

    async def list_cycles(
        self, user_id: uuid.UUID, limit: int | None = None
    ) -> list[Cycle]:
        query = "SELECT * FROM cycles WHERE user_id = $1 ORDER BY start_date DESC"
        params: list[Any] = [user_id]
        if limit is not None:
            query += " LIMIT $2"
            params.append(limit)
        rows = await fetch(query, *params, user_id=user_id)
        return [cycle_from_row(r) for r in rows]

    async def replace_cycles(self, user_id: uuid.UUID, cycles: list[Cycle]) -> None:
        records = [
            (
                user_id,
                c.start_date,
                c.end_date,
                c.length,
                c.period_length,
                c.predicted_ovulation_date,
                c.predicted_fertile_window_start,
                c.predicted_fertile_window_end,
                c.quality_score,
            )
            for c in cycles
        ]

        async def _run() -> None:
            async with get_connection(user_id=user_id) as conn:
                await conn.execute("DELETE FROM cycles WHERE user_id = $1", user_id)
                if records:
                    await conn.executemany(
                        f"""
                        INSERT INTO cycles (cycle_id, user_id, {_CYCLE_COLUMNS})
                        VALUES (gen_random_uuid(), $1, $2, $3, $4, $5, $6, $7, $8, $9)
                        """,
                        records,
                    )

        await with_retry(_run)
        logger.debug("Replaced cycles for user %s (%d rows)", user_id, len(records))

    async def update_cycle_stats(
        self,
        user_id: uuid.UUID,
        averages: ProfileAverages,
        last_period_start: date | None,
    ) -> UserProfile:
        await get_or_create_profile_row(user_id)
        row = await fetchrow(
            """
            UPDATE profiles SET
                average_cycle_length = COALESCE($2, average_cycle_length),
                average_period_length = COALESCE($3, average_period_length),
                last_period_start = COALESCE($4, last_period_start),
                updated_at = NOW()
            WHERE user_id = $1
            RETURNING *
            """,
            user_id,
            averages.average_cycle_length,
            averages.average_period_length,
            last_period_start,
            user_id=user_id,
        )
        return profile_from_row(row)

    async def upsert_predictions(
        self, user_id: uuid.UUID, prediction_date: date, predictions: list[Prediction]
    ) -> None:
        records = [
            (
                user_id,
                prediction_date,
                p.predicted_period_start,
                p.predicted_period_end,
                p.predicted_ovulation_date,
                p.predicted_fertile_window_start,
                p.predicted_fertile_window_end,
                p.confidence_score,
                p.algorithm_version,
            )
            for p in predictions
        ]

        async def _run() -> None:
            async with get_connection(user_id=user_id) as conn:
                await conn.execute(
                    "DELETE FROM cycle_predictions WHERE user_id = $1 AND prediction_date = $2",
                    user_id, prediction_date,
                )
                if records:
                    await conn.executemany(
                        """
                        INSERT INTO cycle_predictions (
                            prediction_id, user_id, prediction_date,
                            predicted_period_start, predicted_period_end,
                            predicted_ovulation_date,
                            predicted_fertile_window_start, predicted_fertile_window_end,
                            confidence_score, algorithm_version
                        ) VALUES (gen_random_uuid(), $1, $2, $3, $4, $5, $6, $7, $8, $9)
                        """,
                        records,
                    )

        await with_retry(_run)

    async def save_alerts(self, user_id: uuid.UUID, alerts: list[HealthAlert]) -> None:
        records = [
            (
                user_id,
                a.alert_type,
                a.title,
                a.message,
                a.severity,
                a.predicted_date,
                json.dumps(a.based_on),
            )
            for a in alerts
        ]

        async def _run() -> None:
            async with get_connection(user_id=user_id) as conn:
                await conn.executemany(
                    """
                    INSERT INTO health_alerts (
                        alert_id, user_id, type, title, message, severity,
                        predicted_date, based_on, dismissed
                    ) VALUES (gen_random_uuid(), $1, $2, $3, $4, $5, $6, $7, FALSE)
                    """,
                    records,
                )

        await with_retry(_run)
