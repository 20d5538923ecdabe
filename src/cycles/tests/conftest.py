"""Shared fixtures and builders for cycle engine tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from uuid import UUID

import pytest

from src.cycles.config_loader import CycleConfig, load_cycle_config
from src.cycles.engine import CycleEngine
from src.cycles.models import (
    Cycle,
    HealthAlert,
    PeriodLogEntry,
    Prediction,
    ProfileAverages,
    SymptomLogEntry,
    UserProfile,
)

# Canonical test user ID
TEST_USER_ID = UUID("12345678-1234-5678-1234-567812345678")
TEST_DATE = date(2026, 2, 23)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def period_days(start: date, length: int, flow: str = "medium") -> list[PeriodLogEntry]:
    """``length`` consecutive period logs starting on ``start``."""
    return [PeriodLogEntry(date=start + timedelta(days=i), flow=flow) for i in range(length)]


def regular_period_logs(
    first_start: date, cycles: int, cycle_length: int = 28, period_length: int = 5
) -> list[PeriodLogEntry]:
    """Period logs for ``cycles`` evenly spaced period blocks."""
    logs: list[PeriodLogEntry] = []
    for i in range(cycles):
        logs.extend(period_days(first_start + timedelta(days=i * cycle_length), period_length))
    return logs


def make_cycle(
    start: date, length: int | None = 28, period_length: int | None = 5
) -> Cycle:
    return Cycle(
        start_date=start,
        end_date=start + timedelta(days=(period_length or 1) - 1),
        length=length,
        period_length=period_length,
    )


def symptom(d: date, symptom_id: str = "pain-cramps", intensity: int | None = 3) -> SymptomLogEntry:
    return SymptomLogEntry(date=d, symptom_id=symptom_id, intensity=intensity)


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class FakeCycleStore:
    """In-memory stand-in for PostgresCycleStore, one user per instance."""

    def __init__(
        self,
        period_logs: list[PeriodLogEntry] | None = None,
        symptom_logs: list[SymptomLogEntry] | None = None,
        profile: UserProfile | None = None,
    ) -> None:
        self.period_logs = list(period_logs or [])
        self.symptom_logs = list(symptom_logs or [])
        self.profile = profile or UserProfile()
        self.cycles: list[Cycle] = []
        self.predictions: dict[date, list[Prediction]] = {}
        self.alerts: list[HealthAlert] = []
        self.calls: list[str] = []

    async def list_period_logs(self, user_id: UUID) -> list[PeriodLogEntry]:
        self.calls.append("list_period_logs")
        return list(self.period_logs)

    async def list_symptom_logs(self, user_id: UUID) -> list[SymptomLogEntry]:
        self.calls.append("list_symptom_logs")
        return list(self.symptom_logs)

    async def get_profile(self, user_id: UUID) -> UserProfile:
        return replace(self.profile)

    async def list_cycles(self, user_id: UUID, limit: int | None = None) -> list[Cycle]:
        newest_first = sorted(self.cycles, key=lambda c: c.start_date, reverse=True)
        return newest_first[:limit] if limit is not None else newest_first

    async def replace_cycles(self, user_id: UUID, cycles: list[Cycle]) -> None:
        self.calls.append("replace_cycles")
        self.cycles = list(cycles)

    async def update_cycle_stats(
        self,
        user_id: UUID,
        averages: ProfileAverages,
        last_period_start: date | None,
    ) -> UserProfile:
        self.calls.append("update_cycle_stats")
        if averages.average_cycle_length is not None:
            self.profile.average_cycle_length = averages.average_cycle_length
        if averages.average_period_length is not None:
            self.profile.average_period_length = averages.average_period_length
        if last_period_start is not None:
            self.profile.last_period_start = last_period_start
        return replace(self.profile)

    async def upsert_predictions(
        self, user_id: UUID, prediction_date: date, predictions: list[Prediction]
    ) -> None:
        self.predictions[prediction_date] = list(predictions)

    async def save_alerts(self, user_id: UUID, alerts: list[HealthAlert]) -> None:
        self.alerts.extend(alerts)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cycle_config() -> CycleConfig:
    """Load the bundled cycle config for tests."""
    return load_cycle_config()


@pytest.fixture
def engine(cycle_config: CycleConfig) -> CycleEngine:
    return CycleEngine(cycle_config)


@pytest.fixture
def regular_logs() -> list[PeriodLogEntry]:
    """Seven 28-day period blocks of 5 days: six closed cycles and one open."""
    return regular_period_logs(date(2025, 8, 4), cycles=7)
