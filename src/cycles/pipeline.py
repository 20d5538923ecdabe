"""Recompute pipeline: the only place engine results meet persistence.

Every period-log mutation synchronously triggers:
1. Fetch the full period log set for the user
2. Reconstruct cycles from scratch
3. Recompute the profile averages and last period start
4. Replace the stored cycles and update the profile
5. Invalidate the user's cached analytics

Symptom-log mutations only invalidate the analytics cache.  Recomputes for
the same user are serialized in-process; across processes the last writer
wins, which is safe because every run rebuilds from the authoritative logs.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
import weakref
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Protocol
from uuid import UUID

from src.cycles.engine import CycleEngine
from src.cycles.models import (
    Cycle,
    CycleAnalytics,
    FertileWindow,
    HealthAlert,
    PeriodLogEntry,
    PeriodWindow,
    Prediction,
    ProfileAverages,
    SymptomLogEntry,
    UserProfile,
)

logger = logging.getLogger("bloom.cycles.pipeline")


class CycleStore(Protocol):
    """Persistence collaborator used by the pipeline."""

    async def list_period_logs(self, user_id: UUID) -> list[PeriodLogEntry]: ...

    async def list_symptom_logs(self, user_id: UUID) -> list[SymptomLogEntry]: ...

    async def get_profile(self, user_id: UUID) -> UserProfile: ...

    async def list_cycles(self, user_id: UUID, limit: int | None = None) -> list[Cycle]:
        """Stored cycles, most recent first."""
        ...

    async def replace_cycles(self, user_id: UUID, cycles: list[Cycle]) -> None:
        """Atomically delete all stored cycles and insert ``cycles``."""
        ...

    async def update_cycle_stats(
        self,
        user_id: UUID,
        averages: ProfileAverages,
        last_period_start: date | None,
    ) -> UserProfile:
        """Write recomputed averages; ``None`` fields leave the stored value."""
        ...

    async def upsert_predictions(
        self, user_id: UUID, prediction_date: date, predictions: list[Prediction]
    ) -> None: ...

    async def save_alerts(self, user_id: UUID, alerts: list[HealthAlert]) -> None: ...


@dataclass
class RecomputeResult:
    cycles: list[Cycle]
    profile: UserProfile


@dataclass
class QuickEstimate:
    """Profile-only estimates for immediate display."""

    periods: list[PeriodWindow] = field(default_factory=list)
    fertile_window: FertileWindow | None = None
    pms_window: PeriodWindow | None = None


class AnalyticsCache:
    """Per-user analytics cache keyed by the reference date.

    Entries expire after ``ttl_seconds`` so a log change handled by another
    worker process is picked up within that window.  Log changes handled by
    this process invalidate the user's entries immediately.
    """

    def __init__(
        self,
        ttl_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[tuple[UUID, date], tuple[float, CycleAnalytics]] = {}
        self._lock = threading.Lock()

    def get(self, user_id: UUID, as_of_date: date) -> CycleAnalytics | None:
        key = (user_id, as_of_date)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, analytics = entry
            if self._clock() - stored_at >= self._ttl:
                del self._entries[key]
                return None
            return analytics

    def put(self, user_id: UUID, as_of_date: date, analytics: CycleAnalytics) -> None:
        with self._lock:
            self._entries[(user_id, as_of_date)] = (self._clock(), analytics)

    def invalidate(self, user_id: UUID) -> None:
        with self._lock:
            for key in [k for k in self._entries if k[0] == user_id]:
                del self._entries[key]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RecomputePipeline:
    """Coordinate the cycle engine with a persistence store.

    Usage::

        pipeline = RecomputePipeline(store=PostgresCycleStore())
        await pipeline.on_period_logs_changed(user_id)
        predictions = await pipeline.generate_predictions(user_id)
    """

    def __init__(
        self,
        store: CycleStore,
        engine: CycleEngine | None = None,
        cache: AnalyticsCache | None = None,
    ) -> None:
        self._store = store
        self._engine = engine or CycleEngine()
        self._cache = (
            cache
            if cache is not None
            else AnalyticsCache(self._engine.config.analytics.cache_ttl_seconds)
        )
        # Entries disappear once no recompute holds or awaits the lock
        self._user_locks: weakref.WeakValueDictionary[UUID, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @property
    def engine(self) -> CycleEngine:
        return self._engine

    @property
    def store(self) -> CycleStore:
        return self._store

    @property
    def cache(self) -> AnalyticsCache:
        return self._cache

    def _lock_for(self, user_id: UUID) -> asyncio.Lock:
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = self._user_locks[user_id] = asyncio.Lock()
        return lock

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def recompute(self, user_id: UUID) -> RecomputeResult:
        """Rebuild and persist the user's cycles and profile averages."""
        async with self._lock_for(user_id):
            period_logs = await self._store.list_period_logs(user_id)
            cycles = self._engine.reconstruct(period_logs)
            averages = self._engine.profile_averages(cycles)
            last_start = cycles[-1].start_date if cycles else None

            await self._store.replace_cycles(user_id, cycles)
            profile = await self._store.update_cycle_stats(user_id, averages, last_start)
            self._cache.invalidate(user_id)

        logger.info(
            "Recomputed %d cycles for user %s (avg cycle=%s, avg period=%s)",
            len(cycles), user_id,
            averages.average_cycle_length, averages.average_period_length,
        )
        return RecomputeResult(cycles=cycles, profile=profile)

    async def on_period_logs_changed(self, user_id: UUID) -> RecomputeResult:
        return await self.recompute(user_id)

    async def on_symptom_logs_changed(self, user_id: UUID) -> None:
        self._cache.invalidate(user_id)

    # ------------------------------------------------------------------
    # Derived outputs
    # ------------------------------------------------------------------

    async def generate_predictions(
        self,
        user_id: UUID,
        count: int | None = None,
        as_of_date: date | None = None,
    ) -> list[Prediction]:
        """Forecast upcoming periods and upsert them keyed by today's date."""
        today = as_of_date or date.today()
        profile = await self._store.get_profile(user_id)
        recent = await self._store.list_cycles(
            user_id, limit=self._engine.config.prediction.max_recent_cycles
        )
        period_logs = await self._store.list_period_logs(user_id)

        predictions = self._engine.predict(profile, recent, period_logs, count, today)
        await self._store.upsert_predictions(user_id, today, predictions)
        return predictions

    async def analytics(self, user_id: UUID, as_of_date: date | None = None) -> CycleAnalytics:
        """Symptom patterns and data quality as of ``as_of_date`` (default today).

        Cached per user and reference date, so a later day always recomputes
        the date-dependent parts (recent-activity bonus, symptom lookback).
        """
        today = as_of_date or date.today()
        cached = self._cache.get(user_id, today)
        if cached is not None:
            return cached

        cycles = await self._store.list_cycles(
            user_id, limit=self._engine.config.analytics.max_cycles
        )
        symptom_logs = await self._store.list_symptom_logs(user_id)
        result = self._engine.analytics(symptom_logs, cycles, today)
        self._cache.put(user_id, today, result)
        return result

    async def quick_estimate(self, user_id: UUID, count: int = 3) -> QuickEstimate:
        profile = await self._store.get_profile(user_id)
        return QuickEstimate(
            periods=self._engine.get_predicted_periods(profile, count),
            fertile_window=self._engine.get_fertile_window(profile),
            pms_window=self._engine.get_pms_window(profile),
        )

    async def generate_alerts(
        self, user_id: UUID, as_of_date: date | None = None
    ) -> list[HealthAlert]:
        profile = await self._store.get_profile(user_id)
        period_logs = await self._store.list_period_logs(user_id)
        symptom_logs = await self._store.list_symptom_logs(user_id)

        alerts = self._engine.generate_alerts(profile, period_logs, symptom_logs, as_of_date)
        if alerts:
            await self._store.save_alerts(user_id, alerts)
        return alerts
