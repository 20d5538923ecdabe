"""Stateless facade over the cycle reconstructor, predictor and analyzer.

The engine holds configuration only.  Callers pass the current snapshot of
logs and profile on every call and own persistence and caching.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from src.cycles.alerts import AlertGenerator
from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.models import (
    AnalysisResult,
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
from src.cycles.pattern_analyzer import PatternAnalyzer
from src.cycles.predictor import CyclePredictor
from src.cycles.reconstructor import CycleReconstructor


class CycleEngine:
    """Entry point used by the recompute pipeline and route handlers."""

    def __init__(self, config: CycleConfig | None = None) -> None:
        self.config = config or get_cycle_config()
        self.reconstructor = CycleReconstructor(self.config)
        self.predictor = CyclePredictor(self.config)
        self.analyzer = PatternAnalyzer(self.config)
        self.alert_generator = AlertGenerator(self.config)

    # ── Reconstruction ──

    def reconstruct(self, period_logs: Iterable[PeriodLogEntry]) -> list[Cycle]:
        return self.reconstructor.reconstruct(period_logs)

    def profile_averages(self, cycles: Iterable[Cycle]) -> ProfileAverages:
        return self.reconstructor.profile_averages(cycles)

    # ── Prediction ──

    def predict(
        self,
        profile: UserProfile,
        recent_cycles: Iterable[Cycle],
        period_logs: Iterable[PeriodLogEntry] = (),
        count: int | None = None,
        as_of_date: date | None = None,
    ) -> list[Prediction]:
        return self.predictor.predict(profile, recent_cycles, period_logs, count, as_of_date)

    def get_predicted_periods(self, profile: UserProfile, count: int = 3) -> list[PeriodWindow]:
        return self.predictor.get_predicted_periods(profile, count)

    def get_fertile_window(self, profile: UserProfile) -> FertileWindow | None:
        return self.predictor.get_fertile_window(profile)

    def get_pms_window(self, profile: UserProfile) -> PeriodWindow | None:
        return self.predictor.get_pms_window(profile)

    # ── Analysis ──

    def analyze(
        self,
        symptom_logs: Iterable[SymptomLogEntry],
        cycles: Iterable[Cycle],
        as_of_date: date | None = None,
    ) -> AnalysisResult:
        return self.analyzer.analyze(symptom_logs, cycles, as_of_date)

    def analytics(
        self,
        symptom_logs: Iterable[SymptomLogEntry],
        cycles: Iterable[Cycle],
        as_of_date: date | None = None,
    ) -> CycleAnalytics:
        """Client analytics summary over the most recent cycles and past year of symptoms.

        Length variations list the observed cycle and period lengths, most
        recent cycle first.
        """
        ac = self.config.analytics
        today = as_of_date or date.today()
        recent = sorted(cycles, key=lambda c: c.start_date, reverse=True)[: ac.max_cycles]
        since = today - timedelta(days=ac.symptom_lookback_days)
        symptoms = [log for log in symptom_logs if log.date >= since]

        result = self.analyze(symptoms, recent, today)
        return CycleAnalytics(
            cycle_length_variation=[c.length for c in recent if c.length],
            period_length_variation=[c.period_length for c in recent if c.period_length],
            symptom_patterns=result.symptom_patterns,
            data_quality_score=result.data_quality_score,
        )

    # ── Alerts ──

    def generate_alerts(
        self,
        profile: UserProfile,
        period_logs: Iterable[PeriodLogEntry],
        symptom_logs: Iterable[SymptomLogEntry],
        as_of_date: date | None = None,
    ) -> list[HealthAlert]:
        return self.alert_generator.generate(profile, period_logs, symptom_logs, as_of_date)
