"""Predictive health alerts.

Two alerts are generated from recent history, never in pregnancy mode:

- "PMS symptoms likely" when enough PMS-type symptoms were logged in the last
  days of past cycles; dated a PMS window before the next expected period.
- "Period expected soon" once there is enough recent period data; dated on the
  next expected period start.

Both dates come from the same quick profile estimate the clients display.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable

from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.models import (
    Cycle,
    HealthAlert,
    PeriodLogEntry,
    SymptomLogEntry,
    UserProfile,
    days_between,
)
from src.cycles.predictor import CyclePredictor
from src.cycles.reconstructor import CycleReconstructor

logger = logging.getLogger("bloom.cycles.alerts")


class AlertGenerator:
    """Generate predictive alerts from a user's profile and logs.

    Usage::

        generator = AlertGenerator()
        alerts = generator.generate(profile, period_logs, symptom_logs)
    """

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()
        self._predictor = CyclePredictor(self._config)
        self._reconstructor = CycleReconstructor(self._config)

    def _next_period_start(self, profile: UserProfile, cycles: list[Cycle]) -> date | None:
        if profile.last_period_start is None and cycles:
            profile = replace(profile, last_period_start=cycles[-1].start_date)
        upcoming = self._predictor.get_predicted_periods(profile, count=1)
        return upcoming[0].start_date if upcoming else None

    def _premenstrual_logs(
        self,
        profile: UserProfile,
        symptom_logs: list[SymptomLogEntry],
        cycles: list[Cycle],
    ) -> list[SymptomLogEntry]:
        """PMS-type symptom logs that fell in the last days of their cycle."""
        ac = self._config.alerts
        cycle_length, _ = self._predictor.profile_lengths(profile)
        threshold = cycle_length - ac.pms_window_days
        pms_ids = set(ac.pms_symptoms)

        matched = []
        for log in symptom_logs:
            if log.symptom_id not in pms_ids:
                continue
            started = [c for c in cycles if c.start_date <= log.date]
            if not started:
                continue
            if days_between(started[-1].start_date, log.date) > threshold:
                matched.append(log)
        return matched

    def generate(
        self,
        profile: UserProfile,
        period_logs: Iterable[PeriodLogEntry],
        symptom_logs: Iterable[SymptomLogEntry],
        as_of_date: date | None = None,
    ) -> list[HealthAlert]:
        """Generate predictive alerts.

        Args:
            profile:      Current user profile.
            period_logs:  All period logs.
            symptom_logs: All symptom logs.
            as_of_date:   Reference date for the lookback windows.

        Returns:
            Alerts ready to persist (possibly empty).
        """
        ac = self._config.alerts
        today = as_of_date or date.today()

        if profile.is_pregnancy_mode:
            return []

        period_logs = list(period_logs)
        recent_periods = [
            log for log in period_logs
            if log.date >= today - timedelta(days=ac.period_lookback_days)
        ]
        if not recent_periods:
            return []

        recent_symptoms = [
            log for log in symptom_logs
            if log.date >= today - timedelta(days=ac.symptom_lookback_days)
        ]
        cycles = self._reconstructor.reconstruct(period_logs)
        next_start = self._next_period_start(profile, cycles)

        alerts: list[HealthAlert] = []

        premenstrual = self._premenstrual_logs(profile, recent_symptoms, cycles)
        if len(premenstrual) >= ac.min_pms_logs and next_start is not None:
            alerts.append(
                HealthAlert(
                    alert_type="predictive",
                    title="PMS Symptoms Likely",
                    message=(
                        "Based on your cycle pattern, you may experience PMS symptoms "
                        "starting around this date. Consider stress management and "
                        "self-care practices."
                    ),
                    predicted_date=next_start - timedelta(days=ac.pms_window_days),
                    based_on=["Historical PMS symptom patterns"],
                )
            )

        if len(recent_periods) >= ac.min_period_logs and next_start is not None:
            alerts.append(
                HealthAlert(
                    alert_type="predictive",
                    title="Period Expected Soon",
                    message=(
                        f"Your next period is expected around {next_start.isoformat()}. "
                        "Consider preparing supplies and tracking any pre-period symptoms."
                    ),
                    predicted_date=next_start,
                    based_on=["Cycle length patterns"],
                )
            )

        logger.info("Generated %d predictive alerts", len(alerts))
        return alerts
