"""Cycle forecasting: weighted-recency predictions and quick profile estimates.

Two predictors share the same forward-chaining arithmetic so the quick
estimate shown before a round-trip never contradicts the stored forecast for
a profile with the same averages:

- ``CyclePredictor.predict`` — weighted average of the most recent cycle
  lengths (weights 0.5 / 0.3 / 0.2), with a confidence score that drops with
  cycle irregularity and with forecast distance.
- ``CyclePredictor.get_predicted_periods`` / ``get_fertile_window`` — chain
  forward from the profile averages only, no weighting or confidence.

Ovulation is placed a fixed luteal phase (14 days by default) before the
next period, whatever the cycle length.  Insufficient history never raises:
the profile averages (28/5 by default) are used instead.
"""

from __future__ import annotations

import logging
import statistics
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.models import (
    Cycle,
    FertileWindow,
    PeriodLogEntry,
    PeriodWindow,
    Prediction,
    UserProfile,
    round_half_up,
)
from src.cycles.reconstructor import CycleReconstructor

logger = logging.getLogger("bloom.cycles.predictor")


@dataclass(frozen=True)
class WeightedLengths:
    """Weighted cycle statistics feeding a forecast.

    Attributes:
        cycle_length:   Weighted average cycle length (days, unrounded).
        period_length:  Weighted average period length (days, unrounded).
        variation:      Population standard deviation of the cycle lengths used.
        cycles_used:    Number of cycle lengths that contributed.
    """

    cycle_length: float
    period_length: float
    variation: float
    cycles_used: int


def _weighted_average(values: list[int], config: CycleConfig) -> float | None:
    if not values:
        return None
    weights = [config.prediction.weight_for(i) for i in range(len(values))]
    return sum(v * w for v, w in zip(values, weights)) / sum(weights)


class CyclePredictor:
    """Forecast upcoming periods, ovulation dates and fertile windows.

    Usage::

        predictor = CyclePredictor()
        predictions = predictor.predict(profile, recent_cycles, period_logs, count=3)
        quick = predictor.get_predicted_periods(profile, count=3)
    """

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()

    # ------------------------------------------------------------------
    # Shared arithmetic
    # ------------------------------------------------------------------

    def chain_periods(
        self, anchor: date, cycle_length: float, period_length: float, count: int
    ) -> list[PeriodWindow]:
        """Project ``count`` consecutive period windows forward from ``anchor``."""
        step = timedelta(days=round_half_up(cycle_length))
        duration = timedelta(days=round_half_up(period_length) - 1)

        windows: list[PeriodWindow] = []
        last_start = anchor
        for _ in range(max(count, 0)):
            next_start = last_start + step
            windows.append(PeriodWindow(start_date=next_start, end_date=next_start + duration))
            last_start = next_start
        return windows

    def fertile_window_for(self, period_start: date) -> FertileWindow:
        """Ovulation and fertile window preceding a period starting on ``period_start``."""
        ov = self._config.ovulation
        ovulation = period_start - timedelta(days=ov.luteal_phase_days)
        return FertileWindow(
            start_date=ovulation - timedelta(days=ov.fertile_days_before),
            end_date=ovulation + timedelta(days=ov.fertile_days_after),
            ovulation_date=ovulation,
        )

    def profile_lengths(self, profile: UserProfile) -> tuple[int, int]:
        """Profile cycle and period averages, with the configured defaults for missing ones."""
        defaults = self._config.defaults
        cycle_length = profile.average_cycle_length
        period_length = profile.average_period_length
        return (
            cycle_length if cycle_length is not None else defaults.cycle_length_days,
            period_length if period_length is not None else defaults.period_length_days,
        )

    # ------------------------------------------------------------------
    # Weighted-recency forecasting
    # ------------------------------------------------------------------

    def weighted_lengths(
        self, profile: UserProfile, recent_cycles: Iterable[Cycle]
    ) -> WeightedLengths:
        """Weighted average cycle and period lengths from the most recent cycles.

        Args:
            profile:       Supplies the fallback averages.
            recent_cycles: Reconstructed cycles in any order.

        Returns:
            WeightedLengths; falls back to the profile averages for any length
            with no usable history.
        """
        pc = self._config.prediction
        ordered = sorted(recent_cycles, key=lambda c: c.start_date, reverse=True)
        ordered = ordered[: pc.max_recent_cycles]

        cycle_lengths = [c.length for c in ordered if c.length is not None][: pc.recency_window]
        period_lengths = [
            c.period_length for c in ordered if c.period_length is not None
        ][: pc.recency_window]

        fallback_cycle, fallback_period = self.profile_lengths(profile)
        cycle_length = _weighted_average(cycle_lengths, self._config)
        period_length = _weighted_average(period_lengths, self._config)
        variation = statistics.pstdev(cycle_lengths) if len(cycle_lengths) >= 2 else 0.0

        return WeightedLengths(
            cycle_length=cycle_length if cycle_length is not None else float(fallback_cycle),
            period_length=period_length if period_length is not None else float(fallback_period),
            variation=variation,
            cycles_used=len(cycle_lengths),
        )

    def base_confidence(self, lengths: WeightedLengths) -> float:
        """Confidence before distance decay: lower for more irregular history."""
        floor = self._config.prediction.base_confidence_floor
        if lengths.cycle_length <= 0:
            return floor
        return min(1.0, max(floor, 1.0 - lengths.variation / lengths.cycle_length))

    def _anchor(
        self,
        profile: UserProfile,
        period_logs: Iterable[PeriodLogEntry],
        today: date,
    ) -> date:
        if profile.last_period_start is not None:
            return profile.last_period_start
        blocks = CycleReconstructor(self._config).period_blocks(period_logs)
        if blocks:
            return blocks[-1].start_date
        return today

    def predict(
        self,
        profile: UserProfile,
        recent_cycles: Iterable[Cycle],
        period_logs: Iterable[PeriodLogEntry] = (),
        count: int | None = None,
        as_of_date: date | None = None,
    ) -> list[Prediction]:
        """Generate ``count`` sequential period predictions.

        Args:
            profile:       User profile (fallback averages and anchor date).
            recent_cycles: Up to six most recent reconstructed cycles.
            period_logs:   Raw period logs; used to anchor the forecast when the
                           profile has no last period start.
            count:         Number of predictions (defaults to config, 3).
            as_of_date:    Reference "today" when there is nothing to anchor on.

        Returns:
            Predictions ordered from nearest to furthest, with non-increasing
            confidence in [0.3, 1.0].
        """
        pc = self._config.prediction
        n = pc.default_count if count is None else count
        today = as_of_date or date.today()

        lengths = self.weighted_lengths(profile, recent_cycles)
        base = self.base_confidence(lengths)
        anchor = self._anchor(profile, period_logs, today)

        if lengths.cycles_used == 0:
            logger.info(
                "No cycle history; forecasting from profile averages (%d/%d days)",
                *self.profile_lengths(profile),
            )

        predictions: list[Prediction] = []
        windows = self.chain_periods(anchor, lengths.cycle_length, lengths.period_length, n)
        for i, window in enumerate(windows):
            fertile = self.fertile_window_for(window.start_date)
            confidence = max(pc.confidence_floor, base - i * pc.confidence_decay)
            predictions.append(
                Prediction(
                    predicted_period_start=window.start_date,
                    predicted_period_end=window.end_date,
                    predicted_ovulation_date=fertile.ovulation_date,
                    predicted_fertile_window_start=fertile.start_date,
                    predicted_fertile_window_end=fertile.end_date,
                    confidence_score=round_half_up(confidence * 100) / 100,
                    algorithm_version=pc.algorithm_version,
                )
            )

        return predictions

    # ------------------------------------------------------------------
    # Quick estimates from profile averages
    # ------------------------------------------------------------------

    def get_predicted_periods(self, profile: UserProfile, count: int = 3) -> list[PeriodWindow]:
        """Chain upcoming periods from the profile averages alone.

        Missing averages fall back to the configured 28/5 defaults.

        Returns an empty list when the profile has no last period start.
        """
        if profile.last_period_start is None:
            return []
        cycle_length, period_length = self.profile_lengths(profile)
        return self.chain_periods(profile.last_period_start, cycle_length, period_length, count)

    def get_fertile_window(self, profile: UserProfile) -> FertileWindow | None:
        """Fertile window of the current cycle, from the profile averages alone."""
        upcoming = self.get_predicted_periods(profile, count=1)
        if not upcoming:
            return None
        return self.fertile_window_for(upcoming[0].start_date)

    def get_pms_window(self, profile: UserProfile) -> PeriodWindow | None:
        """The days leading up to the next expected period."""
        upcoming = self.get_predicted_periods(profile, count=1)
        if not upcoming:
            return None
        start = upcoming[0].start_date
        return PeriodWindow(
            start_date=start - timedelta(days=self._config.alerts.pms_window_days),
            end_date=start - timedelta(days=1),
        )
