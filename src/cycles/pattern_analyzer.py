"""Symptom pattern analysis and data-quality scoring.

Places every symptom log in a cycle phase and aggregates per symptom:

- how often it was logged
- its average intensity (missing intensity counts as 0)
- the phase it most often falls in

Phase boundaries are fixed day-in-cycle heuristics (ovulation on days 12–16
by default), independent of the predictor's luteal-phase model.  Ties in the
most common phase are broken in ``tie_break_order`` (menstrual, follicular,
ovulation, luteal).
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.models import (
    AnalysisResult,
    Cycle,
    SymptomFrequency,
    SymptomLogEntry,
    days_between,
)

logger = logging.getLogger("bloom.cycles.pattern_analyzer")

# (minimum count, points); tiers stack
_CYCLE_COUNT_TIERS = ((1, 0.3), (3, 0.2), (6, 0.1))
_SYMPTOM_COUNT_TIERS = ((1, 0.2), (30, 0.1))
_RECENT_ACTIVITY_POINTS = 0.1


@dataclass
class _SymptomTally:
    count: int = 0
    total_intensity: int = 0
    phases: Counter = field(default_factory=Counter)


class PatternAnalyzer:
    """Correlate symptom logs with reconstructed cycle phases.

    Usage::

        analyzer = PatternAnalyzer()
        result = analyzer.analyze(symptom_logs, cycles)
        for pattern in result.symptom_patterns:
            print(pattern.symptom_id, pattern.cycle_phase)
    """

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()

    @property
    def _phase_config(self):
        return self._config.phases

    def find_cycle(self, day: date, cycles: Iterable[Cycle]) -> Cycle | None:
        """Return the cycle containing ``day``, preferring the most recent one."""
        window = self._phase_config.open_cycle_window_days
        for cycle in sorted(cycles, key=lambda c: c.start_date, reverse=True):
            if cycle.contains(day, window):
                return cycle
        return None

    def classify_phase(self, day: date, cycle: Cycle) -> str:
        """Classify a date within ``cycle`` as menstrual/follicular/ovulation/luteal."""
        pc = self._phase_config
        day_in_cycle = days_between(cycle.start_date, day) + 1
        period_length = cycle.period_length or self._config.defaults.period_length_days

        if day_in_cycle <= period_length:
            return "menstrual"
        if pc.ovulation_start_day <= day_in_cycle <= pc.ovulation_end_day:
            return "ovulation"
        if day_in_cycle > pc.ovulation_end_day:
            return "luteal"
        return "follicular"

    def phase_for_date(self, day: date, cycles: Iterable[Cycle]) -> str | None:
        cycle = self.find_cycle(day, cycles)
        return self.classify_phase(day, cycle) if cycle else None

    def most_common_phase(self, phases: Counter) -> str:
        """Mode of the phase counts with a deterministic tie-break."""
        order = self._phase_config.tie_break_order
        return max(order, key=lambda p: (phases.get(p, 0), -order.index(p)))

    def symptom_patterns(
        self, symptom_logs: Iterable[SymptomLogEntry], cycles: Iterable[Cycle]
    ) -> list[SymptomFrequency]:
        """Aggregate symptom logs per symptom id.

        Logs that fall outside every known cycle are ignored.  Results are in
        order of each symptom's first classified log.
        """
        cycles = list(cycles)
        tallies: dict[str, _SymptomTally] = {}

        for log in symptom_logs:
            phase = self.phase_for_date(log.date, cycles)
            if phase is None:
                continue
            tally = tallies.setdefault(log.symptom_id, _SymptomTally())
            tally.count += 1
            tally.total_intensity += log.intensity or 0
            tally.phases[phase] += 1

        return [
            SymptomFrequency(
                symptom_id=symptom_id,
                frequency=tally.count,
                average_intensity=tally.total_intensity / tally.count,
                cycle_phase=self.most_common_phase(tally.phases),
            )
            for symptom_id, tally in tallies.items()
        ]

    def data_quality_score(
        self,
        cycles: Iterable[Cycle],
        symptom_logs: Iterable[SymptomLogEntry],
        as_of_date: date | None = None,
    ) -> float:
        """Heuristic 0–1 score for how much, and how recent, the logged data is.

        Args:
            cycles:       Reconstructed cycles.
            symptom_logs: All symptom logs considered.
            as_of_date:   Reference date for the recency bonus (defaults to today).

        Returns:
            Score in [0.0, 1.0]; exactly 0.0 with no cycles and no logs.
        """
        dq = self._config.data_quality
        today = as_of_date or date.today()
        cycle_count = len(list(cycles))
        logs = list(symptom_logs)

        score = 0.0
        for minimum, points in _CYCLE_COUNT_TIERS:
            if cycle_count >= minimum:
                score += points
        for minimum, points in _SYMPTOM_COUNT_TIERS:
            if len(logs) >= minimum:
                score += points

        recent = [log for log in logs if days_between(log.date, today) <= dq.recent_window_days]
        if len(recent) >= dq.recent_min_logs:
            score += _RECENT_ACTIVITY_POINTS

        return round(min(score, 1.0), 2)

    def analyze(
        self,
        symptom_logs: Iterable[SymptomLogEntry],
        cycles: Iterable[Cycle],
        as_of_date: date | None = None,
    ) -> AnalysisResult:
        """Run the full analysis: symptom patterns plus data-quality score."""
        symptom_logs = list(symptom_logs)
        cycles = list(cycles)
        patterns = self.symptom_patterns(symptom_logs, cycles)
        score = self.data_quality_score(cycles, symptom_logs, as_of_date)
        logger.debug(
            "Analyzed %d symptom logs over %d cycles: %d patterns, quality=%.2f",
            len(symptom_logs), len(cycles), len(patterns), score,
        )
        return AnalysisResult(symptom_patterns=patterns, data_quality_score=score)
