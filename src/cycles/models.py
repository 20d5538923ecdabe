"""Engine-level records for cycle reconstruction, prediction and analysis.

These are plain dataclasses rather than Pydantic models: the engine is a pure
computation layer and never touches request validation or serialization.
Route handlers convert between these and the API schemas in
``src.models.cycles``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from uuid import UUID

FLOW_INTENSITIES = ("light", "medium", "heavy", "spotting")


def days_between(start: date, end: date) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    return (end - start).days


def round_half_up(value: float) -> int:
    """Round to the nearest whole number, halves away from zero for positives.

    Python's ``round`` uses banker's rounding (``round(28.5) == 28``), which
    would shift predicted dates by a day compared with the client estimate.
    """
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class PeriodLogEntry:
    """A single logged period day.

    Attributes:
        date:    Calendar day of the log.
        flow:    'light', 'medium', 'heavy' or 'spotting'.
        notes:   Optional free text.
        log_id:  Database id, if persisted.
    """

    date: date
    flow: str = "medium"
    notes: str | None = None
    log_id: UUID | None = None


@dataclass(frozen=True)
class SymptomLogEntry:
    """A single logged symptom.  Many entries may share a date.

    Attributes:
        date:         Calendar day of the log.
        symptom_id:   Identifier from the symptom catalogue (e.g. 'pain-cramps').
        intensity:    Optional 1–5 severity.
        custom_value: Optional free-text value for custom symptoms.
        notes:        Optional free text.
        log_id:       Database id, if persisted.
    """

    date: date
    symptom_id: str
    intensity: int | None = None
    custom_value: str | None = None
    notes: str | None = None
    log_id: UUID | None = None


@dataclass
class Cycle:
    """A reconstructed menstrual cycle.

    Attributes:
        start_date:    First day of the period block that opens the cycle.
        end_date:      Last logged day of that period block.
        length:        Days from this cycle's start to the next cycle's start.
                       None for the most recent (open) cycle.
        period_length: Number of days in the period block (inclusive).
        predicted_ovulation_date:       Optional, filled by callers.
        predicted_fertile_window_start: Optional, filled by callers.
        predicted_fertile_window_end:   Optional, filled by callers.
        quality_score: Optional per-cycle quality score.
    """

    start_date: date
    end_date: date | None = None
    length: int | None = None
    period_length: int | None = None
    predicted_ovulation_date: date | None = None
    predicted_fertile_window_start: date | None = None
    predicted_fertile_window_end: date | None = None
    quality_score: float | None = None

    @property
    def is_open(self) -> bool:
        return self.length is None

    def last_day(self, open_window_days: int = 28) -> date:
        """Last calendar day that belongs to this cycle.

        Closed cycles end the day before the next cycle starts.  Open cycles
        are assumed to run ``open_window_days`` past their start.
        """
        if self.length is not None:
            return self.start_date + timedelta(days=self.length - 1)
        return self.start_date + timedelta(days=open_window_days)

    def contains(self, day: date, open_window_days: int = 28) -> bool:
        return self.start_date <= day <= self.last_day(open_window_days)


@dataclass
class UserProfile:
    """Per-user cycle settings.

    ``average_cycle_length`` and ``average_period_length`` are recomputed from
    reconstructed cycles; everything else is user-entered.  Either average may
    be missing, in which case the configured defaults apply.
    """

    average_cycle_length: int | None = 28
    average_period_length: int | None = 5
    last_period_start: date | None = None
    is_pregnancy_mode: bool = False
    pregnancy_start_date: date | None = None
    pregnancy_due_date: date | None = None
    current_week: int | None = None
    birth_control_method: str | None = None


@dataclass(frozen=True)
class ProfileAverages:
    """Recomputed profile averages.  ``None`` means no observation was available."""

    average_cycle_length: int | None = None
    average_period_length: int | None = None


@dataclass(frozen=True)
class PeriodWindow:
    start_date: date
    end_date: date


@dataclass(frozen=True)
class FertileWindow:
    start_date: date
    end_date: date
    ovulation_date: date


@dataclass
class Prediction:
    """One forecast period with its ovulation estimate and confidence.

    Attributes:
        predicted_period_start:         First predicted bleeding day.
        predicted_period_end:           Last predicted bleeding day.
        predicted_ovulation_date:       ``period_start - luteal_phase_days``.
        predicted_fertile_window_start: Ovulation minus the fertile lead-in.
        predicted_fertile_window_end:   Ovulation plus the fertile tail.
        confidence_score:               0.3–1.0, two decimal places.
        algorithm_version:              Version tag of the forecasting model.
    """

    predicted_period_start: date
    predicted_period_end: date
    predicted_ovulation_date: date
    predicted_fertile_window_start: date
    predicted_fertile_window_end: date
    confidence_score: float
    algorithm_version: str


@dataclass
class SymptomFrequency:
    symptom_id: str
    frequency: int
    average_intensity: float
    cycle_phase: str


@dataclass
class AnalysisResult:
    """Output of the pattern analyzer."""

    symptom_patterns: list[SymptomFrequency] = field(default_factory=list)
    data_quality_score: float = 0.0


@dataclass
class CycleAnalytics:
    """Read-only analytics summary served to clients."""

    cycle_length_variation: list[int] = field(default_factory=list)
    period_length_variation: list[int] = field(default_factory=list)
    symptom_patterns: list[SymptomFrequency] = field(default_factory=list)
    data_quality_score: float = 0.0


@dataclass
class HealthAlert:
    """A generated predictive alert, ready for persistence."""

    alert_type: str
    title: str
    message: str
    severity: str = "info"
    predicted_date: date | None = None
    based_on: list[str] = field(default_factory=list)
