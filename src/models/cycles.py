"""Pydantic models for cycle tracking: period logs, symptom logs, profile,
cycles, predictions, analytics, and predictive alerts."""

from __future__ import annotations

import datetime as dt
import uuid
from datetime import date
from enum import Enum

from pydantic import Field

from src.models.base import BloomBase, CreatedAtMixin, TimestampMixin


# ---------- Enums ----------

class FlowIntensity(str, Enum):
    light = "light"
    medium = "medium"
    heavy = "heavy"
    spotting = "spotting"


class CyclePhase(str, Enum):
    menstrual = "menstrual"
    follicular = "follicular"
    ovulation = "ovulation"
    luteal = "luteal"


class AlertType(str, Enum):
    predictive = "predictive"
    reminder = "reminder"
    warning = "warning"


class AlertSeverity(str, Enum):
    info = "info"
    warning = "warning"
    critical = "critical"


# ---------- Period Logs ----------

class PeriodLogCreate(BloomBase):
    date: dt.date
    flow: FlowIntensity
    notes: str | None = None


class PeriodLogRead(PeriodLogCreate, CreatedAtMixin):
    log_id: uuid.UUID
    user_id: uuid.UUID


# ---------- Symptom Logs ----------

class SymptomLogCreate(BloomBase):
    date: dt.date
    symptom_id: str = Field(min_length=1)
    intensity: int | None = Field(default=None, ge=1, le=5)
    custom_value: str | None = None
    notes: str | None = None


class SymptomLogRead(SymptomLogCreate, CreatedAtMixin):
    log_id: uuid.UUID
    user_id: uuid.UUID


# ---------- Profile ----------

class ProfileRead(BloomBase, TimestampMixin):
    user_id: uuid.UUID
    average_cycle_length: int = 28
    average_period_length: int = 5
    last_period_start: date | None = None
    is_pregnancy_mode: bool = False
    birth_control_method: str | None = None
    pregnancy_due_date: date | None = None
    pregnancy_start_date: date | None = None
    current_week: int | None = None


class ProfileUpdate(BloomBase):
    average_cycle_length: int | None = Field(default=None, ge=1, le=120)
    average_period_length: int | None = Field(default=None, ge=1, le=30)
    last_period_start: date | None = None
    is_pregnancy_mode: bool | None = None
    birth_control_method: str | None = None
    pregnancy_due_date: date | None = None
    pregnancy_start_date: date | None = None
    current_week: int | None = Field(default=None, ge=0, le=45)


# ---------- Cycles ----------

class CycleRead(BloomBase):
    start_date: date
    end_date: date | None = None
    length: int | None = None
    period_length: int | None = None
    predicted_ovulation_date: date | None = None
    predicted_fertile_window_start: date | None = None
    predicted_fertile_window_end: date | None = None
    quality_score: float | None = None


class PredictionRead(BloomBase):
    predicted_period_start: date
    predicted_period_end: date
    predicted_ovulation_date: date
    predicted_fertile_window_start: date
    predicted_fertile_window_end: date
    confidence_score: float = Field(ge=0, le=1)
    algorithm_version: str


class PredictionRequest(BloomBase):
    count: int = Field(default=3, ge=1, le=12)


class SymptomFrequencyRead(BloomBase):
    symptom_id: str
    frequency: int
    average_intensity: float
    cycle_phase: CyclePhase


class CycleAnalyticsRead(BloomBase):
    cycle_length_variation: list[int]
    period_length_variation: list[int]
    symptom_patterns: list[SymptomFrequencyRead]
    data_quality_score: float = Field(ge=0, le=1)


class PeriodWindowRead(BloomBase):
    start_date: date
    end_date: date


class FertileWindowRead(PeriodWindowRead):
    ovulation_date: date


class QuickEstimateRead(BloomBase):
    periods: list[PeriodWindowRead]
    fertile_window: FertileWindowRead | None = None
    pms_window: PeriodWindowRead | None = None


# ---------- Health Alerts ----------

class HealthAlertRead(BloomBase, CreatedAtMixin):
    alert_id: uuid.UUID
    user_id: uuid.UUID
    type: AlertType
    title: str
    message: str
    severity: AlertSeverity = AlertSeverity.info
    predicted_date: date | None = None
    based_on: list[str] = Field(default_factory=list)
    dismissed: bool = False


class HealthAlertUpdate(BloomBase):
    dismissed: bool
