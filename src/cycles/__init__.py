"""Cycle analytics and prediction engine for Bloom.

Pure computation over a user's period and symptom logs.  Nothing in this
package performs I/O except ``pipeline``, which talks to a store passed in by
the caller.  All data is treated as special category health data.

Modules:
    reconstructor     — Period logs → period blocks → cycles; profile averages
    predictor         — Weighted-recency forecasts and quick profile estimates
    pattern_analyzer  — Symptom × phase statistics and data-quality score
    alerts            — Predictive PMS / upcoming-period alerts
    symptoms          — Fixed symptom catalogue
    engine            — Stateless facade over the above
    pipeline          — Recompute pipeline, per-user analytics cache
    config_loader     — Load/validate/hot-reload cycle_config.yaml
"""

from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.engine import CycleEngine
from src.cycles.models import (
    AnalysisResult,
    Cycle,
    CycleAnalytics,
    PeriodLogEntry,
    Prediction,
    SymptomFrequency,
    SymptomLogEntry,
    UserProfile,
)
from src.cycles.pattern_analyzer import PatternAnalyzer
from src.cycles.pipeline import AnalyticsCache, RecomputePipeline
from src.cycles.predictor import CyclePredictor
from src.cycles.reconstructor import CycleReconstructor

__all__ = [
    "CycleEngine",
    "CycleReconstructor",
    "CyclePredictor",
    "PatternAnalyzer",
    "RecomputePipeline",
    "AnalyticsCache",
    "CycleConfig",
    "get_cycle_config",
    "PeriodLogEntry",
    "SymptomLogEntry",
    "Cycle",
    "UserProfile",
    "Prediction",
    "SymptomFrequency",
    "AnalysisResult",
    "CycleAnalytics",
]
