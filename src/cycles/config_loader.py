"""Load, validate, and hot-reload the Bloom cycle engine configuration.

The config lives in ``cycle_config.yaml`` alongside this module.  At startup
it is loaded once and cached.  Call ``reload_cycle_config()`` to re-read from
disk after an admin update — no restart required.

Usage::

    from src.cycles.config_loader import get_cycle_config

    config = get_cycle_config()
    config.prediction.weight_for(0)        # 0.5
    config.ovulation.luteal_phase_days     # 14
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("bloom.cycles.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "cycle_config.yaml"

PHASES = ("menstrual", "follicular", "ovulation", "luteal")


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class DefaultsConfig:
    """Profile defaults used when no cycle history is available."""

    cycle_length_days: int = 28
    period_length_days: int = 5


@dataclass
class PredictionConfig:
    """Weighted-recency forecasting settings.

    ``fallback_weight`` applies to positions past the end of ``recency_weights``,
    so it only matters when ``recency_window`` is longer than that list.
    """

    algorithm_version: str = "2.0"
    recency_window: int = 3
    recency_weights: list[float] = field(default_factory=lambda: [0.5, 0.3, 0.2])
    fallback_weight: float = 0.1
    max_recent_cycles: int = 6
    default_count: int = 3
    base_confidence_floor: float = 0.5
    confidence_decay: float = 0.1
    confidence_floor: float = 0.3

    def weight_for(self, position: int) -> float:
        """Return the recency weight for the cycle at ``position`` (0 = most recent)."""
        if position < len(self.recency_weights):
            return self.recency_weights[position]
        return self.fallback_weight


@dataclass
class OvulationConfig:
    """Luteal-phase model for ovulation and fertile-window estimates."""

    luteal_phase_days: int = 14
    fertile_days_before: int = 5
    fertile_days_after: int = 1


@dataclass
class PhaseConfig:
    """Day-in-cycle boundaries used to classify symptom dates."""

    ovulation_start_day: int = 12
    ovulation_end_day: int = 16
    open_cycle_window_days: int = 28
    tie_break_order: list[str] = field(default_factory=lambda: list(PHASES))


@dataclass
class DataQualityConfig:
    recent_window_days: int = 30
    recent_min_logs: int = 10


@dataclass
class AnalyticsConfig:
    max_cycles: int = 12
    symptom_lookback_days: int = 365
    cache_ttl_seconds: int = 60


@dataclass
class AlertConfig:
    """Predictive alert thresholds."""

    pms_window_days: int = 7
    min_pms_logs: int = 2
    min_period_logs: int = 2
    symptom_lookback_days: int = 90
    period_lookback_days: int = 180
    pms_symptoms: list[str] = field(default_factory=list)


@dataclass
class CycleConfig:
    """Complete, validated cycle engine configuration.

    This is the single in-memory representation of cycle_config.yaml.
    The reconstructor, predictor, analyzer and alert generator all read
    from this object.
    """

    version: str
    defaults: DefaultsConfig
    max_gap_days: int
    prediction: PredictionConfig
    ovulation: OvulationConfig
    phases: PhaseConfig
    data_quality: DataQualityConfig
    analytics: AnalyticsConfig
    alerts: AlertConfig
    _raw: dict = field(default_factory=dict, repr=False)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when cycle_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Cycle config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> CycleConfig:
    """Validate the raw YAML dict and construct a CycleConfig.

    Every problem is collected first so an operator sees the full list in one
    go rather than fixing errors one at a time.

    Args:
        raw: Parsed YAML dict.

    Returns:
        Validated CycleConfig instance.

    Raises:
        ConfigValidationError: If any value is missing its expected type or
            falls outside its allowed range.
    """
    errors: list[str] = []

    def _int(section: dict, key: str, default: int, path: str, minimum: int = 0) -> int:
        value = section.get(key, default)
        try:
            result = int(value)
        except (TypeError, ValueError):
            errors.append(f"{path}.{key} must be an integer, got {value!r}")
            return default
        if result < minimum:
            errors.append(f"{path}.{key} = {result} must be >= {minimum}")
        return result

    def _unit(section: dict, key: str, default: float, path: str) -> float:
        value = section.get(key, default)
        try:
            result = float(value)
        except (TypeError, ValueError):
            errors.append(f"{path}.{key} must be a number, got {value!r}")
            return default
        if not (0.0 <= result <= 1.0):
            errors.append(f"{path}.{key} = {result} is out of range [0.0, 1.0]")
        return result

    version = str(raw.get("version", "2.0"))

    # ── Defaults ──
    d_raw = raw.get("defaults") or {}
    defaults = DefaultsConfig(
        cycle_length_days=_int(d_raw, "cycle_length_days", 28, "defaults", minimum=1),
        period_length_days=_int(d_raw, "period_length_days", 5, "defaults", minimum=1),
    )

    # ── Reconstruction ──
    r_raw = raw.get("reconstruction") or {}
    max_gap_days = _int(r_raw, "max_gap_days", 1, "reconstruction")

    # ── Prediction ──
    p_raw = raw.get("prediction") or {}
    c_raw = p_raw.get("confidence") or {}
    weights: list[float] = []
    for i, w in enumerate(p_raw.get("recency_weights", [0.5, 0.3, 0.2]) or []):
        try:
            weight = float(w)
        except (TypeError, ValueError):
            errors.append(f"prediction.recency_weights[{i}] must be a number, got {w!r}")
            continue
        if weight <= 0.0:
            errors.append(f"prediction.recency_weights[{i}] = {weight} must be positive")
        weights.append(weight)
    if not weights:
        errors.append("prediction.recency_weights must contain at least one weight")

    prediction = PredictionConfig(
        algorithm_version=str(p_raw.get("algorithm_version", version)),
        recency_window=_int(p_raw, "recency_window", 3, "prediction", minimum=1),
        recency_weights=weights,
        fallback_weight=_unit(p_raw, "fallback_weight", 0.1, "prediction"),
        max_recent_cycles=_int(p_raw, "max_recent_cycles", 6, "prediction", minimum=1),
        default_count=_int(p_raw, "default_count", 3, "prediction", minimum=1),
        base_confidence_floor=_unit(c_raw, "base_floor", 0.5, "prediction.confidence"),
        confidence_decay=_unit(c_raw, "decay_per_step", 0.1, "prediction.confidence"),
        confidence_floor=_unit(c_raw, "floor", 0.3, "prediction.confidence"),
    )
    if prediction.confidence_floor > prediction.base_confidence_floor:
        errors.append(
            "prediction.confidence.floor must not exceed prediction.confidence.base_floor"
        )

    # ── Ovulation ──
    o_raw = raw.get("ovulation") or {}
    fw_raw = o_raw.get("fertile_window") or {}
    ovulation = OvulationConfig(
        luteal_phase_days=_int(o_raw, "luteal_phase_days", 14, "ovulation", minimum=1),
        fertile_days_before=_int(fw_raw, "days_before", 5, "ovulation.fertile_window"),
        fertile_days_after=_int(fw_raw, "days_after", 1, "ovulation.fertile_window"),
    )

    # ── Phases ──
    ph_raw = raw.get("phases") or {}
    tie_break = list(ph_raw.get("tie_break_order", PHASES) or [])
    if sorted(tie_break) != sorted(PHASES):
        errors.append(
            f"phases.tie_break_order must list each of {', '.join(PHASES)} exactly once"
        )
    phases = PhaseConfig(
        ovulation_start_day=_int(ph_raw, "ovulation_start_day", 12, "phases", minimum=1),
        ovulation_end_day=_int(ph_raw, "ovulation_end_day", 16, "phases", minimum=1),
        open_cycle_window_days=_int(ph_raw, "open_cycle_window_days", 28, "phases", minimum=1),
        tie_break_order=tie_break,
    )
    if phases.ovulation_start_day > phases.ovulation_end_day:
        errors.append("phases.ovulation_start_day must not exceed phases.ovulation_end_day")

    # ── Data quality ──
    dq_raw = raw.get("data_quality") or {}
    data_quality = DataQualityConfig(
        recent_window_days=_int(dq_raw, "recent_window_days", 30, "data_quality"),
        recent_min_logs=_int(dq_raw, "recent_min_logs", 10, "data_quality"),
    )

    # ── Analytics ──
    an_raw = raw.get("analytics") or {}
    analytics = AnalyticsConfig(
        max_cycles=_int(an_raw, "max_cycles", 12, "analytics", minimum=1),
        symptom_lookback_days=_int(an_raw, "symptom_lookback_days", 365, "analytics"),
        cache_ttl_seconds=_int(an_raw, "cache_ttl_seconds", 60, "analytics"),
    )

    # ── Alerts ──
    al_raw = raw.get("alerts") or {}
    alerts = AlertConfig(
        pms_window_days=_int(al_raw, "pms_window_days", 7, "alerts"),
        min_pms_logs=_int(al_raw, "min_pms_logs", 2, "alerts", minimum=1),
        min_period_logs=_int(al_raw, "min_period_logs", 2, "alerts", minimum=1),
        symptom_lookback_days=_int(al_raw, "symptom_lookback_days", 90, "alerts"),
        period_lookback_days=_int(al_raw, "period_lookback_days", 180, "alerts"),
        pms_symptoms=[str(s) for s in (al_raw.get("pms_symptoms") or [])],
    )

    if errors:
        raise ConfigValidationError(
            f"cycle_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return CycleConfig(
        version=version,
        defaults=defaults,
        max_gap_days=max_gap_days,
        prediction=prediction,
        ovulation=ovulation,
        phases=phases,
        data_quality=data_quality,
        analytics=analytics,
        alerts=alerts,
        _raw=raw,
    )


def load_cycle_config(path: Path | None = None) -> CycleConfig:
    """Load and validate the cycle config from disk.

    Args:
        path: Override path to YAML. Uses the bundled cycle_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded cycle config v%s from %s", config.version, target)
    return config


def config_from_dict(raw: dict[str, Any]) -> CycleConfig:
    """Build a validated config from an in-memory mapping (tests, overrides)."""
    return _validate_and_build(raw)


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: CycleConfig | None = None
_config_lock = threading.Lock()


def get_cycle_config() -> CycleConfig:
    """Return the global CycleConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_cycle_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_cycle_config()
    return _config


def reload_cycle_config(path: Path | None = None) -> CycleConfig:
    """Reload the cycle config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_cycle_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info(
        "Reloaded cycle config: %s → %s",
        old_version,
        new_config.version,
    )
    return new_config
