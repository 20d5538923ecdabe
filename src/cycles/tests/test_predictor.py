"""Tests for weighted-recency forecasting and profile-only quick estimates."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.cycles.config_loader import CycleConfig, config_from_dict
from src.cycles.engine import CycleEngine
from src.cycles.models import PeriodLogEntry, UserProfile
from src.cycles.predictor import CyclePredictor
from src.cycles.tests.conftest import make_cycle, period_days


def history(start: date, lengths: list[int], period_length: int = 5):
    """Closed cycles with the given lengths (oldest first) plus a trailing open cycle."""
    cycles = []
    for length in lengths:
        cycles.append(make_cycle(start, length, period_length))
        start += timedelta(days=length)
    cycles.append(make_cycle(start, None, period_length))
    return cycles


# ---------------------------------------------------------------------------
# predict
# ---------------------------------------------------------------------------


class TestPredict:
    def test_regular_history_forecasts_full_confidence_then_decays(
        self, engine: CycleEngine, regular_logs: list[PeriodLogEntry]
    ) -> None:
        cycles = engine.reconstruct(regular_logs)
        profile = UserProfile(last_period_start=cycles[-1].start_date)

        predictions = engine.predict(profile, cycles, regular_logs)

        assert [p.confidence_score for p in predictions] == [1.0, 0.9, 0.8]
        first = predictions[0]
        assert first.predicted_period_start == date(2026, 2, 16)
        assert first.predicted_period_end == date(2026, 2, 20)
        assert first.predicted_ovulation_date == date(2026, 2, 2)
        assert first.predicted_fertile_window_start == date(2026, 1, 28)
        assert first.predicted_fertile_window_end == date(2026, 2, 3)
        assert [p.predicted_period_start for p in predictions[1:]] == [
            date(2026, 3, 16),
            date(2026, 4, 13),
        ]

    def test_algorithm_version_is_tagged(self, engine: CycleEngine) -> None:
        profile = UserProfile(last_period_start=date(2024, 1, 1))
        predictions = engine.predict(profile, [])
        assert {p.algorithm_version for p in predictions} == {"2.0"}

    def test_most_recent_cycles_weigh_most(self, cycle_config: CycleConfig) -> None:
        cycles = history(date(2024, 1, 1), [26, 28, 30])
        predictor = CyclePredictor(cycle_config)

        lengths = predictor.weighted_lengths(UserProfile(), cycles)

        # 30 * 0.5 + 28 * 0.3 + 26 * 0.2
        assert lengths.cycle_length == pytest.approx(28.6)
        assert lengths.period_length == pytest.approx(5.0)
        assert lengths.cycles_used == 3

    def test_irregular_history_lowers_confidence(self, cycle_config: CycleConfig) -> None:
        cycles = history(date(2024, 1, 1), [26, 28, 30])
        open_start = cycles[-1].start_date
        profile = UserProfile(last_period_start=open_start)

        predictions = CyclePredictor(cycle_config).predict(profile, cycles)

        assert [p.confidence_score for p in predictions] == [0.94, 0.84, 0.74]
        assert predictions[0].predicted_period_start == open_start + timedelta(days=29)

    def test_only_three_most_recent_lengths_are_used(self, cycle_config: CycleConfig) -> None:
        cycles = history(date(2024, 1, 1), [40, 40, 40, 28, 28, 28])

        lengths = CyclePredictor(cycle_config).weighted_lengths(UserProfile(), cycles)

        assert lengths.cycle_length == pytest.approx(28.0)
        assert lengths.variation == 0.0

    def test_wider_window_uses_fallback_weight(self) -> None:
        config = config_from_dict({"prediction": {"recency_window": 4}})
        cycles = history(date(2024, 1, 1), [40, 28, 28, 28])

        lengths = CyclePredictor(config).weighted_lengths(UserProfile(), cycles)

        assert lengths.cycles_used == 4
        assert lengths.cycle_length == pytest.approx((28 * 1.0 + 40 * 0.1) / 1.1)

    def test_input_order_does_not_matter(self, cycle_config: CycleConfig) -> None:
        cycles = history(date(2024, 1, 1), [26, 28, 30])
        predictor = CyclePredictor(cycle_config)

        assert predictor.weighted_lengths(UserProfile(), cycles) == predictor.weighted_lengths(
            UserProfile(), list(reversed(cycles))
        )

    def test_confidence_never_drops_below_floor(self, cycle_config: CycleConfig) -> None:
        cycles = history(date(2024, 1, 1), [15, 60, 15])
        profile = UserProfile(last_period_start=cycles[-1].start_date)

        predictions = CyclePredictor(cycle_config).predict(profile, cycles, count=6)

        scores = [p.confidence_score for p in predictions]
        assert scores[0] == 0.5
        assert scores[-1] == 0.3
        assert all(0.3 <= s <= 1.0 for s in scores)
        assert scores == sorted(scores, reverse=True)

    def test_no_history_falls_back_to_profile_averages(self, cycle_config: CycleConfig) -> None:
        profile = UserProfile(
            average_cycle_length=30,
            average_period_length=4,
            last_period_start=date(2024, 1, 1),
        )

        predictions = CyclePredictor(cycle_config).predict(profile, [])

        assert predictions[0].predicted_period_start == date(2024, 1, 31)
        assert predictions[0].predicted_period_end == date(2024, 2, 3)
        assert predictions[0].confidence_score == 1.0

    def test_anchors_on_latest_logged_period_without_profile_start(
        self, cycle_config: CycleConfig
    ) -> None:
        logs = period_days(date(2024, 1, 8), 5) + period_days(date(2024, 3, 10), 5)

        predictions = CyclePredictor(cycle_config).predict(UserProfile(), [], logs)

        assert predictions[0].predicted_period_start == date(2024, 4, 7)

    def test_anchors_on_today_without_any_data(self, cycle_config: CycleConfig) -> None:
        predictions = CyclePredictor(cycle_config).predict(
            UserProfile(), [], as_of_date=date(2024, 6, 1)
        )
        assert predictions[0].predicted_period_start == date(2024, 6, 29)

    @pytest.mark.parametrize("count", [0, 1, 3, 6])
    def test_count(self, cycle_config: CycleConfig, count: int) -> None:
        profile = UserProfile(last_period_start=date(2024, 1, 1))
        predictions = CyclePredictor(cycle_config).predict(profile, [], count=count)
        assert len(predictions) == count

    def test_predictions_are_sequential(self, cycle_config: CycleConfig) -> None:
        profile = UserProfile(last_period_start=date(2024, 1, 1))
        predictions = CyclePredictor(cycle_config).predict(profile, [], count=4)

        for p in predictions:
            assert p.predicted_period_start <= p.predicted_period_end
            assert p.predicted_fertile_window_start <= p.predicted_ovulation_date
            assert p.predicted_ovulation_date <= p.predicted_fertile_window_end
            assert p.predicted_fertile_window_end < p.predicted_period_start
        for earlier, later in zip(predictions, predictions[1:]):
            assert earlier.predicted_period_start < later.predicted_period_start


# ---------------------------------------------------------------------------
# Quick estimates
# ---------------------------------------------------------------------------


class TestQuickEstimates:
    def test_no_last_period_start_gives_nothing(self, cycle_config: CycleConfig) -> None:
        predictor = CyclePredictor(cycle_config)
        profile = UserProfile()

        assert predictor.get_predicted_periods(profile, count=3) == []
        assert predictor.get_fertile_window(profile) is None
        assert predictor.get_pms_window(profile) is None

    def test_chains_from_profile_averages(self, cycle_config: CycleConfig) -> None:
        profile = UserProfile(
            average_cycle_length=30,
            average_period_length=4,
            last_period_start=date(2024, 1, 1),
        )

        periods = CyclePredictor(cycle_config).get_predicted_periods(profile, count=3)

        assert [(p.start_date, p.end_date) for p in periods] == [
            (date(2024, 1, 31), date(2024, 2, 3)),
            (date(2024, 3, 1), date(2024, 3, 4)),
            (date(2024, 3, 31), date(2024, 4, 3)),
        ]

    def test_fertile_window(self, cycle_config: CycleConfig) -> None:
        profile = UserProfile(last_period_start=date(2024, 1, 1))

        window = CyclePredictor(cycle_config).get_fertile_window(profile)

        assert window is not None
        assert window.ovulation_date == date(2024, 1, 15)
        assert window.start_date == date(2024, 1, 10)
        assert window.end_date == date(2024, 1, 16)

    def test_pms_window(self, cycle_config: CycleConfig) -> None:
        profile = UserProfile(last_period_start=date(2024, 1, 1))

        window = CyclePredictor(cycle_config).get_pms_window(profile)

        assert window is not None
        assert window.start_date == date(2024, 1, 22)
        assert window.end_date == date(2024, 1, 28)

    def test_agrees_with_weighted_forecast_on_same_averages(
        self, cycle_config: CycleConfig
    ) -> None:
        profile = UserProfile(
            average_cycle_length=31,
            average_period_length=6,
            last_period_start=date(2025, 11, 20),
        )
        predictor = CyclePredictor(cycle_config)

        quick = predictor.get_predicted_periods(profile, count=3)
        full = predictor.predict(profile, [], count=3)

        assert [(w.start_date, w.end_date) for w in quick] == [
            (p.predicted_period_start, p.predicted_period_end) for p in full
        ]

    def test_missing_averages_fall_back_to_defaults(self, cycle_config: CycleConfig) -> None:
        profile = UserProfile(
            average_cycle_length=None,
            average_period_length=None,
            last_period_start=date(2024, 1, 1),
        )
        predictor = CyclePredictor(cycle_config)

        periods = predictor.get_predicted_periods(profile, count=1)
        fertile = predictor.get_fertile_window(profile)
        pms = predictor.get_pms_window(profile)

        assert [(p.start_date, p.end_date) for p in periods] == [
            (date(2024, 1, 29), date(2024, 2, 2))
        ]
        assert fertile is not None and fertile.ovulation_date == date(2024, 1, 15)
        assert pms is not None and pms.start_date == date(2024, 1, 22)
        assert predictor.predict(profile, [], count=1)[0].predicted_period_start == date(
            2024, 1, 29
        )
