"""
Tests for accuracy scoring, confidence buckets and the scoring patterns.
"""

from datetime import date

import pytest

from src.forecasting.confidence import (
    calculate_cash_flow_confidence,
    calculate_forecasting_accuracy,
    score_forecasting_accuracy,
    to_confidence_level
)
from src.forecasting.historical_data import build_historical_data, group_transactions_by_date
from src.forecasting.models import ConfidenceLevel, TransactionType
from src.patterns.threshold_classification import (
    ScoreBand,
    ThresholdClassifier,
    create_confidence_classifier
)
from src.patterns.weighted_scoring import ScoreComponent, WeightedScoringEngine

from factories import make_sample, series, year_of_history


class TestConfidenceLevel:
    """Bucketing is total and monotonic."""

    @pytest.mark.parametrize("score,expected", [
        (0.0, ConfidenceLevel.LOW),
        (0.59, ConfidenceLevel.LOW),
        (0.6, ConfidenceLevel.MEDIUM),
        (0.79, ConfidenceLevel.MEDIUM),
        (0.8, ConfidenceLevel.HIGH),
        (1.0, ConfidenceLevel.HIGH),
        (1.5, ConfidenceLevel.HIGH),
        (-0.2, ConfidenceLevel.LOW),
        (float("nan"), ConfidenceLevel.LOW),
    ])
    def test_buckets(self, score, expected):
        assert to_confidence_level(score) == expected

    @pytest.mark.parametrize("level,expected", [
        (ConfidenceLevel.HIGH, ConfidenceLevel.MEDIUM),
        (ConfidenceLevel.MEDIUM, ConfidenceLevel.LOW),
        (ConfidenceLevel.LOW, ConfidenceLevel.LOW),
    ])
    def test_lowered_steps_down_one_rank(self, level, expected):
        assert level.lowered() == expected

    def test_monotonic(self):
        levels = [to_confidence_level(i / 100) for i in range(1, 101)]
        ranks = [level.rank for level in levels]
        assert ranks == sorted(ranks)


class TestForecastingAccuracy:
    """Accuracy in (0, 1]."""

    def test_full_year_scores_higher_than_short_history(self):
        short = build_historical_data(series([50, 400, 20, 300] * 8, date(2023, 12, 1)))
        full = build_historical_data(year_of_history(), date(2022, 12, 31), date(2023, 12, 31))

        assert 0 < calculate_forecasting_accuracy(short) < calculate_forecasting_accuracy(full) <= 1

    def test_empty_history_is_positive(self):
        assert calculate_forecasting_accuracy(build_historical_data([])) > 0

    def test_components_reported(self):
        result = score_forecasting_accuracy(build_historical_data(year_of_history()))
        assert set(result.component_scores) == {"history_months", "transaction_count", "consistency"}
        assert result.component_scores["transaction_count"] == 100.0


class TestCashFlowConfidence:
    """Stability of daily net flow."""

    def test_short_window_is_neutral(self):
        flows = group_transactions_by_date(series([10, 20, 30], date(2024, 1, 1)))
        assert calculate_cash_flow_confidence(flows) == 0.5

    def test_steady_flow(self):
        flows = group_transactions_by_date(
            series([100] * 14, date(2024, 1, 1), type=TransactionType.INCOME)
        )
        assert calculate_cash_flow_confidence(flows) == 1.0

    def test_zero_mean_with_spread_is_floor(self):
        samples = [
            make_sample(100, day.day, TransactionType.INCOME if i % 2 == 0 else TransactionType.EXPENSE)
            for i, day in enumerate(series([0] * 14, date(2024, 1, 1)))
        ]
        assert calculate_cash_flow_confidence(group_transactions_by_date(samples)) == 0.1

    def test_bounded(self):
        flows = group_transactions_by_date(
            series([10, 1000, 5, 700, 1, 900, 3, 800], date(2024, 1, 1), type=TransactionType.INCOME)
        )
        assert 0.1 <= calculate_cash_flow_confidence(flows) <= 1.0


class TestThresholdClassifier:
    """Band validation and classification."""

    def test_gap_rejected(self):
        with pytest.raises(ValueError):
            ThresholdClassifier([ScoreBand("a", 0, 0.4), ScoreBand("b", 0.5, 1)])

    def test_empty_band_rejected(self):
        with pytest.raises(ValueError):
            ThresholdClassifier([ScoreBand("a", 0.5, 0.5)])

    def test_classify_details(self):
        result = create_confidence_classifier().classify(0.7)

        assert result.label == "medium"
        assert result.band_details["position_in_band"] == pytest.approx(50.0)

    def test_band_summary_ordered(self):
        summary = create_confidence_classifier().get_band_summary()
        assert [b["label"] for b in summary] == ["low", "medium", "high"]


class TestWeightedScoringEngine:
    """Composite scoring."""

    def test_weights_normalized_without_mutating_input(self):
        components = [
            ScoreComponent("a", weight=2, max_value=10),
            ScoreComponent("b", weight=2, max_value=10),
        ]
        engine = WeightedScoringEngine(components)

        assert engine.components["a"].weight == pytest.approx(0.5)
        assert components[0].weight == 2

    def test_score(self):
        engine = WeightedScoringEngine([
            ScoreComponent("a", weight=0.5, max_value=10),
            ScoreComponent("b", weight=0.5, max_value=10),
        ])
        result = engine.score({"a": 10, "b": 0})

        assert result.overall_score == 50
        assert result.fraction == 0.5

    def test_missing_value_uses_minimum(self):
        engine = WeightedScoringEngine([ScoreComponent("a", weight=1.0, max_value=10)])
        assert engine.score({}).overall_score == 0

    def test_requires_components(self):
        with pytest.raises(ValueError):
            WeightedScoringEngine([])
