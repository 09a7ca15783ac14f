"""
Confidence Estimation

Turns history quality into an accuracy score in (0, 1] and buckets
scores into high / medium / low confidence.
"""

import logging
import math
from typing import Sequence

import numpy as np

from src.patterns.threshold_classification import create_confidence_classifier
from src.patterns.weighted_scoring import ScoreResult, create_forecast_accuracy_engine

from .feature_extractors import calculate_consistency
from .historical_data import HistoricalData
from .models import ConfidenceLevel, DailyFlow

logger = logging.getLogger(__name__)

MIN_ACCURACY = 0.05
MIN_CASH_FLOW_DAYS = 7
NEUTRAL_CASH_FLOW_CONFIDENCE = 0.5
MIN_CASH_FLOW_CONFIDENCE = 0.1

_confidence_classifier = create_confidence_classifier()
_accuracy_engine = create_forecast_accuracy_engine()


def to_confidence_level(score: float) -> ConfidenceLevel:
    """Map a score in [0, 1] to its confidence bucket (total and monotonic)."""
    if score is None or not math.isfinite(score):
        return ConfidenceLevel.LOW
    return ConfidenceLevel(_confidence_classifier.label_for(score))


def score_forecasting_accuracy(historical_data: HistoricalData) -> ScoreResult:
    """Weighted accuracy score with per-component detail."""
    income_consistency = calculate_consistency(historical_data.income_transactions)
    expense_consistency = calculate_consistency(historical_data.expense_transactions)

    return _accuracy_engine.score({
        "history_months": historical_data.history_months,
        "transaction_count": len(historical_data.income_transactions)
                             + len(historical_data.expense_transactions),
        "consistency": (income_consistency + expense_consistency) / 2
    }, subject="forecasting_accuracy")


def calculate_forecasting_accuracy(historical_data: HistoricalData) -> float:
    """
    Accuracy in (0, 1] combining sample sufficiency and consistency.

    Longer histories, more transactions and steadier amounts all raise
    the score. The floor keeps the score positive for any valid sample.
    """
    result = score_forecasting_accuracy(historical_data)
    accuracy = max(MIN_ACCURACY, min(1.0, result.fraction))
    return round(accuracy, 4)


def calculate_cash_flow_confidence(daily_flows: Sequence[DailyFlow]) -> float:
    """
    Confidence in (0, 1] from the stability of daily net flow.

    Fewer than a week of days gives a neutral 0.5.
    """
    if len(daily_flows) < MIN_CASH_FLOW_DAYS:
        return NEUTRAL_CASH_FLOW_CONFIDENCE

    net_flows = np.array([day.net_flow for day in daily_flows], dtype=float)
    mean = float(np.mean(net_flows))
    std_dev = float(np.std(net_flows))

    if mean == 0:
        return 1.0 if std_dev == 0 else MIN_CASH_FLOW_CONFIDENCE
    if not math.isfinite(mean) or not math.isfinite(std_dev):
        return MIN_CASH_FLOW_CONFIDENCE

    coefficient_of_variation = std_dev / abs(mean)
    confidence = max(MIN_CASH_FLOW_CONFIDENCE, min(1.0, 1.0 - coefficient_of_variation))
    return round(confidence, 4)
