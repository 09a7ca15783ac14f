"""
Forecasting Algorithm Selection

Picks the methodology label reported with a forecast from the shape of
the expense history. The labels describe the heuristic's choice; they
are not model implementations.
"""

import logging

from .feature_extractors import detect_seasonality, detect_trend
from .historical_data import HistoricalData
from .models import ForecastingAlgorithm

logger = logging.getLogger(__name__)

LARGE_SAMPLE_SIZE = 90
VERY_LARGE_SAMPLE_SIZE = 365


def select_algorithm(
    has_seasonality: bool,
    has_trend: bool,
    sample_size: int
) -> ForecastingAlgorithm:
    """
    Decision table over extracted features.

    | seasonality | trend | samples | algorithm             |
    |-------------|-------|---------|-----------------------|
    | yes         | yes   | >= 365  | neural_network        |
    | yes         | yes   | >= 90   | hybrid                |
    | yes         | yes   | < 90    | arima                 |
    | yes         | no    | any     | arima                 |
    | no          | yes   | any     | linear_regression     |
    | no          | no    | < 90    | exponential_smoothing |
    | no          | no    | >= 90   | linear_regression     |
    """
    if has_seasonality and has_trend:
        if sample_size >= VERY_LARGE_SAMPLE_SIZE:
            return ForecastingAlgorithm.NEURAL_NETWORK
        if sample_size >= LARGE_SAMPLE_SIZE:
            return ForecastingAlgorithm.HYBRID
        return ForecastingAlgorithm.ARIMA

    if has_seasonality:
        return ForecastingAlgorithm.ARIMA

    if has_trend:
        return ForecastingAlgorithm.LINEAR_REGRESSION

    if sample_size < LARGE_SAMPLE_SIZE:
        return ForecastingAlgorithm.EXPONENTIAL_SMOOTHING
    return ForecastingAlgorithm.LINEAR_REGRESSION


def select_best_forecasting_algorithm(historical_data: HistoricalData) -> ForecastingAlgorithm:
    """Select a methodology from the expense series of a history."""
    expenses = historical_data.expense_transactions

    has_seasonality = detect_seasonality(expenses)
    has_trend = detect_trend(expenses)
    algorithm = select_algorithm(has_seasonality, has_trend, len(expenses))

    logger.debug(
        f"Selected {algorithm.value} (seasonality={has_seasonality}, "
        f"trend={has_trend}, samples={len(expenses)})"
    )
    return algorithm
