"""
Tests for forecasting algorithm selection.
"""

import math
from datetime import date

import pytest

from src.forecasting.algorithm_selector import select_algorithm, select_best_forecasting_algorithm
from src.forecasting.historical_data import build_historical_data
from src.forecasting.models import ForecastingAlgorithm, TransactionType

from factories import series, year_of_history


class TestDecisionTable:
    """Every branch of the table."""

    @pytest.mark.parametrize("seasonal,trend,samples,expected", [
        (True, True, 365, ForecastingAlgorithm.NEURAL_NETWORK),
        (True, True, 400, ForecastingAlgorithm.NEURAL_NETWORK),
        (True, True, 90, ForecastingAlgorithm.HYBRID),
        (True, True, 364, ForecastingAlgorithm.HYBRID),
        (True, True, 89, ForecastingAlgorithm.ARIMA),
        (True, False, 10, ForecastingAlgorithm.ARIMA),
        (True, False, 1000, ForecastingAlgorithm.ARIMA),
        (False, True, 10, ForecastingAlgorithm.LINEAR_REGRESSION),
        (False, True, 1000, ForecastingAlgorithm.LINEAR_REGRESSION),
        (False, False, 89, ForecastingAlgorithm.EXPONENTIAL_SMOOTHING),
        (False, False, 90, ForecastingAlgorithm.LINEAR_REGRESSION),
    ])
    def test_select_algorithm(self, seasonal, trend, samples, expected):
        assert select_algorithm(seasonal, trend, samples) == expected


class TestSelectBestForecastingAlgorithm:
    """Selection from a history always yields a defined label."""

    def test_small_flat_history(self):
        history = build_historical_data(series([50] * 30, date(2024, 1, 1)))
        assert select_best_forecasting_algorithm(history) == ForecastingAlgorithm.EXPONENTIAL_SMOOTHING

    def test_trending_history(self):
        history = build_historical_data(series([100 + 2 * i for i in range(30)], date(2024, 1, 1)))
        assert select_best_forecasting_algorithm(history) == ForecastingAlgorithm.LINEAR_REGRESSION

    def test_seasonal_year(self):
        amounts = [100 + 50 * math.sin(2 * math.pi * (i + 1) / 365.25) for i in range(365)]
        history = build_historical_data(series(amounts, date(2023, 1, 1)))
        assert select_best_forecasting_algorithm(history) in (
            ForecastingAlgorithm.ARIMA,
            ForecastingAlgorithm.HYBRID,
            ForecastingAlgorithm.NEURAL_NETWORK
        )

    @pytest.mark.parametrize("samples", [
        series([10], date(2024, 1, 1)),
        series([0] * 40, date(2024, 1, 1)),
        series([1e9, 1, 1e9, 1], date(2024, 1, 1)),
        series([100] * 5, date(2024, 1, 1), type=TransactionType.INCOME),
        year_of_history(),
    ])
    def test_always_a_defined_label(self, samples):
        history = build_historical_data(samples)
        assert select_best_forecasting_algorithm(history) in set(ForecastingAlgorithm)
