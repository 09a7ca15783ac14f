"""
Tests for risk factor analysis.
"""

import math
from datetime import date

import pytest

from src.forecasting.historical_data import build_historical_data, group_transactions_by_date
from src.forecasting.models import CashFlowPredictions, ConfidenceLevel, TransactionType
from src.forecasting.risk_analyzer import RiskFactorAnalyzer, cash_flow_volatility

from factories import make_sample, series


@pytest.fixture
def analyzer():
    return RiskFactorAnalyzer()


def factors(risks):
    return {r.factor for r in risks}


class TestForecastRisks:
    """Risks on the multi-month forecast path."""

    def test_volatile_expenses_flagged(self, analyzer):
        history = build_historical_data(series([10, 500] * 30, date(2024, 1, 1)))

        risks = analyzer.analyze_forecast_risks(history)
        volatility = [r for r in risks if r.factor == "expense_volatility"]

        assert volatility
        assert volatility[0].severity == "high"
        assert 0 <= volatility[0].probability <= 1
        assert volatility[0].mitigation

    def test_volatile_income_flagged(self, analyzer):
        history = build_historical_data(
            series([100, 2000, 50, 1500] * 5, date(2024, 1, 1), type=TransactionType.INCOME)
        )
        assert "income_volatility" in factors(analyzer.analyze_forecast_risks(history))

    def test_steady_history_has_no_volatility(self, analyzer):
        samples = (series([100] * 40, date(2024, 1, 1))
                   + series([3000] * 4, date(2024, 1, 1), type=TransactionType.INCOME, step_days=14))

        risks = analyzer.analyze_forecast_risks(build_historical_data(samples))

        assert not factors(risks) & {"income_volatility", "expense_volatility"}

    def test_declining_income(self, analyzer):
        income = series([3000 - 50 * i for i in range(20)], date(2024, 1, 1),
                        type=TransactionType.INCOME, step_days=14)

        risks = analyzer.analyze_forecast_risks(build_historical_data(income))

        assert "declining_income" in factors(risks)

    def test_rising_income_is_not_a_risk(self, analyzer):
        income = series([2000 + 50 * i for i in range(20)], date(2024, 1, 1),
                        type=TransactionType.INCOME, step_days=14)
        assert "declining_income" not in factors(analyzer.analyze_forecast_risks(build_historical_data(income)))

    def test_category_concentration(self, analyzer):
        samples = (series([1500] * 12, date(2024, 1, 1), step_days=30, category_id="rent")
                   + series([50] * 12, date(2024, 1, 2), step_days=30, category_id="coffee"))

        risks = analyzer.analyze_forecast_risks(build_historical_data(samples))
        concentration = [r for r in risks if r.factor == "category_concentration"]

        assert concentration
        assert "rent" in concentration[0].message

    def test_single_category_not_concentration(self, analyzer):
        history = build_historical_data(series([100] * 40, date(2024, 1, 1), category_id="food"))
        assert "category_concentration" not in factors(analyzer.analyze_forecast_risks(history))

    def test_empty_history_yields_list(self, analyzer):
        assert analyzer.analyze_forecast_risks(build_historical_data([])) == []

    def test_severity_follows_probability(self, analyzer):
        assert analyzer._risk("x", 0.1, "m", "").severity == "low"
        assert analyzer._risk("x", 0.3, "m", "").severity == "medium"
        assert analyzer._risk("x", 0.5, "m", "").severity == "high"
        assert analyzer._risk("x", 7.0, "m", "").probability == 1.0


class TestCashFlowRisks:
    """Risks on the cash flow prediction path."""

    def _history(self, samples):
        history = build_historical_data(samples)
        return history, history.daily_flows

    def test_negative_cash_flow_and_balance(self, analyzer):
        history, flows = self._history(series([100] * 30, date(2024, 1, 1)))
        predictions = CashFlowPredictions(0, 3000, -3000, -2500, ConfidenceLevel.HIGH)

        risks = analyzer.analyze_cash_flow_risks(history, flows, predictions)

        assert {"negative_cash_flow", "negative_ending_balance"} <= factors(risks)

    def test_healthy_prediction(self, analyzer):
        samples = [make_sample(100, d.day, TransactionType.INCOME) for d in series([0] * 30, date(2024, 1, 1))]
        history, flows = self._history(samples)
        predictions = CashFlowPredictions(3000, 0, 3000, 5000, ConfidenceLevel.HIGH)

        assert analyzer.analyze_cash_flow_risks(history, flows, predictions) == []

    def test_volatile_daily_flow(self, analyzer):
        samples = []
        for i, day in enumerate(series([0] * 30, date(2024, 1, 1))):
            kind = TransactionType.INCOME if i % 2 == 0 else TransactionType.EXPENSE
            samples.append(make_sample(100, day.day, kind))
        history, flows = self._history(samples)
        predictions = CashFlowPredictions(1500, 1500, 0, 0, ConfidenceLevel.LOW)

        risks = analyzer.analyze_cash_flow_risks(history, flows, predictions)
        volatility = [r for r in risks if r.factor == "cash_flow_volatility"]

        assert volatility
        assert volatility[0].probability == 1.0
        assert volatility[0].severity == "high"


class TestCashFlowVolatility:
    """Coefficient of variation of daily net flow."""

    def test_empty(self):
        assert cash_flow_volatility([]) == 0.0

    def test_constant(self):
        flows = group_transactions_by_date(series([100] * 10, date(2024, 1, 1)))
        assert cash_flow_volatility(flows) == 0.0

    def test_zero_mean_with_spread(self):
        samples = [
            make_sample(100, date(2024, 1, 1), TransactionType.INCOME),
            make_sample(100, date(2024, 1, 2), TransactionType.EXPENSE),
        ]
        assert math.isinf(cash_flow_volatility(group_transactions_by_date(samples)))

    def test_ratio(self):
        samples = [
            make_sample(50, date(2024, 1, 1), TransactionType.INCOME),
            make_sample(150, date(2024, 1, 2), TransactionType.INCOME),
        ]
        assert cash_flow_volatility(group_transactions_by_date(samples)) == pytest.approx(0.5)
