"""
Financial Forecaster

Multi-month forecast of income, expenses, net worth and savings built
from a year of transaction history: a base projection, three weighted
scenarios, per-category spending forecasts, month-by-month rows, risk
factors and a methodology block describing how the numbers were made.
"""

import logging
from typing import List, Optional

from .algorithm_selector import select_best_forecasting_algorithm
from .confidence import (
    calculate_forecasting_accuracy,
    score_forecasting_accuracy,
    to_confidence_level
)
from .exceptions import FORECAST_INSUFFICIENT_DATA_TEMPLATE
from .feature_extractors import (
    calculate_category_trend,
    calculate_consistency,
    calculate_monthly_average,
    calculate_months_difference,
    category_name_for,
    group_by_category,
    month_starts
)
from .historical_data import (
    FORECAST_LOOKBACK_DAYS,
    MIN_HISTORY_DAYS,
    HistoricalData,
    HistoricalDataAggregator,
    validate_query
)
from .models import (
    BaseScenario,
    CategoryForecast,
    ForecastQuery,
    ForecastResult,
    Methodology,
    MonthlyProjection
)
from .providers import TransactionDataProvider
from .risk_analyzer import RiskFactorAnalyzer
from .scenarios import BASE_SAVINGS_RATE, ScenarioGenerator, round_money

logger = logging.getLogger(__name__)

HISTORICAL_AVERAGE_WEIGHT = 0.7
TREND_ADJUSTMENT_WEIGHT = 0.3


class FinancialForecaster:
    """
    Generates multi-month financial forecasts.

    Example:
    ```python
    forecaster = FinancialForecaster(provider)

    result = forecaster.generate_financial_forecast(ForecastQuery(
        user_id="user-1",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 3, 31)
    ))
    print(f"Net worth change: {result.base_scenario.projected_net_worth}")
    print(f"Method: {result.methodology.algorithm.value}")
    ```
    """

    def __init__(
        self,
        provider: TransactionDataProvider,
        lookback_days: int = FORECAST_LOOKBACK_DAYS,
        min_history_days: int = MIN_HISTORY_DAYS,
        scenario_generator: Optional[ScenarioGenerator] = None,
        risk_analyzer: Optional[RiskFactorAnalyzer] = None
    ):
        """
        Initialize forecaster.

        Args:
            provider: Source of transaction history
            lookback_days: History window preceding the forecast start
            min_history_days: Distinct days of history required
            scenario_generator: Override the default scenario profiles
            risk_analyzer: Override the default risk thresholds
        """
        self.aggregator = HistoricalDataAggregator(
            provider,
            lookback_days=lookback_days,
            min_history_days=min_history_days,
            insufficient_data_template=FORECAST_INSUFFICIENT_DATA_TEMPLATE
        )
        self.scenario_generator = scenario_generator or ScenarioGenerator()
        self.risk_analyzer = risk_analyzer or RiskFactorAnalyzer()

    def generate_financial_forecast(self, query: ForecastQuery) -> ForecastResult:
        """
        Forecast income and expenses over [start_date, end_date].

        Raises:
            ValidationError: the query is malformed (nothing is fetched)
            InsufficientDataError: fewer than 30 distinct days of history
        """
        query = validate_query(query)
        logger.info(
            f"Generating financial forecast for user {query.user_id} "
            f"({query.start_date} to {query.end_date})"
        )

        try:
            history = self.aggregator.load(query)
            result = self._build_forecast(query, history)
        except Exception as e:
            logger.error(f"Error in financial forecast generation for user {query.user_id}: {e}")
            raise

        logger.info(
            f"Financial forecast completed for user {query.user_id}: "
            f"{result.methodology.algorithm.value}, accuracy {result.methodology.accuracy}"
        )
        return result

    def _build_forecast(self, query: ForecastQuery, history: HistoricalData) -> ForecastResult:
        monthly_income = calculate_monthly_average(history.income_transactions)
        monthly_expenses = calculate_monthly_average(history.expense_transactions)
        forecast_months = calculate_months_difference(query.start_date, query.end_date)

        accuracy = calculate_forecasting_accuracy(history)
        confidence = to_confidence_level(accuracy)

        base_scenario = self.scenario_generator.build_base_scenario(
            monthly_income, monthly_expenses, forecast_months, confidence
        )
        scenarios = self.scenario_generator.generate_scenarios(base_scenario)

        return ForecastResult(
            start_date=query.start_date,
            end_date=query.end_date,
            base_scenario=base_scenario,
            scenarios=scenarios,
            category_forecasts=self._category_forecasts(history, forecast_months),
            monthly_projections=self._monthly_projections(query, base_scenario, forecast_months, accuracy),
            risk_factors=self.risk_analyzer.analyze_forecast_risks(history),
            methodology=self._methodology(query, history, forecast_months, accuracy)
        )

    def _category_forecasts(self, history: HistoricalData, forecast_months: int) -> List[CategoryForecast]:
        """Expense categories projected from their own monthly average and trend."""
        forecasts = []

        for category_id, transactions in group_by_category(history.expense_transactions).items():
            monthly_average = calculate_monthly_average(transactions)
            direction, change = calculate_category_trend(transactions)

            forecasts.append(CategoryForecast(
                category_id=category_id,
                category_name=category_name_for(transactions),
                projected_amount=round_money(monthly_average * forecast_months),
                confidence=to_confidence_level(calculate_consistency(transactions)),
                trend=direction,
                factors=[
                    {
                        "factor": "historical_average",
                        "impact": round_money(monthly_average),
                        "weight": HISTORICAL_AVERAGE_WEIGHT
                    },
                    {
                        "factor": "trend_adjustment",
                        "impact": round(change, 4),
                        "weight": TREND_ADJUSTMENT_WEIGHT
                    }
                ]
            ))

        forecasts.sort(key=lambda f: f.projected_amount, reverse=True)
        return forecasts

    def _monthly_projections(
        self,
        query: ForecastQuery,
        base_scenario: BaseScenario,
        forecast_months: int,
        accuracy: float
    ) -> List[MonthlyProjection]:
        """Spread the base projection evenly over the calendar months of the period."""
        months = max(1, forecast_months)
        income = base_scenario.projected_income / months
        expenses = base_scenario.projected_expenses / months
        net = income - expenses

        return [
            MonthlyProjection(
                month=month_start.strftime("%Y-%m"),
                projected_income=round_money(income),
                projected_expenses=round_money(expenses),
                projected_net_worth=round_money(net),
                projected_savings=round_money(net * BASE_SAVINGS_RATE),
                confidence=accuracy
            )
            for month_start in month_starts(query.start_date, query.end_date)
        ]

    def _methodology(
        self,
        query: ForecastQuery,
        history: HistoricalData,
        forecast_months: int,
        accuracy: float
    ) -> Methodology:
        score = score_forecasting_accuracy(history)

        parameters = {
            "historical_period": history.history_months,
            "forecast_period": forecast_months,
            "confidence_threshold": query.confidence_threshold,
            "sample_size": history.sample_size,
            "accuracy_components": {
                name: round(value, 2) for name, value in score.component_scores.items()
            }
        }
        if query.algorithm:
            parameters["requested_algorithm"] = query.algorithm

        return Methodology(
            algorithm=select_best_forecasting_algorithm(history),
            accuracy=accuracy,
            parameters=parameters,
            training_start=history.window_start,
            training_end=history.window_end
        )
