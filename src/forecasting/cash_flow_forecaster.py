"""
Cash Flow Forecaster

Daily-granularity cash flow prediction from the last 90 days of
history. Average daily inflows and outflows are projected over the
prediction horizon, split into calendar months with a running balance,
broken down by category and bracketed by three scenarios.
"""

import logging
from datetime import timedelta
from typing import List, Optional

from .algorithm_selector import select_best_forecasting_algorithm
from .confidence import calculate_cash_flow_confidence, to_confidence_level
from .exceptions import CASH_FLOW_INSUFFICIENT_DATA_TEMPLATE
from .feature_extractors import (
    calculate_consistency,
    category_name_for,
    group_by_category,
    month_starts
)
from .historical_data import (
    CASH_FLOW_LOOKBACK_DAYS,
    MIN_HISTORY_DAYS,
    HistoricalData,
    HistoricalDataAggregator,
    validate_query
)
from .models import (
    CashFlowMonthlyProjection,
    CashFlowPredictions,
    CashFlowResult,
    CategoryCashFlowProjection,
    ForecastQuery,
    Methodology,
    TransactionType
)
from .providers import BalanceProvider, TransactionDataProvider
from .risk_analyzer import RiskFactorAnalyzer
from .scenarios import ScenarioGenerator, round_money

logger = logging.getLogger(__name__)

SMOOTHING_ALPHA = 0.3


class CashFlowForecaster:
    """
    Predicts cash flow over a short horizon.

    Example:
    ```python
    forecaster = CashFlowForecaster(provider)

    result = forecaster.generate_cash_flow_prediction(ForecastQuery(
        user_id="user-1",
        start_date=date(2024, 4, 1),
        end_date=date(2024, 5, 1)
    ))
    print(f"Ending balance: {result.predictions.projected_ending_balance}")
    for month in result.monthly_projections:
        print(month.month, month.projected_balance)
    ```
    """

    def __init__(
        self,
        provider: TransactionDataProvider,
        balance_provider: Optional[BalanceProvider] = None,
        lookback_days: int = CASH_FLOW_LOOKBACK_DAYS,
        min_history_days: int = MIN_HISTORY_DAYS,
        scenario_generator: Optional[ScenarioGenerator] = None,
        risk_analyzer: Optional[RiskFactorAnalyzer] = None
    ):
        """
        Initialize forecaster.

        Args:
            provider: Source of transaction history
            balance_provider: Source of the current balance; defaults to
                the transaction provider when it offers one
            lookback_days: History window preceding the prediction start
            min_history_days: Distinct days of history required
        """
        self.aggregator = HistoricalDataAggregator(
            provider,
            lookback_days=lookback_days,
            min_history_days=min_history_days,
            insufficient_data_template=CASH_FLOW_INSUFFICIENT_DATA_TEMPLATE
        )
        if balance_provider is None and isinstance(provider, BalanceProvider):
            balance_provider = provider
        self.balance_provider = balance_provider
        self.scenario_generator = scenario_generator or ScenarioGenerator()
        self.risk_analyzer = risk_analyzer or RiskFactorAnalyzer()

    def generate_cash_flow_prediction(self, query: ForecastQuery) -> CashFlowResult:
        """
        Predict inflows, outflows and balance over [start_date, end_date).

        Raises:
            ValidationError: the query is malformed (nothing is fetched)
            InsufficientDataError: fewer than 30 distinct days of history
        """
        query = validate_query(query)
        logger.info(
            f"Generating cash flow prediction for user {query.user_id} "
            f"({query.start_date} to {query.end_date})"
        )

        try:
            history = self.aggregator.load(query)
            result = self._build_prediction(query, history)
        except Exception as e:
            logger.error(f"Error in cash flow prediction for user {query.user_id}: {e}")
            raise

        logger.info(
            f"Cash flow prediction completed for user {query.user_id}: "
            f"net {result.predictions.projected_net_cash_flow}, "
            f"ending balance {result.predictions.projected_ending_balance}"
        )
        return result

    def _current_balance(self, user_id: str) -> float:
        if self.balance_provider is None:
            return 0.0
        return float(self.balance_provider.get_current_balance(user_id) or 0.0)

    def _build_prediction(self, query: ForecastQuery, history: HistoricalData) -> CashFlowResult:
        daily_flows = history.daily_flows
        observed_days = max(1, len(daily_flows))
        horizon_days = max(1, (query.end_date - query.start_date).days)

        avg_daily_inflow = sum(day.inflows for day in daily_flows) / observed_days
        avg_daily_outflow = sum(day.outflows for day in daily_flows) / observed_days

        projected_inflows = avg_daily_inflow * horizon_days
        projected_outflows = avg_daily_outflow * horizon_days
        net_cash_flow = projected_inflows - projected_outflows

        current_balance = self._current_balance(query.user_id)
        confidence_score = calculate_cash_flow_confidence(daily_flows)

        predictions = CashFlowPredictions(
            projected_inflows=round_money(projected_inflows),
            projected_outflows=round_money(projected_outflows),
            projected_net_cash_flow=round_money(net_cash_flow),
            projected_ending_balance=round_money(current_balance + net_cash_flow),
            confidence=to_confidence_level(confidence_score)
        )

        return CashFlowResult(
            start_date=query.start_date,
            end_date=query.end_date,
            current_balance=round_money(current_balance),
            predictions=predictions,
            monthly_projections=self._monthly_projections(
                query, avg_daily_inflow, avg_daily_outflow, current_balance, confidence_score
            ),
            category_projections=self._category_projections(history, horizon_days),
            risk_factors=self.risk_analyzer.analyze_cash_flow_risks(history, daily_flows, predictions),
            scenarios=self.scenario_generator.generate_cash_flow_scenarios(predictions, current_balance),
            methodology=Methodology(
                algorithm=select_best_forecasting_algorithm(history),
                accuracy=confidence_score,
                parameters={
                    "alpha": SMOOTHING_ALPHA,
                    "historical_days": len(daily_flows),
                    "forecast_days": horizon_days
                },
                training_start=history.window_start,
                training_end=history.window_end
            )
        )

    def _monthly_projections(
        self,
        query: ForecastQuery,
        avg_daily_inflow: float,
        avg_daily_outflow: float,
        current_balance: float,
        confidence_score: float
    ) -> List[CashFlowMonthlyProjection]:
        """One row per calendar month with days in [start_date, end_date)."""
        projections = []
        balance = current_balance

        for month_start in month_starts(query.start_date, query.end_date):
            next_month = (month_start + timedelta(days=32)).replace(day=1)
            period_start = max(month_start, query.start_date)
            period_end = min(next_month, query.end_date)
            days = (period_end - period_start).days
            if days <= 0:
                continue

            inflows = avg_daily_inflow * days
            outflows = avg_daily_outflow * days
            net = inflows - outflows
            balance += net

            projections.append(CashFlowMonthlyProjection(
                month=month_start.strftime("%Y-%m"),
                projected_inflows=round_money(inflows),
                projected_outflows=round_money(outflows),
                projected_net_cash_flow=round_money(net),
                projected_balance=round_money(balance),
                confidence=confidence_score
            ))

        return projections

    def _category_projections(
        self,
        history: HistoricalData,
        horizon_days: int
    ) -> List[CategoryCashFlowProjection]:
        """Per-category daily averages over the observed days, scaled to the horizon."""
        observed_days = max(1, history.distinct_days)
        flows = history.income_transactions + history.expense_transactions
        projections = []

        for category_id, transactions in group_by_category(flows).items():
            inflows = sum(t.amount for t in transactions if t.type == TransactionType.INCOME)
            outflows = sum(t.amount for t in transactions if t.type == TransactionType.EXPENSE)

            projected_inflows = inflows / observed_days * horizon_days
            projected_outflows = outflows / observed_days * horizon_days

            projections.append(CategoryCashFlowProjection(
                category_id=category_id,
                category_name=category_name_for(transactions),
                projected_inflows=round_money(projected_inflows),
                projected_outflows=round_money(projected_outflows),
                projected_net_amount=round_money(projected_inflows - projected_outflows),
                confidence=to_confidence_level(calculate_consistency(transactions))
            ))

        projections.sort(key=lambda p: abs(p.projected_net_amount), reverse=True)
        return projections
