"""
Risk Factor Analysis

Flags conditions that make a forecast less reliable or its outcome
worse: volatile income or spending, seasonal swings, falling income,
spending concentrated in one category, and unstable or negative cash
flow. Severity comes from each factor's probability.
"""

import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from src.patterns.threshold_classification import create_severity_classifier

from .feature_extractors import (
    MIN_CONSISTENCY_SAMPLES,
    calculate_consistency,
    calculate_trend_slope,
    detect_seasonality,
    detect_trend,
    group_by_category
)
from .historical_data import HistoricalData
from .models import CashFlowPredictions, DailyFlow, RiskFactor

logger = logging.getLogger(__name__)

VOLATILITY_CONSISTENCY_THRESHOLD = 0.8
CATEGORY_CONCENTRATION_THRESHOLD = 0.5
CASH_FLOW_VOLATILITY_THRESHOLD = 0.5
SEASONAL_RISK_PROBABILITY = 0.7


class RiskFactorAnalyzer:
    """
    Identifies forecast risk factors.

    Example:
    ```python
    analyzer = RiskFactorAnalyzer()
    for risk in analyzer.analyze_forecast_risks(history):
        print(f"{risk.severity}: {risk.message}")
    ```
    """

    def __init__(self, consistency_threshold: float = VOLATILITY_CONSISTENCY_THRESHOLD):
        self.consistency_threshold = consistency_threshold
        self.severity_classifier = create_severity_classifier()

    def _risk(self, factor: str, probability: float, message: str, mitigation: str) -> RiskFactor:
        probability = max(0.0, min(1.0, probability))
        return RiskFactor(
            factor=factor,
            severity=self.severity_classifier.label_for(probability),
            probability=round(probability, 4),
            message=message,
            mitigation=mitigation
        )

    def _volatility_risks(self, historical_data: HistoricalData) -> List[RiskFactor]:
        risks = []

        income = historical_data.income_transactions
        income_consistency = calculate_consistency(income)
        if len(income) >= MIN_CONSISTENCY_SAMPLES and income_consistency < self.consistency_threshold:
            risks.append(self._risk(
                "income_volatility",
                1 - income_consistency,
                "Income shows high volatility, making predictions less reliable",
                "Consider building emergency fund and diversifying income sources"
            ))

        expenses = historical_data.expense_transactions
        expense_consistency = calculate_consistency(expenses)
        if len(expenses) >= MIN_CONSISTENCY_SAMPLES and expense_consistency < self.consistency_threshold:
            risks.append(self._risk(
                "expense_volatility",
                1 - expense_consistency,
                "Expenses show high volatility, making budget planning difficult",
                "Implement stricter budget controls and expense tracking"
            ))

        return risks

    def _concentration_risk(self, historical_data: HistoricalData) -> Optional[RiskFactor]:
        categories = group_by_category(historical_data.expense_transactions)
        if len(categories) < 2:
            return None

        totals = {key: sum(t.amount for t in items) for key, items in categories.items()}
        grand_total = sum(totals.values())
        if grand_total <= 0:
            return None

        top_category, top_total = max(totals.items(), key=lambda item: item[1])
        share = top_total / grand_total
        if share <= CATEGORY_CONCENTRATION_THRESHOLD:
            return None

        return self._risk(
            "category_concentration",
            share,
            f"{share:.0%} of spending falls in a single category ({top_category})",
            "Review the dominant category for savings or renegotiation opportunities"
        )

    def analyze_forecast_risks(self, historical_data: HistoricalData) -> List[RiskFactor]:
        """Risk factors for a multi-month financial forecast."""
        risks = self._volatility_risks(historical_data)

        if detect_seasonality(historical_data.expense_transactions):
            risks.append(self._risk(
                "seasonal_variations",
                SEASONAL_RISK_PROBABILITY,
                "Spending patterns show seasonal variations that may not be captured in forecasts",
                "Adjust forecasts for seasonal factors and plan accordingly"
            ))

        income = historical_data.income_transactions
        if detect_trend(income):
            slope = calculate_trend_slope(income)
            if slope < 0:
                mean_income = sum(t.amount for t in income) / len(income)
                decline = abs(slope) * len(income) / mean_income if mean_income else 1.0
                risks.append(self._risk(
                    "declining_income",
                    decline,
                    "Income has been trending downward over the history window",
                    "Plan for lower income and prioritise essential expenses"
                ))

        concentration = self._concentration_risk(historical_data)
        if concentration is not None:
            risks.append(concentration)

        logger.debug(f"Identified {len(risks)} forecast risk factors")
        return risks

    def analyze_cash_flow_risks(
        self,
        historical_data: HistoricalData,
        daily_flows: Sequence[DailyFlow],
        predictions: CashFlowPredictions
    ) -> List[RiskFactor]:
        """Risk factors for a daily cash flow prediction."""
        risks = []

        volatility = cash_flow_volatility(daily_flows)
        if volatility > CASH_FLOW_VOLATILITY_THRESHOLD:
            shown = "n/a" if math.isinf(volatility) else f"{volatility * 100:.1f}%"
            risks.append(self._risk(
                "cash_flow_volatility",
                min(1.0, volatility),
                f"Cash flow shows high volatility ({shown} coefficient of variation)",
                "Maintain higher cash reserves and implement better cash flow management"
            ))

        risks.extend(self._volatility_risks(historical_data))

        if predictions.projected_net_cash_flow < 0:
            outflows = predictions.projected_outflows
            shortfall = abs(predictions.projected_net_cash_flow) / outflows if outflows else 1.0
            risks.append(self._risk(
                "negative_cash_flow",
                shortfall,
                "Projected outflows exceed projected inflows for the period",
                "Reduce discretionary spending or schedule income ahead of large payments"
            ))

        if predictions.projected_ending_balance < 0:
            risks.append(self._risk(
                "negative_ending_balance",
                1.0,
                "Projected balance falls below zero by the end of the period",
                "Arrange a cash buffer or defer non-essential payments"
            ))

        logger.debug(f"Identified {len(risks)} cash flow risk factors")
        return risks


def cash_flow_volatility(daily_flows: Sequence[DailyFlow]) -> float:
    """Coefficient of variation of daily net flow (inf when the mean is 0 but flows vary)."""
    if not daily_flows:
        return 0.0

    net_flows = np.array([day.net_flow for day in daily_flows], dtype=float)
    mean = float(np.mean(net_flows))
    std_dev = float(np.std(net_flows))

    if std_dev == 0:
        return 0.0
    if mean == 0:
        return math.inf
    return std_dev / abs(mean)
