"""
Scenario Generation

Builds the base projection and the three weighted scenarios bracketing
it. Scenario probabilities are fixed constants (0.2 / 0.6 / 0.2) and do
not depend on the data.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from .models import (
    BaseScenario,
    CashFlowPredictions,
    CashFlowScenario,
    ConfidenceLevel,
    KeyAssumption,
    Scenario
)

logger = logging.getLogger(__name__)

BASE_SAVINGS_RATE = 0.20


class ScenarioName(Enum):
    """Scenario names in reporting order"""
    OPTIMISTIC = "optimistic"    # +20% income, -10% expenses
    REALISTIC = "realistic"      # Base projection
    PESSIMISTIC = "pessimistic"  # -10% income, +20% expenses


@dataclass(frozen=True)
class ScenarioProfile:
    """Fixed adjustments defining one scenario"""
    name: ScenarioName
    probability: float
    income_factor: float
    expense_factor: float
    savings_rate: float
    assumptions: Tuple[Tuple[str, float, float], ...]
    cash_flow_assumptions: Tuple[Tuple[str, float, float], ...]

    @property
    def is_base(self) -> bool:
        return self.name == ScenarioName.REALISTIC


SCENARIO_PROFILES: Tuple[ScenarioProfile, ...] = (
    ScenarioProfile(
        name=ScenarioName.OPTIMISTIC,
        probability=0.2,
        income_factor=1.20,
        expense_factor=0.90,
        savings_rate=0.25,
        assumptions=(
            ("Income increases by 20%", 0.3, 0.6),
            ("Expenses decrease by 10%", 0.2, 0.7),
            ("No major unexpected expenses", 0.1, 0.8),
        ),
        cash_flow_assumptions=(
            ("Higher than expected income", 0.3, 0.6),
            ("Lower than expected expenses", 0.2, 0.7),
        )
    ),
    ScenarioProfile(
        name=ScenarioName.REALISTIC,
        probability=0.6,
        income_factor=1.0,
        expense_factor=1.0,
        savings_rate=BASE_SAVINGS_RATE,
        assumptions=(
            ("Historical trends continue", 0.4, 0.8),
            ("No major changes in spending patterns", 0.3, 0.7),
            ("Stable income source", 0.3, 0.8),
        ),
        cash_flow_assumptions=(
            ("Historical patterns continue", 0.4, 0.8),
            ("No major changes", 0.3, 0.7),
        )
    ),
    ScenarioProfile(
        name=ScenarioName.PESSIMISTIC,
        probability=0.2,
        income_factor=0.90,
        expense_factor=1.20,
        savings_rate=0.10,
        assumptions=(
            ("Income decreases by 10%", 0.3, 0.5),
            ("Expenses increase by 20%", 0.2, 0.6),
            ("Unexpected major expenses", 0.1, 0.4),
        ),
        cash_flow_assumptions=(
            ("Lower than expected income", 0.3, 0.5),
            ("Higher than expected expenses", 0.2, 0.6),
        )
    ),
)


def round_money(value: float) -> float:
    """Round to cents; non-finite values collapse to 0."""
    if value is None or not math.isfinite(value):
        return 0.0
    return round(value, 2)


def _assumptions(entries: Tuple[Tuple[str, float, float], ...]) -> List[KeyAssumption]:
    return [KeyAssumption(text, impact, confidence) for text, impact, confidence in entries]


class ScenarioGenerator:
    """
    Generates base and alternative projections.

    Example:
    ```python
    generator = ScenarioGenerator()
    base = generator.build_base_scenario(4200.0, 3100.0, months=3, confidence=ConfidenceLevel.HIGH)
    for scenario in generator.generate_scenarios(base):
        print(scenario.name, scenario.probability, scenario.projected_net_worth)
    ```
    """

    def __init__(self, profiles: Tuple[ScenarioProfile, ...] = SCENARIO_PROFILES):
        total = sum(p.probability for p in profiles)
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Scenario probabilities sum to {total}, not 1.0")
        self.profiles = profiles

    def build_base_scenario(
        self,
        monthly_income: float,
        monthly_expenses: float,
        months: int,
        confidence: ConfidenceLevel
    ) -> BaseScenario:
        """Project monthly averages across the forecast period."""
        projected_income = monthly_income * months
        projected_expenses = monthly_expenses * months
        projected_net_worth = projected_income - projected_expenses

        return BaseScenario(
            projected_income=round_money(projected_income),
            projected_expenses=round_money(projected_expenses),
            projected_net_worth=round_money(projected_net_worth),
            projected_savings=round_money(projected_net_worth * BASE_SAVINGS_RATE),
            confidence=confidence
        )

    def _scenario_confidence(self, profile: ScenarioProfile, base_confidence: ConfidenceLevel) -> ConfidenceLevel:
        if profile.is_base:
            return base_confidence
        return base_confidence.lowered()

    def generate_scenarios(self, base: BaseScenario) -> List[Scenario]:
        """Optimistic, realistic and pessimistic scenarios, in that order."""
        scenarios = []

        for profile in self.profiles:
            if profile.is_base:
                income = base.projected_income
                expenses = base.projected_expenses
                net_worth = base.projected_net_worth
                savings = base.projected_savings
            else:
                income = base.projected_income * profile.income_factor
                expenses = base.projected_expenses * profile.expense_factor
                net_worth = income - expenses
                savings = net_worth * profile.savings_rate

            scenarios.append(Scenario(
                name=profile.name.value,
                probability=profile.probability,
                projected_income=round_money(income),
                projected_expenses=round_money(expenses),
                projected_net_worth=round_money(net_worth),
                projected_savings=round_money(savings),
                confidence=self._scenario_confidence(profile, base.confidence),
                key_assumptions=_assumptions(profile.assumptions)
            ))

        return scenarios

    def generate_cash_flow_scenarios(
        self,
        predictions: CashFlowPredictions,
        current_balance: float
    ) -> List[CashFlowScenario]:
        """Apply the scenario factors to projected inflows and outflows."""
        scenarios = []

        for profile in self.profiles:
            inflows = predictions.projected_inflows * profile.income_factor
            outflows = predictions.projected_outflows * profile.expense_factor
            net_flow = inflows - outflows

            scenarios.append(CashFlowScenario(
                name=profile.name.value,
                probability=profile.probability,
                projected_inflows=round_money(inflows),
                projected_outflows=round_money(outflows),
                projected_net_cash_flow=round_money(net_flow),
                projected_ending_balance=round_money(current_balance + net_flow),
                confidence=self._scenario_confidence(profile, predictions.confidence),
                key_assumptions=_assumptions(profile.cash_flow_assumptions)
            ))

        return scenarios
