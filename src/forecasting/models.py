"""
Forecasting Data Model

Query, transaction sample and result types shared by the aggregator,
feature extractors, scenario generator and orchestrators.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Any, Optional


class TransactionType(Enum):
    """Transaction types supplied by the transaction store"""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    ADJUSTMENT = "adjustment"


class ForecastingAlgorithm(Enum):
    """Heuristic method labels reported in the methodology block"""
    ARIMA = "arima"
    EXPONENTIAL_SMOOTHING = "exponential_smoothing"
    LINEAR_REGRESSION = "linear_regression"
    NEURAL_NETWORK = "neural_network"
    HYBRID = "hybrid"


class ConfidenceLevel(Enum):
    """Categorical confidence buckets"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Ordering helper (higher = more confident)."""
        return {
            ConfidenceLevel.LOW: 0,
            ConfidenceLevel.MEDIUM: 1,
            ConfidenceLevel.HIGH: 2
        }[self]

    def lowered(self) -> "ConfidenceLevel":
        """One bucket lower, bottoming out at LOW."""
        by_rank = sorted(ConfidenceLevel, key=lambda level: level.rank)
        return by_rank[max(0, self.rank - 1)]


def _iso(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


@dataclass(frozen=True)
class ForecastQuery:
    """Forecast / cash flow request"""
    user_id: str
    start_date: Optional[date]
    end_date: Optional[date]
    categories: Optional[List[str]] = None
    transaction_types: Optional[List[TransactionType]] = None
    accounts: Optional[List[str]] = None
    include_recurring: bool = True
    confidence_threshold: float = 0.7
    model_type: str = "forecasting"
    algorithm: Optional[str] = None


@dataclass(frozen=True)
class TransactionSample:
    """Read-only view of a stored transaction"""
    amount: float
    date: date
    type: TransactionType
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    account_id: Optional[str] = None
    is_recurring: bool = False

    @property
    def day(self) -> date:
        """Calendar day, whether the source holds a date or a datetime."""
        if isinstance(self.date, datetime):
            return self.date.date()
        return self.date


@dataclass(frozen=True)
class TransactionFilter:
    """Filter handed to a TransactionDataProvider"""
    user_id: str
    start_date: date
    end_date: date
    categories: Optional[List[str]] = None
    transaction_types: Optional[List[TransactionType]] = None
    accounts: Optional[List[str]] = None
    include_recurring: bool = True


@dataclass
class DailyFlow:
    """Aggregated flows for one calendar day"""
    date: str
    inflows: float = 0.0
    outflows: float = 0.0
    net_flow: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "inflows": self.inflows,
            "outflows": self.outflows,
            "net_flow": self.net_flow
        }


@dataclass
class KeyAssumption:
    """One stated assumption behind a scenario"""
    assumption: str
    impact: float
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assumption": self.assumption,
            "impact": self.impact,
            "confidence": self.confidence
        }


@dataclass
class BaseScenario:
    """Central projection over the whole forecast period"""
    projected_income: float
    projected_expenses: float
    projected_net_worth: float
    projected_savings: float
    confidence: ConfidenceLevel

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projected_income": self.projected_income,
            "projected_expenses": self.projected_expenses,
            "projected_net_worth": self.projected_net_worth,
            "projected_savings": self.projected_savings,
            "confidence": self.confidence.value
        }


@dataclass
class Scenario:
    """Named, weighted alternative to the base projection"""
    name: str
    probability: float
    projected_income: float
    projected_expenses: float
    projected_net_worth: float
    projected_savings: float
    confidence: ConfidenceLevel
    key_assumptions: List[KeyAssumption] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "probability": self.probability,
            "projected_income": self.projected_income,
            "projected_expenses": self.projected_expenses,
            "projected_net_worth": self.projected_net_worth,
            "projected_savings": self.projected_savings,
            "confidence": self.confidence.value,
            "key_assumptions": [a.to_dict() for a in self.key_assumptions]
        }


@dataclass
class CategoryForecast:
    """Projected spending for one category"""
    category_id: str
    category_name: str
    projected_amount: float
    confidence: ConfidenceLevel
    trend: str
    factors: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category_id": self.category_id,
            "category_name": self.category_name,
            "projected_amount": self.projected_amount,
            "confidence": self.confidence.value,
            "trend": self.trend,
            "factors": self.factors
        }


@dataclass
class MonthlyProjection:
    """Month-by-month forecast row"""
    month: str
    projected_income: float
    projected_expenses: float
    projected_net_worth: float
    projected_savings: float
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "projected_income": self.projected_income,
            "projected_expenses": self.projected_expenses,
            "projected_net_worth": self.projected_net_worth,
            "projected_savings": self.projected_savings,
            "confidence": self.confidence
        }


@dataclass
class RiskFactor:
    """A flagged risk to the forecast's reliability or outcome"""
    factor: str
    severity: str
    probability: float
    message: str
    mitigation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "factor": self.factor,
            "severity": self.severity,
            "probability": self.probability,
            "message": self.message,
            "mitigation": self.mitigation
        }


@dataclass
class Methodology:
    """How a forecast was produced"""
    algorithm: ForecastingAlgorithm
    accuracy: float
    parameters: Dict[str, Any] = field(default_factory=dict)
    training_start: Optional[date] = None
    training_end: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "algorithm": self.algorithm.value,
            "accuracy": self.accuracy,
            "parameters": self.parameters
        }
        if self.training_start is not None:
            data["training_period"] = {
                "start_date": _iso(self.training_start),
                "end_date": _iso(self.training_end)
            }
        return data


@dataclass
class ForecastResult:
    """Multi-month financial forecast"""
    start_date: date
    end_date: date
    base_scenario: BaseScenario
    scenarios: List[Scenario]
    category_forecasts: List[CategoryForecast]
    monthly_projections: List[MonthlyProjection]
    risk_factors: List[RiskFactor]
    methodology: Methodology

    def to_dict(self) -> Dict[str, Any]:
        return {
            "forecast_period": {
                "start_date": _iso(self.start_date),
                "end_date": _iso(self.end_date)
            },
            "base_scenario": self.base_scenario.to_dict(),
            "scenarios": [s.to_dict() for s in self.scenarios],
            "category_forecasts": [c.to_dict() for c in self.category_forecasts],
            "monthly_projections": [m.to_dict() for m in self.monthly_projections],
            "risk_factors": [r.to_dict() for r in self.risk_factors],
            "methodology": self.methodology.to_dict()
        }


@dataclass
class CashFlowPredictions:
    """Headline cash flow numbers for the prediction horizon"""
    projected_inflows: float
    projected_outflows: float
    projected_net_cash_flow: float
    projected_ending_balance: float
    confidence: ConfidenceLevel

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projected_inflows": self.projected_inflows,
            "projected_outflows": self.projected_outflows,
            "projected_net_cash_flow": self.projected_net_cash_flow,
            "projected_ending_balance": self.projected_ending_balance,
            "confidence": self.confidence.value
        }


@dataclass
class CashFlowMonthlyProjection:
    """Month slice of a cash flow prediction with running balance"""
    month: str
    projected_inflows: float
    projected_outflows: float
    projected_net_cash_flow: float
    projected_balance: float
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "projected_inflows": self.projected_inflows,
            "projected_outflows": self.projected_outflows,
            "projected_net_cash_flow": self.projected_net_cash_flow,
            "projected_balance": self.projected_balance,
            "confidence": self.confidence
        }


@dataclass
class CategoryCashFlowProjection:
    """Per-category inflow/outflow projection"""
    category_id: str
    category_name: str
    projected_inflows: float
    projected_outflows: float
    projected_net_amount: float
    confidence: ConfidenceLevel

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category_id": self.category_id,
            "category_name": self.category_name,
            "projected_inflows": self.projected_inflows,
            "projected_outflows": self.projected_outflows,
            "projected_net_amount": self.projected_net_amount,
            "confidence": self.confidence.value
        }


@dataclass
class CashFlowScenario:
    """Weighted alternative cash flow outcome"""
    name: str
    probability: float
    projected_inflows: float
    projected_outflows: float
    projected_net_cash_flow: float
    projected_ending_balance: float
    confidence: ConfidenceLevel
    key_assumptions: List[KeyAssumption] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "probability": self.probability,
            "projected_inflows": self.projected_inflows,
            "projected_outflows": self.projected_outflows,
            "projected_net_cash_flow": self.projected_net_cash_flow,
            "projected_ending_balance": self.projected_ending_balance,
            "confidence": self.confidence.value,
            "key_assumptions": [a.to_dict() for a in self.key_assumptions]
        }


@dataclass
class CashFlowResult:
    """Daily-granularity cash flow prediction"""
    start_date: date
    end_date: date
    current_balance: float
    predictions: CashFlowPredictions
    monthly_projections: List[CashFlowMonthlyProjection]
    category_projections: List[CategoryCashFlowProjection]
    risk_factors: List[RiskFactor]
    scenarios: List[CashFlowScenario]
    methodology: Methodology

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prediction_period": {
                "start_date": _iso(self.start_date),
                "end_date": _iso(self.end_date)
            },
            "current_balance": self.current_balance,
            "predictions": self.predictions.to_dict(),
            "monthly_projections": [m.to_dict() for m in self.monthly_projections],
            "category_projections": [c.to_dict() for c in self.category_projections],
            "risk_factors": [r.to_dict() for r in self.risk_factors],
            "scenarios": [s.to_dict() for s in self.scenarios],
            "methodology": self.methodology.to_dict()
        }
