"""
Weighted Scoring Pattern

A configurable multi-component scoring engine. Each component's raw
value is normalized to a 0-100 scale and the weighted sum gives the
overall score.

Use cases:
- Forecast accuracy (history length, volume, consistency)
- Any composite quality score over bounded inputs
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
from enum import Enum
import logging
import math

logger = logging.getLogger(__name__)


class ScoreDirection(Enum):
    """Whether higher values are better or worse."""
    HIGHER_IS_BETTER = "higher_is_better"
    LOWER_IS_BETTER = "lower_is_better"


@dataclass
class ScoreComponent:
    """Definition of a single scoring component."""
    name: str
    weight: float  # 0.0 to 1.0, all weights should sum to 1.0
    direction: ScoreDirection = ScoreDirection.HIGHER_IS_BETTER
    min_value: float = 0.0
    max_value: float = 100.0
    description: str = ""

    def normalize(self, value: float) -> float:
        """Normalize a value to 0-100 scale."""
        if value is None or (isinstance(value, float) and math.isnan(value)):
            value = self.min_value

        if self.max_value == self.min_value:
            return 100.0 if value >= self.max_value else 0.0

        value = max(self.min_value, min(self.max_value, value))
        normalized = ((value - self.min_value) / (self.max_value - self.min_value)) * 100

        if self.direction == ScoreDirection.LOWER_IS_BETTER:
            normalized = 100 - normalized

        return round(normalized, 2)


@dataclass
class ScoreResult:
    """Result of scoring one subject."""
    subject: str
    overall_score: float
    component_scores: Dict[str, float]
    component_details: Dict[str, Dict[str, Any]]
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def fraction(self) -> float:
        """Overall score on a 0-1 scale."""
        return self.overall_score / 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject": self.subject,
            "overall_score": self.overall_score,
            "component_scores": self.component_scores,
            "component_details": self.component_details,
            "metadata": self.metadata
        }


class WeightedScoringEngine:
    """
    A configurable multi-component weighted scoring engine.

    Example for forecast accuracy:
    ```python
    engine = WeightedScoringEngine([
        ScoreComponent("history_months", weight=0.25, min_value=0, max_value=12),
        ScoreComponent("transaction_count", weight=0.15, min_value=0, max_value=180),
        ScoreComponent("consistency", weight=0.60, min_value=0, max_value=1),
    ])

    result = engine.score({"history_months": 12, "transaction_count": 240, "consistency": 0.85})
    print(f"Accuracy: {result.fraction:.2f}")
    ```
    """

    def __init__(self, components: List[ScoreComponent]):
        if not components:
            raise ValueError("At least one scoring component is required")

        total_weight = sum(c.weight for c in components)
        if total_weight <= 0:
            raise ValueError("Component weights must sum to a positive value")

        if abs(total_weight - 1.0) > 0.01:
            logger.warning(f"Component weights sum to {total_weight}, not 1.0. Normalizing...")
            components = [
                ScoreComponent(
                    name=c.name,
                    weight=c.weight / total_weight,
                    direction=c.direction,
                    min_value=c.min_value,
                    max_value=c.max_value,
                    description=c.description
                )
                for c in components
            ]

        self.components = {c.name: c for c in components}

    def score(
        self,
        values: Dict[str, float],
        subject: str = "unknown",
        metadata: Optional[Dict[str, Any]] = None
    ) -> ScoreResult:
        """Calculate weighted score for a subject."""
        component_scores = {}
        component_details = {}
        weighted_sum = 0.0

        for name, component in self.components.items():
            raw_value = values.get(name)

            if raw_value is None:
                logger.warning(f"Missing value for component '{name}', using min value")
                raw_value = component.min_value

            normalized = component.normalize(raw_value)
            component_scores[name] = normalized

            weighted_contribution = normalized * component.weight
            weighted_sum += weighted_contribution

            component_details[name] = {
                "raw_value": raw_value,
                "normalized_score": normalized,
                "weight": component.weight,
                "weighted_contribution": round(weighted_contribution, 2),
                "direction": component.direction.value,
                "description": component.description
            }

        return ScoreResult(
            subject=subject,
            overall_score=round(weighted_sum, 2),
            component_scores=component_scores,
            component_details=component_details,
            metadata=metadata or {}
        )


# =============================================================================
# Factory Functions
# =============================================================================

def create_forecast_accuracy_engine() -> WeightedScoringEngine:
    """Score how far a transaction history can be trusted for forecasting."""
    components = [
        ScoreComponent(
            name="history_months",
            weight=0.25,
            direction=ScoreDirection.HIGHER_IS_BETTER,
            min_value=0,
            max_value=12,
            description="Calendar months spanned by the transactions"
        ),
        ScoreComponent(
            name="transaction_count",
            weight=0.15,
            direction=ScoreDirection.HIGHER_IS_BETTER,
            min_value=0,
            max_value=180,
            description="Income and expense transactions in the window"
        ),
        ScoreComponent(
            name="consistency",
            weight=0.60,
            direction=ScoreDirection.HIGHER_IS_BETTER,
            min_value=0,
            max_value=1,
            description="Mean income/expense consistency (inverse coefficient of variation)"
        ),
    ]

    return WeightedScoringEngine(components)
