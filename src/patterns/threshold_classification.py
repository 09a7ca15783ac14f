"""
Threshold Classification Pattern

Converts continuous scores into discrete labels using contiguous bands.
Used to bucket forecast accuracy into confidence levels and risk
probabilities into severities.

Bands must tile the score range without gaps so that every score maps
to exactly one label and a higher score never maps to a lower band.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
import logging

logger = logging.getLogger(__name__)


@dataclass
class ScoreBand:
    """One contiguous band of the score range: [min_score, max_score)."""
    label: str
    min_score: float
    max_score: float
    description: str = ""


@dataclass
class BandClassification:
    """Result of classifying a score."""
    score: float
    label: str
    description: str
    band_details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "label": self.label,
            "description": self.description,
            "band_details": self.band_details
        }


class ThresholdClassifier:
    """
    Classifies continuous scores into ordered bands.

    Scores outside the configured range are clamped, so classification
    is total. The top band is closed on its upper edge.

    Example for forecast confidence:
    ```python
    classifier = ThresholdClassifier([
        ScoreBand("low", 0.0, 0.6, "Forecast is indicative only"),
        ScoreBand("medium", 0.6, 0.8, "Forecast is reasonably reliable"),
        ScoreBand("high", 0.8, 1.0, "Forecast is well supported by history"),
    ])

    result = classifier.classify(0.72)
    print(result.label)  # "medium"
    ```
    """

    def __init__(self, bands: List[ScoreBand]):
        if not bands:
            raise ValueError("At least one band must be defined")

        self.bands = sorted(bands, key=lambda b: b.min_score)
        self._validate_bands()

    def _validate_bands(self) -> None:
        """Reject gaps or overlaps between adjacent bands."""
        for current, next_band in zip(self.bands, self.bands[1:]):
            if current.max_score != next_band.min_score:
                raise ValueError(
                    f"Band gap/overlap between {current.label} "
                    f"({current.max_score}) and {next_band.label} ({next_band.min_score})"
                )
        for band in self.bands:
            if band.max_score <= band.min_score:
                raise ValueError(f"Band {band.label} has an empty range")

    @property
    def min_score(self) -> float:
        return self.bands[0].min_score

    @property
    def max_score(self) -> float:
        return self.bands[-1].max_score

    def band_for(self, score: float) -> ScoreBand:
        clamped = max(self.min_score, min(self.max_score, score))

        for band in self.bands:
            if band.min_score <= clamped < band.max_score:
                return band

        # Only the closed upper edge reaches here
        return self.bands[-1]

    def classify(self, score: float) -> BandClassification:
        """Classify a score into its band."""
        band = self.band_for(score)

        return BandClassification(
            score=round(score, 4),
            label=band.label,
            description=band.description,
            band_details={
                "min_score": band.min_score,
                "max_score": band.max_score,
                "position_in_band": self._calculate_band_position(score, band)
            }
        )

    def label_for(self, score: float) -> str:
        return self.band_for(score).label

    def _calculate_band_position(self, score: float, band: ScoreBand) -> float:
        """Position within the band (0-100%)."""
        band_size = band.max_score - band.min_score
        clamped = max(band.min_score, min(band.max_score, score))
        position = ((clamped - band.min_score) / band_size) * 100
        return round(position, 1)

    def get_band_summary(self) -> List[Dict[str, Any]]:
        return [
            {
                "label": b.label,
                "min_score": b.min_score,
                "max_score": b.max_score,
                "description": b.description
            }
            for b in self.bands
        ]


# =============================================================================
# Factory Functions
# =============================================================================

CONFIDENCE_MEDIUM_FLOOR = 0.6
CONFIDENCE_HIGH_FLOOR = 0.8


def create_confidence_classifier(
    medium_floor: float = CONFIDENCE_MEDIUM_FLOOR,
    high_floor: float = CONFIDENCE_HIGH_FLOOR
) -> ThresholdClassifier:
    """Bucket accuracy scores in [0, 1] into low / medium / high."""
    return ThresholdClassifier([
        ScoreBand("low", 0.0, medium_floor,
                  "Limited or erratic history; treat the forecast as indicative"),
        ScoreBand("medium", medium_floor, high_floor,
                  "Reasonably consistent history"),
        ScoreBand("high", high_floor, 1.0,
                  "Long, consistent history supports the forecast"),
    ])


def create_severity_classifier(
    medium_floor: float = 0.25,
    high_floor: float = 0.5,
    bands: Optional[List[ScoreBand]] = None
) -> ThresholdClassifier:
    """Bucket risk probabilities in [0, 1] into low / medium / high severity."""
    return ThresholdClassifier(bands or [
        ScoreBand("low", 0.0, medium_floor, "Unlikely to affect the outcome"),
        ScoreBand("medium", medium_floor, high_floor, "May noticeably shift the outcome"),
        ScoreBand("high", high_floor, 1.0, "Likely to shift the outcome"),
    ])
