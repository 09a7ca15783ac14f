"""
Patterns Module for the Finance Forecasting Engine

Reusable analytical patterns: band classification and weighted scoring.
"""

from .threshold_classification import (
    ThresholdClassifier,
    ScoreBand,
    BandClassification,
    create_confidence_classifier,
    create_severity_classifier
)

from .weighted_scoring import (
    WeightedScoringEngine,
    ScoreComponent,
    ScoreDirection,
    ScoreResult,
    create_forecast_accuracy_engine
)

__all__ = [
    # Threshold Classification
    'ThresholdClassifier',
    'ScoreBand',
    'BandClassification',
    'create_confidence_classifier',
    'create_severity_classifier',
    # Weighted Scoring
    'WeightedScoringEngine',
    'ScoreComponent',
    'ScoreDirection',
    'ScoreResult',
    'create_forecast_accuracy_engine',
]
