"""
Forecasting Module for the Finance Forecasting Engine

Multi-month financial forecasts and short-horizon cash flow predictions
built from a user's transaction history.
"""

from .exceptions import (
    ForecastingError,
    ValidationError,
    InsufficientDataError
)
from .models import (
    TransactionType,
    ForecastingAlgorithm,
    ConfidenceLevel,
    ForecastQuery,
    TransactionSample,
    TransactionFilter,
    DailyFlow,
    ForecastResult,
    CashFlowResult
)
from .providers import (
    TransactionDataProvider,
    BalanceProvider,
    InMemoryTransactionProvider
)
from .historical_data import (
    HistoricalData,
    HistoricalDataAggregator,
    group_transactions_by_date
)
from .algorithm_selector import select_algorithm, select_best_forecasting_algorithm
from .scenarios import ScenarioGenerator
from .risk_analyzer import RiskFactorAnalyzer
from .financial_forecaster import FinancialForecaster
from .cash_flow_forecaster import CashFlowForecaster

__all__ = [
    # Errors
    'ForecastingError',
    'ValidationError',
    'InsufficientDataError',
    # Data model
    'TransactionType',
    'ForecastingAlgorithm',
    'ConfidenceLevel',
    'ForecastQuery',
    'TransactionSample',
    'TransactionFilter',
    'DailyFlow',
    'ForecastResult',
    'CashFlowResult',
    # Providers
    'TransactionDataProvider',
    'BalanceProvider',
    'InMemoryTransactionProvider',
    # Pipeline
    'HistoricalData',
    'HistoricalDataAggregator',
    'group_transactions_by_date',
    'select_algorithm',
    'select_best_forecasting_algorithm',
    'ScenarioGenerator',
    'RiskFactorAnalyzer',
    # Orchestrators
    'FinancialForecaster',
    'CashFlowForecaster',
]
