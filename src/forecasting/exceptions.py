"""
Forecasting Errors

Exceptions raised by the forecasting engine. The web layer maps them
to HTTP status codes.
"""

FORECAST_INSUFFICIENT_DATA_TEMPLATE = (
    "Insufficient historical data for accurate forecasting. "
    "Need at least {min_days} days of data."
)
CASH_FLOW_INSUFFICIENT_DATA_TEMPLATE = (
    "Insufficient historical data for accurate cash flow prediction. "
    "Need at least {min_days} days of data."
)

# Messages under the default 30-day minimum
FORECAST_INSUFFICIENT_DATA_MESSAGE = FORECAST_INSUFFICIENT_DATA_TEMPLATE.format(min_days=30)
CASH_FLOW_INSUFFICIENT_DATA_MESSAGE = CASH_FLOW_INSUFFICIENT_DATA_TEMPLATE.format(min_days=30)


class ForecastingError(Exception):
    """Base class for forecasting engine errors"""


class ValidationError(ForecastingError, ValueError):
    """Query failed validation (missing or inverted dates, bad threshold)"""


class InsufficientDataError(ForecastingError):
    """Not enough transaction history to produce a forecast"""

    def __init__(self, message: str = FORECAST_INSUFFICIENT_DATA_MESSAGE, distinct_days: int = 0):
        super().__init__(message)
        self.message = message
        self.distinct_days = distinct_days
