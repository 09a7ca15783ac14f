"""
Historical Data Aggregator

Loads a user's transaction history for the lookback window preceding a
forecast, splits it into income and expense series, buckets it by day
and enforces the minimum-history policy.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence

from .exceptions import (
    FORECAST_INSUFFICIENT_DATA_TEMPLATE,
    InsufficientDataError,
    ValidationError
)
from .feature_extractors import calculate_date_range, calculate_months_difference
from .models import (
    DailyFlow,
    ForecastQuery,
    TransactionFilter,
    TransactionSample,
    TransactionType
)
from .providers import TransactionDataProvider

logger = logging.getLogger(__name__)

MIN_HISTORY_DAYS = 30
FORECAST_LOOKBACK_DAYS = 365
CASH_FLOW_LOOKBACK_DAYS = 90


@dataclass
class HistoricalData:
    """History feeding one forecast"""
    transactions: List[TransactionSample]
    income_transactions: List[TransactionSample]
    expense_transactions: List[TransactionSample]
    window_start: date
    window_end: date
    distinct_days: int
    daily_flows: List[DailyFlow] = field(default_factory=list)

    @property
    def history_months(self) -> int:
        """Calendar months between the first and last transaction (0 when empty)."""
        if not self.transactions:
            return 0
        first_day, last_day = calculate_date_range(self.transactions)
        return calculate_months_difference(first_day, last_day)

    @property
    def sample_size(self) -> int:
        return len(self.transactions)


def _normalize_date(value, field_name: str) -> date:
    if value is None:
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise ValidationError(f"{field_name} must be a valid date")


def validate_query(query: ForecastQuery) -> ForecastQuery:
    """
    Check a query before any data is fetched.

    Returns:
        The query with its dates normalized to calendar days

    Raises:
        ValidationError: missing/invalid dates, start not before end,
            or a confidence threshold outside [0, 1]
    """
    if query is None:
        raise ValidationError("A forecast query is required")
    if not query.user_id:
        raise ValidationError("user_id is required")

    start_date = _normalize_date(query.start_date, "start_date")
    end_date = _normalize_date(query.end_date, "end_date")

    if start_date >= end_date:
        raise ValidationError("start_date must be before end_date")

    threshold = query.confidence_threshold
    if threshold is None or not isinstance(threshold, (int, float)) or math.isnan(threshold) \
            or not 0 <= threshold <= 1:
        raise ValidationError("confidence_threshold must be between 0 and 1")

    if start_date == query.start_date and end_date == query.end_date:
        return query

    return ForecastQuery(
        user_id=query.user_id,
        start_date=start_date,
        end_date=end_date,
        categories=query.categories,
        transaction_types=query.transaction_types,
        accounts=query.accounts,
        include_recurring=query.include_recurring,
        confidence_threshold=query.confidence_threshold,
        model_type=query.model_type,
        algorithm=query.algorithm
    )


def count_distinct_days(transactions: Sequence[TransactionSample]) -> int:
    return len({t.day for t in transactions})


def group_transactions_by_date(transactions: Sequence[TransactionSample]) -> List[DailyFlow]:
    """
    One DailyFlow per distinct calendar day, in ascending date order.

    Income adds to inflows, expenses to outflows; transfers and
    adjustments still produce a row for their day but move neither side.
    """
    grouped: Dict[date, DailyFlow] = {}

    for transaction in transactions:
        day = transaction.day
        flow = grouped.get(day)
        if flow is None:
            flow = DailyFlow(date=day.isoformat())
            grouped[day] = flow

        if transaction.type == TransactionType.INCOME:
            flow.inflows += transaction.amount
        elif transaction.type == TransactionType.EXPENSE:
            flow.outflows += transaction.amount

        flow.net_flow = flow.inflows - flow.outflows

    return [grouped[day] for day in sorted(grouped)]


class HistoricalDataAggregator:
    """
    Fetches and prepares transaction history.

    Example:
    ```python
    aggregator = HistoricalDataAggregator(provider, lookback_days=365)
    history = aggregator.load(query)
    print(f"{history.distinct_days} days, {len(history.income_transactions)} income rows")
    ```
    """

    def __init__(
        self,
        provider: TransactionDataProvider,
        lookback_days: int = FORECAST_LOOKBACK_DAYS,
        min_history_days: int = MIN_HISTORY_DAYS,
        insufficient_data_template: str = FORECAST_INSUFFICIENT_DATA_TEMPLATE
    ):
        """
        Args:
            provider: Source of transactions
            lookback_days: Length of the history window before the query start
            min_history_days: Distinct days required before forecasting
            insufficient_data_template: InsufficientDataError message, formatted
                with min_days
        """
        if lookback_days < 1:
            raise ValueError("lookback_days must be positive")

        self.provider = provider
        self.lookback_days = lookback_days
        self.min_history_days = min_history_days
        self.insufficient_data_template = insufficient_data_template

    def history_window(self, query: ForecastQuery) -> TransactionFilter:
        """Filter covering the lookback window ending the day before start_date."""
        window_end = query.start_date - timedelta(days=1)
        window_start = window_end - timedelta(days=self.lookback_days)

        return TransactionFilter(
            user_id=query.user_id,
            start_date=window_start,
            end_date=window_end,
            categories=query.categories,
            transaction_types=query.transaction_types,
            accounts=query.accounts,
            include_recurring=query.include_recurring
        )

    def load(self, query: ForecastQuery) -> HistoricalData:
        """
        Fetch, partition and gate the history for a validated query.

        Raises:
            InsufficientDataError: fewer than min_history_days distinct days
        """
        transaction_filter = self.history_window(query)
        transactions = list(self.provider.find(transaction_filter))

        distinct_days = count_distinct_days(transactions)
        if distinct_days < self.min_history_days:
            logger.warning(
                f"Insufficient history for user {query.user_id}: "
                f"{distinct_days} distinct days in {len(transactions)} transactions"
            )
            message = self.insufficient_data_template.format(min_days=self.min_history_days)
            raise InsufficientDataError(message, distinct_days=distinct_days)

        income = [t for t in transactions if t.type == TransactionType.INCOME]
        expenses = [t for t in transactions if t.type == TransactionType.EXPENSE]

        logger.info(
            f"Loaded {len(transactions)} transactions over {distinct_days} days "
            f"({len(income)} income, {len(expenses)} expense)"
        )

        return HistoricalData(
            transactions=transactions,
            income_transactions=income,
            expense_transactions=expenses,
            window_start=transaction_filter.start_date,
            window_end=transaction_filter.end_date,
            distinct_days=distinct_days,
            daily_flows=group_transactions_by_date(transactions)
        )


def build_historical_data(
    transactions: Sequence[TransactionSample],
    window_start: Optional[date] = None,
    window_end: Optional[date] = None
) -> HistoricalData:
    """Wrap an already-fetched sample without applying the history gate."""
    transactions = list(transactions)
    days = sorted({t.day for t in transactions})
    start = window_start or (days[0] if days else date.today())
    end = window_end or (days[-1] if days else start)

    return HistoricalData(
        transactions=transactions,
        income_transactions=[t for t in transactions if t.type == TransactionType.INCOME],
        expense_transactions=[t for t in transactions if t.type == TransactionType.EXPENSE],
        window_start=start,
        window_end=end,
        distinct_days=len(days),
        daily_flows=group_transactions_by_date(transactions)
    )
