"""
Tests for query validation and history aggregation.
"""

from datetime import date, datetime

import pytest

from src.forecasting.exceptions import (
    FORECAST_INSUFFICIENT_DATA_MESSAGE,
    InsufficientDataError,
    ValidationError
)
from src.forecasting.historical_data import (
    HistoricalDataAggregator,
    build_historical_data,
    count_distinct_days,
    group_transactions_by_date,
    validate_query
)
from src.forecasting.models import ForecastQuery, TransactionType
from src.forecasting.providers import InMemoryTransactionProvider, matches_filter

from factories import USER_ID, RecordingProvider, make_sample, series


class TestGroupTransactionsByDate:
    """Daily bucketing."""

    def test_buckets_income_and_expense(self):
        samples = [
            make_sample(100, date(2024, 1, 1), TransactionType.INCOME),
            make_sample(200, date(2024, 1, 1), TransactionType.EXPENSE),
            make_sample(150, date(2024, 1, 2), TransactionType.INCOME),
        ]

        flows = group_transactions_by_date(samples)

        assert [f.to_dict() for f in flows] == [
            {"date": "2024-01-01", "inflows": 100, "outflows": 200, "net_flow": -100},
            {"date": "2024-01-02", "inflows": 150, "outflows": 0, "net_flow": 150},
        ]

    def test_output_sorted_by_date(self):
        samples = [
            make_sample(5, date(2024, 3, 1), TransactionType.INCOME),
            make_sample(5, date(2024, 1, 1), TransactionType.INCOME),
            make_sample(5, date(2024, 2, 1), TransactionType.INCOME),
        ]
        assert [f.date for f in group_transactions_by_date(samples)] == [
            "2024-01-01", "2024-02-01", "2024-03-01"
        ]

    def test_transfers_create_empty_row(self):
        flows = group_transactions_by_date([make_sample(75, date(2024, 1, 1), TransactionType.TRANSFER)])

        assert len(flows) == 1
        assert flows[0].inflows == 0
        assert flows[0].outflows == 0
        assert flows[0].net_flow == 0

    def test_datetimes_grouped_by_calendar_day(self):
        samples = [
            make_sample(10, datetime(2024, 1, 1, 8, 30), TransactionType.INCOME),
            make_sample(20, datetime(2024, 1, 1, 22, 0), TransactionType.INCOME),
        ]
        flows = group_transactions_by_date(samples)

        assert len(flows) == 1
        assert flows[0].inflows == 30

    def test_empty_input(self):
        assert group_transactions_by_date([]) == []


class TestValidateQuery:
    """Validation happens before any fetch."""

    def test_missing_start_date(self):
        with pytest.raises(ValidationError):
            validate_query(ForecastQuery(user_id=USER_ID, start_date=None, end_date=date(2024, 1, 1)))

    def test_non_date_value(self):
        with pytest.raises(ValidationError):
            validate_query(ForecastQuery(user_id=USER_ID, start_date="2024-01-01", end_date=date(2024, 2, 1)))

    def test_start_must_precede_end(self):
        with pytest.raises(ValidationError):
            validate_query(ForecastQuery(user_id=USER_ID, start_date=date(2024, 2, 1), end_date=date(2024, 2, 1)))

    @pytest.mark.parametrize("threshold", [-0.1, 1.5, float("nan")])
    def test_threshold_out_of_range(self, threshold):
        with pytest.raises(ValidationError):
            validate_query(ForecastQuery(
                user_id=USER_ID,
                start_date=date(2024, 1, 1),
                end_date=date(2024, 2, 1),
                confidence_threshold=threshold
            ))

    def test_missing_user(self):
        with pytest.raises(ValidationError):
            validate_query(ForecastQuery(user_id="", start_date=date(2024, 1, 1), end_date=date(2024, 2, 1)))

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_query(None)

    def test_datetimes_normalized(self):
        query = validate_query(ForecastQuery(
            user_id=USER_ID,
            start_date=datetime(2024, 1, 1, 12),
            end_date=datetime(2024, 2, 1, 12)
        ))
        assert query.start_date == date(2024, 1, 1)
        assert query.end_date == date(2024, 2, 1)

    def test_valid_query_returned_unchanged(self, forecast_query):
        assert validate_query(forecast_query) is forecast_query


class TestHistoricalDataAggregator:
    """Lookback window and minimum history gate."""

    def test_window_ends_day_before_start(self, forecast_query):
        aggregator = HistoricalDataAggregator(InMemoryTransactionProvider(), lookback_days=365)

        window = aggregator.history_window(forecast_query)

        assert window.end_date == date(2023, 12, 31)
        assert window.start_date == date(2022, 12, 31)
        assert window.user_id == USER_ID

    def test_window_carries_filters(self):
        query = ForecastQuery(
            user_id=USER_ID,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 2, 1),
            categories=["food"],
            accounts=["checking"],
            include_recurring=False
        )
        window = HistoricalDataAggregator(InMemoryTransactionProvider()).history_window(query)

        assert window.categories == ["food"]
        assert window.accounts == ["checking"]
        assert window.include_recurring is False

    def test_rejects_fewer_than_thirty_days(self, forecast_query):
        samples = series([50] * 29, date(2023, 12, 1))
        aggregator = HistoricalDataAggregator(InMemoryTransactionProvider({USER_ID: samples}))

        with pytest.raises(InsufficientDataError) as exc_info:
            aggregator.load(forecast_query)

        assert exc_info.value.message == FORECAST_INSUFFICIENT_DATA_MESSAGE
        assert exc_info.value.distinct_days == 29

    def test_same_day_transactions_count_once(self, forecast_query):
        day = date(2023, 12, 15)
        samples = [make_sample(10 + i, day) for i in range(40)]
        aggregator = HistoricalDataAggregator(InMemoryTransactionProvider({USER_ID: samples}))

        with pytest.raises(InsufficientDataError) as exc_info:
            aggregator.load(forecast_query)

        assert exc_info.value.distinct_days == 1

    def test_thirty_days_is_enough(self, forecast_query):
        expenses = series([50] * 30, date(2023, 12, 1))
        income = [make_sample(3000, date(2023, 12, 1), TransactionType.INCOME)]
        aggregator = HistoricalDataAggregator(InMemoryTransactionProvider({USER_ID: expenses + income}))

        history = aggregator.load(forecast_query)

        assert history.distinct_days == 30
        assert len(history.expense_transactions) == 30
        assert len(history.income_transactions) == 1
        assert len(history.daily_flows) == 30
        assert history.window_end == date(2023, 12, 31)

    def test_transactions_on_or_after_start_are_excluded(self, forecast_query):
        before = series([50] * 30, date(2023, 12, 1))
        after = series([999] * 10, date(2024, 1, 1))
        aggregator = HistoricalDataAggregator(InMemoryTransactionProvider({USER_ID: before + after}))

        history = aggregator.load(forecast_query)

        assert all(t.amount == 50 for t in history.transactions)

    def test_provider_receives_single_filter(self, forecast_query):
        provider = RecordingProvider({USER_ID: series([50] * 30, date(2023, 12, 1))})

        HistoricalDataAggregator(provider).load(forecast_query)

        assert len(provider.calls) == 1

    def test_invalid_lookback(self):
        with pytest.raises(ValueError):
            HistoricalDataAggregator(InMemoryTransactionProvider(), lookback_days=0)

    def test_history_months_follow_transactions_not_window(self, forecast_query):
        samples = series([50] * 30, date(2023, 11, 15))
        history = HistoricalDataAggregator(InMemoryTransactionProvider({USER_ID: samples})).load(forecast_query)

        assert history.window_start == date(2022, 12, 31)
        assert history.history_months == 2

    def test_message_names_configured_minimum(self, forecast_query):
        samples = series([50] * 30, date(2023, 12, 1))
        aggregator = HistoricalDataAggregator(
            InMemoryTransactionProvider({USER_ID: samples}), min_history_days=45
        )

        with pytest.raises(InsufficientDataError) as exc_info:
            aggregator.load(forecast_query)

        assert "Need at least 45 days of data." in exc_info.value.message
        assert exc_info.value.distinct_days == 30


class TestProviders:
    """In-memory provider filtering."""

    def test_filter_clauses(self, forecast_query):
        window = HistoricalDataAggregator(InMemoryTransactionProvider()).history_window(forecast_query)
        sample = make_sample(10, date(2023, 6, 1), category_id="food", account_id="checking")

        assert matches_filter(sample, window)
        assert not matches_filter(make_sample(10, date(2024, 1, 1)), window)

    def test_recurring_excluded_when_requested(self):
        query = ForecastQuery(
            user_id=USER_ID,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 2, 1),
            include_recurring=False
        )
        window = HistoricalDataAggregator(InMemoryTransactionProvider()).history_window(query)

        assert not matches_filter(make_sample(10, date(2023, 6, 1), is_recurring=True), window)
        assert matches_filter(make_sample(10, date(2023, 6, 1)), window)

    def test_unknown_user_has_no_history(self, forecast_query):
        window = HistoricalDataAggregator(InMemoryTransactionProvider()).history_window(forecast_query)
        assert InMemoryTransactionProvider().find(window) == []

    def test_default_balance_is_zero(self):
        assert InMemoryTransactionProvider().get_current_balance(USER_ID) == 0.0


class TestBuildHistoricalData:
    """Ungated wrapper used by feature-level tests."""

    def test_partitions_and_counts(self):
        samples = series([10, 20, 30], date(2024, 1, 1)) + [
            make_sample(100, date(2024, 1, 1), TransactionType.INCOME)
        ]
        history = build_historical_data(samples)

        assert history.distinct_days == 3
        assert count_distinct_days(samples) == 3
        assert len(history.income_transactions) == 1
        assert history.window_start == date(2024, 1, 1)
        assert history.window_end == date(2024, 1, 3)

    def test_empty_history_spans_no_months(self):
        assert build_historical_data([]).history_months == 0
