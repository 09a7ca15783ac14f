"""Shared test fixtures."""

from datetime import date

import pytest

from src.forecasting.models import ForecastQuery

from factories import USER_ID, RecordingProvider, year_of_history


@pytest.fixture
def forecast_query():
    return ForecastQuery(user_id=USER_ID, start_date=date(2024, 1, 1), end_date=date(2024, 3, 31))


@pytest.fixture
def year_provider():
    return RecordingProvider({USER_ID: year_of_history()}, balances={USER_ID: 2500.0})
