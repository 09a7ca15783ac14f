"""
Feature Extractors for Financial Forecasting

Pure numeric functions over transaction samples: monthly averages,
consistency, seasonality and trend detection. Every function returns a
finite, defined value for empty, zero or extreme inputs.
"""

import logging
import math
from datetime import date, datetime
from typing import Dict, List, Sequence, Tuple
import numpy as np

from .models import TransactionSample

logger = logging.getLogger(__name__)

UNCATEGORIZED_ID = "uncategorized"

# Consistency
MIN_CONSISTENCY_SAMPLES = 3
NEUTRAL_CONSISTENCY = 0.5

# Seasonality: annual sinusoid fitted on day-of-year
MIN_SEASONALITY_SAMPLES = 28
MIN_SEASONALITY_MONTHS = 12
SEASONAL_AMPLITUDE_THRESHOLD = 0.20  # Amplitude as a fraction of the mean
DAYS_PER_YEAR = 365.25

# Trend: linear regression over sequence index
MIN_TREND_SAMPLES = 14
TREND_SLOPE_THRESHOLD = 0.01  # |slope| per step as a fraction of the mean
MIN_TREND_R_SQUARED = 0.10

# Category trend: second half vs first half average
CATEGORY_TREND_THRESHOLD = 0.10


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _sorted_by_date(transactions: Sequence[TransactionSample]) -> List[TransactionSample]:
    return sorted(transactions, key=lambda t: t.day)


def _amounts(transactions: Sequence[TransactionSample]) -> np.ndarray:
    return np.array([float(t.amount) for t in transactions], dtype=float)


def calculate_months_difference(start_date, end_date) -> int:
    """
    Inclusive calendar-month span between two dates.

    Day of month is ignored: Jan 1 -> Mar 31 spans 3 months, and two
    dates in the same month span 1.
    """
    start = _as_date(start_date)
    end = _as_date(end_date)
    return (end.year - start.year) * 12 + (end.month - start.month) + 1


def calculate_date_range(transactions: Sequence[TransactionSample]) -> Tuple[date, date]:
    """Earliest and latest calendar day in a sample."""
    if not transactions:
        today = date.today()
        return today, today
    days = [t.day for t in transactions]
    return min(days), max(days)


def calculate_monthly_average(transactions: Sequence[TransactionSample]) -> float:
    """Total amount divided by the months the sample spans (at least 1)."""
    if not transactions:
        return 0.0

    total = float(sum(t.amount for t in transactions))
    start, end = calculate_date_range(transactions)
    months = max(1, calculate_months_difference(start, end))

    return total / months


def calculate_consistency(transactions: Sequence[TransactionSample]) -> float:
    """
    Inverse coefficient of variation of amounts, clamped to [0, 1].

    1.0 means perfectly uniform amounts. Samples too small to judge get
    a neutral 0.5; a zero mean yields 1.0 when every amount is zero and
    0.0 otherwise.
    """
    if len(transactions) < MIN_CONSISTENCY_SAMPLES:
        return NEUTRAL_CONSISTENCY

    amounts = _amounts(transactions)
    mean = float(np.mean(amounts))
    std_dev = float(np.std(amounts))

    if mean == 0:
        return 1.0 if std_dev == 0 else 0.0
    if not math.isfinite(mean) or not math.isfinite(std_dev):
        return 0.0

    coefficient_of_variation = std_dev / abs(mean)
    return max(0.0, min(1.0, 1.0 - coefficient_of_variation))


def calculate_trend_statistics(transactions: Sequence[TransactionSample]) -> Tuple[float, float, float]:
    """
    Fit amount = slope * index + intercept over date-ordered samples.

    Returns:
        (slope, r_squared, mean)
    """
    n = len(transactions)
    if n < 2:
        mean = float(transactions[0].amount) if transactions else 0.0
        return 0.0, 0.0, mean

    y = _amounts(_sorted_by_date(transactions))
    x = np.arange(n, dtype=float)

    x_mean = np.mean(x)
    y_mean = float(np.mean(y))

    numerator = np.sum((x - x_mean) * (y - y_mean))
    denominator = np.sum((x - x_mean) ** 2)

    if denominator == 0:
        return 0.0, 0.0, y_mean

    slope = float(numerator / denominator)
    intercept = y_mean - slope * x_mean

    y_pred = slope * x + intercept
    ss_res = float(np.sum((y - y_pred) ** 2))
    ss_tot = float(np.sum((y - y_mean) ** 2))
    r_squared = 1 - (ss_res / ss_tot) if ss_tot > 0 else 0.0

    return slope, r_squared, y_mean


def calculate_trend_slope(transactions: Sequence[TransactionSample]) -> float:
    """Regression slope of amounts per transaction step."""
    slope, _, _ = calculate_trend_statistics(transactions)
    return slope


def detect_trend(transactions: Sequence[TransactionSample]) -> bool:
    """True when amounts drift materially up or down over the sample."""
    if len(transactions) < MIN_TREND_SAMPLES:
        return False

    slope, r_squared, mean = calculate_trend_statistics(transactions)
    if mean == 0 or not math.isfinite(slope):
        return False

    trend_strength = abs(slope) / abs(mean)
    return trend_strength > TREND_SLOPE_THRESHOLD and r_squared >= MIN_TREND_R_SQUARED


def detect_seasonality(transactions: Sequence[TransactionSample]) -> bool:
    """
    Detect an annual cycle in amounts.

    Fits a + b*t + c*sin(theta) + d*cos(theta), theta being the day of
    year mapped onto one annual cycle and t the elapsed days (absorbing
    any linear drift). The series is seasonal when the sinusoid's
    amplitude exceeds a fixed fraction of the mean amount. Series that
    cannot show a full cycle return False.
    """
    if len(transactions) < MIN_SEASONALITY_SAMPLES:
        return False

    ordered = _sorted_by_date(transactions)
    months_covered = {(t.day.year, t.day.month) for t in ordered}
    if len(months_covered) < MIN_SEASONALITY_MONTHS:
        return False

    amounts = _amounts(ordered)
    mean = float(np.mean(amounts))
    if mean == 0 or not math.isfinite(mean):
        return False

    first_day = ordered[0].day
    elapsed = np.array([(t.day - first_day).days for t in ordered], dtype=float)
    theta = 2 * np.pi * np.array(
        [t.day.timetuple().tm_yday for t in ordered], dtype=float
    ) / DAYS_PER_YEAR

    design = np.column_stack([
        np.ones(len(ordered)),
        elapsed,
        np.sin(theta),
        np.cos(theta)
    ])

    try:
        coefficients, _, _, _ = np.linalg.lstsq(design, amounts, rcond=None)
    except np.linalg.LinAlgError as e:
        logger.warning(f"Seasonality fit did not converge: {e}")
        return False

    amplitude = math.hypot(coefficients[2], coefficients[3])
    return bool(amplitude > SEASONAL_AMPLITUDE_THRESHOLD * abs(mean))


def calculate_category_trend(transactions: Sequence[TransactionSample]) -> Tuple[str, float]:
    """
    Compare the average of the later half of a category's transactions
    against the earlier half.

    Returns:
        (direction, relative change) with direction one of
        "increasing", "decreasing", "stable"
    """
    if len(transactions) < 2:
        return "stable", 0.0

    ordered = _sorted_by_date(transactions)
    midpoint = len(ordered) // 2
    first_half_avg = float(np.mean(_amounts(ordered[:midpoint])))
    second_half_avg = float(np.mean(_amounts(ordered[midpoint:])))

    if first_half_avg == 0:
        return "stable", 0.0

    change = (second_half_avg - first_half_avg) / first_half_avg

    if change > CATEGORY_TREND_THRESHOLD:
        return "increasing", change
    if change < -CATEGORY_TREND_THRESHOLD:
        return "decreasing", change
    return "stable", change


def group_by_category(transactions: Sequence[TransactionSample]) -> Dict[str, List[TransactionSample]]:
    """Bucket transactions by category id (missing ids share one bucket)."""
    groups: Dict[str, List[TransactionSample]] = {}
    for transaction in transactions:
        key = transaction.category_id or UNCATEGORIZED_ID
        groups.setdefault(key, []).append(transaction)
    return groups


def category_name_for(transactions: Sequence[TransactionSample]) -> str:
    """First non-empty category name in a bucket."""
    for transaction in transactions:
        if transaction.category_name:
            return transaction.category_name
    if transactions and transactions[0].category_id is None:
        return "Uncategorized"
    return "Unknown"


def group_by_month(transactions: Sequence[TransactionSample]) -> Dict[str, float]:
    """Total amount per "YYYY-MM" month."""
    totals: Dict[str, float] = {}
    for transaction in transactions:
        month = transaction.day.strftime("%Y-%m")
        totals[month] = totals.get(month, 0.0) + float(transaction.amount)
    return totals


def month_starts(start_date, end_date) -> List[date]:
    """First day of every calendar month touched by [start_date, end_date]."""
    start = _as_date(start_date)
    months = calculate_months_difference(start, end_date)

    starts = []
    year, month = start.year, start.month
    for _ in range(max(0, months)):
        starts.append(date(year, month, 1))
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return starts
