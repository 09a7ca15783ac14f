"""
Transaction Data Providers

The forecasting engine reads history through a narrow provider
interface so it can run against the database or an in-memory list.
"""

import logging
from typing import Dict, Iterable, List, Optional, Protocol, runtime_checkable

from .models import TransactionFilter, TransactionSample

logger = logging.getLogger(__name__)


@runtime_checkable
class TransactionDataProvider(Protocol):
    """Anything that can return transactions matching a filter."""

    def find(self, transaction_filter: TransactionFilter) -> List[TransactionSample]:
        ...


@runtime_checkable
class BalanceProvider(Protocol):
    """Optional capability: current balance across a user's accounts."""

    def get_current_balance(self, user_id: str) -> float:
        ...


def matches_filter(sample: TransactionSample, transaction_filter: TransactionFilter) -> bool:
    """Check a sample against every non-empty clause of a filter."""
    day = sample.day
    if day < transaction_filter.start_date or day > transaction_filter.end_date:
        return False
    if transaction_filter.categories and sample.category_id not in transaction_filter.categories:
        return False
    if transaction_filter.transaction_types and sample.type not in transaction_filter.transaction_types:
        return False
    if transaction_filter.accounts and sample.account_id not in transaction_filter.accounts:
        return False
    if not transaction_filter.include_recurring and sample.is_recurring:
        return False
    return True


class InMemoryTransactionProvider:
    """
    Provider backed by per-user lists of samples.

    Example:
    ```python
    provider = InMemoryTransactionProvider({"user-1": samples}, balances={"user-1": 2500.0})
    forecaster = FinancialForecaster(provider)
    ```
    """

    def __init__(
        self,
        transactions: Optional[Dict[str, Iterable[TransactionSample]]] = None,
        balances: Optional[Dict[str, float]] = None
    ):
        self._transactions = {
            user_id: list(samples) for user_id, samples in (transactions or {}).items()
        }
        self._balances = dict(balances or {})

    def add(self, user_id: str, samples: Iterable[TransactionSample]) -> None:
        self._transactions.setdefault(user_id, []).extend(samples)

    def find(self, transaction_filter: TransactionFilter) -> List[TransactionSample]:
        samples = self._transactions.get(transaction_filter.user_id, [])
        found = [s for s in samples if matches_filter(s, transaction_filter)]
        logger.debug(f"In-memory provider matched {len(found)} of {len(samples)} transactions")
        return found

    def get_current_balance(self, user_id: str) -> float:
        return self._balances.get(user_id, 0.0)
