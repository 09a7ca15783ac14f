"""
SQL Transaction Provider

Serves forecasting history from the database, applying the filter in
the query rather than in Python.
"""

import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from src.forecasting.models import TransactionFilter, TransactionSample

from .models import db, Account, Transaction

logger = logging.getLogger(__name__)


class SqlTransactionProvider:
    """
    TransactionDataProvider and BalanceProvider over Flask-SQLAlchemy.

    Must be used inside an application context.

    Example:
    ```python
    with app.app_context():
        forecaster = FinancialForecaster(SqlTransactionProvider())
        result = forecaster.generate_financial_forecast(query)
    ```
    """

    def find(self, transaction_filter: TransactionFilter) -> List[TransactionSample]:
        query = Transaction.query.filter(
            Transaction.user_id == transaction_filter.user_id,
            Transaction.transaction_date >= transaction_filter.start_date,
            Transaction.transaction_date <= transaction_filter.end_date
        )

        if transaction_filter.categories:
            query = query.filter(Transaction.category_id.in_(transaction_filter.categories))
        if transaction_filter.transaction_types:
            query = query.filter(Transaction.transaction_type.in_(
                [t.value for t in transaction_filter.transaction_types]
            ))
        if transaction_filter.accounts:
            query = query.filter(Transaction.account_id.in_(transaction_filter.accounts))
        if not transaction_filter.include_recurring:
            query = query.filter(Transaction.is_recurring.is_(False))

        rows = query.options(joinedload(Transaction.category)).order_by(Transaction.transaction_date).all()
        logger.debug(f"Loaded {len(rows)} transactions for user {transaction_filter.user_id}")
        return [row.to_sample() for row in rows]

    def get_current_balance(self, user_id: str) -> float:
        """Sum of balances across the user's active accounts."""
        total = db.session.query(func.coalesce(func.sum(Account.balance), 0.0)).filter(
            Account.user_id == user_id,
            Account.is_active.is_(True)
        ).scalar()
        return float(total or 0.0)
