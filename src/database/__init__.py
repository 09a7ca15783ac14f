"""
Database Module for the Finance Forecasting Engine

SQLAlchemy models and the database-backed transaction provider.
"""

from .models import (
    db,
    Account,
    Category,
    Transaction
)
from .provider import SqlTransactionProvider

__all__ = [
    'db',
    'Account',
    'Category',
    'Transaction',
    'SqlTransactionProvider',
]
