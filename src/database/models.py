"""
Database Models for the Finance Forecasting Engine

SQLAlchemy models for accounts, categories and transactions. The
forecasting engine reads transactions through SqlTransactionProvider;
nothing here writes forecasts back.
"""

import uuid
from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

from src.forecasting.models import TransactionSample, TransactionType

db = SQLAlchemy()


def generate_uuid():
    return str(uuid.uuid4())


class Account(db.Model):
    """
    A user's bank, card or cash account.

    Balances of active accounts are summed for the cash flow starting point.
    """
    __tablename__ = 'accounts'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    user_id = db.Column(db.String(36), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    account_type = db.Column(db.String(50), default='checking')  # checking, savings, credit, cash
    currency = db.Column(db.String(3), default='USD')
    balance = db.Column(db.Float, default=0)
    is_active = db.Column(db.Boolean, default=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    transactions = db.relationship('Transaction', backref='account', lazy='dynamic',
                                   cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'account_type': self.account_type,
            'currency': self.currency,
            'balance': self.balance,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }


class Category(db.Model):
    """Spending or income category"""
    __tablename__ = 'categories'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    user_id = db.Column(db.String(36), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    category_type = db.Column(db.String(20), default='expense')  # income, expense
    color = db.Column(db.String(7))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    transactions = db.relationship('Transaction', back_populates='category', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'category_type': self.category_type,
            'color': self.color
        }


class Transaction(db.Model):
    """
    A single money movement.

    Amounts are stored as positive magnitudes; direction comes from
    transaction_type.
    """
    __tablename__ = 'transactions'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    user_id = db.Column(db.String(36), nullable=False, index=True)
    account_id = db.Column(db.String(36), db.ForeignKey('accounts.id'))
    category_id = db.Column(db.String(36), db.ForeignKey('categories.id'))

    # Transaction details
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(500))
    amount = db.Column(db.Float, nullable=False)
    currency = db.Column(db.String(3), default='USD')
    transaction_type = db.Column(db.String(20), nullable=False)  # income, expense, transfer, adjustment
    transaction_date = db.Column(db.Date, nullable=False, index=True)

    # For recurring transactions
    is_recurring = db.Column(db.Boolean, default=False)
    recurrence_pattern = db.Column(db.String(50))  # weekly, monthly, etc.

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    category = db.relationship('Category', back_populates='transactions')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'account_id': self.account_id,
            'category_id': self.category_id,
            'title': self.title,
            'description': self.description,
            'amount': self.amount,
            'currency': self.currency,
            'transaction_type': self.transaction_type,
            'transaction_date': self.transaction_date.isoformat() if self.transaction_date else None,
            'is_recurring': self.is_recurring,
            'recurrence_pattern': self.recurrence_pattern
        }

    def to_sample(self) -> TransactionSample:
        """Read-only view handed to the forecasting engine."""
        return TransactionSample(
            amount=abs(self.amount or 0.0),
            date=self.transaction_date,
            type=TransactionType(self.transaction_type),
            category_id=self.category_id,
            category_name=self.category.name if self.category else None,
            account_id=self.account_id,
            is_recurring=bool(self.is_recurring)
        )
