"""
Demo Data Generator for the Finance Forecasting Engine

Generates a realistic year of personal-finance transactions for
demonstrations and testing: salary and freelance income, rent,
utilities, groceries, dining, transport and travel with a summer peak.
"""

import random
import uuid
from datetime import date, timedelta
from typing import Dict, List, Optional, Any
from dataclasses import dataclass

from .forecasting.models import TransactionSample, TransactionType

# Category configurations with realistic amount ranges
CATEGORY_PROFILES = {
    "salary": {
        "name": "Salary",
        "type": "income",
        "amount_range": (2400, 2600),
        "days_of_month": [1, 15],
        "recurring": True,
        "color": "#2e7d32",
    },
    "freelance": {
        "name": "Freelance",
        "type": "income",
        "amount_range": (200, 900),
        "daily_probability": 0.08,
        "recurring": False,
        "color": "#66bb6a",
    },
    "rent": {
        "name": "Rent",
        "type": "expense",
        "amount_range": (1450, 1450),
        "days_of_month": [1],
        "recurring": True,
        "color": "#c62828",
    },
    "utilities": {
        "name": "Utilities",
        "type": "expense",
        "amount_range": (120, 220),
        "days_of_month": [10],
        "recurring": True,
        "color": "#ef6c00",
    },
    "groceries": {
        "name": "Groceries",
        "type": "expense",
        "amount_range": (45, 140),
        "weekdays": [2, 5],  # Wednesday, Saturday
        "recurring": False,
        "color": "#f9a825",
    },
    "dining": {
        "name": "Dining Out",
        "type": "expense",
        "amount_range": (12, 65),
        "daily_probability": 0.35,
        "recurring": False,
        "color": "#8e24aa",
    },
    "transport": {
        "name": "Transport",
        "type": "expense",
        "amount_range": (15, 60),
        "daily_probability": 0.30,
        "recurring": False,
        "color": "#1565c0",
    },
    "travel": {
        "name": "Travel",
        "type": "expense",
        "amount_range": (80, 450),
        "daily_probability": 0.03,
        "recurring": False,
        "color": "#00838f",
        # Month -> multiplier on daily_probability
        "seasonality": {6: 6.0, 7: 8.0, 8: 6.0, 12: 3.0},
    },
}

ACCOUNT_PROFILES = [
    ("Everyday Checking", "checking", (1500, 4000)),
    ("Savings", "savings", (3000, 12000)),
]


@dataclass
class GeneratedUser:
    """Complete generated user data"""
    user_id: str
    accounts: List[Dict[str, Any]]
    categories: List[Dict[str, Any]]
    transactions: List[Dict[str, Any]]

    def to_samples(self) -> List[TransactionSample]:
        """Transactions as forecasting samples (for in-memory providers)."""
        names = {c["id"]: c["name"] for c in self.categories}
        return [
            TransactionSample(
                amount=t["amount"],
                date=date.fromisoformat(t["transaction_date"]),
                type=TransactionType(t["transaction_type"]),
                category_id=t["category_id"],
                category_name=names.get(t["category_id"]),
                account_id=t["account_id"],
                is_recurring=t["is_recurring"]
            )
            for t in self.transactions
        ]


class DemoDataGenerator:
    """
    Generate realistic demo data for the Finance Forecasting Engine.

    Example:
        generator = DemoDataGenerator(seed=42)
        user = generator.generate_user(days_of_history=365)
        provider = InMemoryTransactionProvider({user.user_id: user.to_samples()})
    """

    def __init__(self, seed: Optional[int] = None):
        """Initialize generator with optional random seed for reproducibility"""
        self.rng = random.Random(seed)

    def generate_user(
        self,
        user_id: Optional[str] = None,
        days_of_history: int = 365,
        end_date: Optional[date] = None
    ) -> GeneratedUser:
        """
        Generate accounts, categories and daily transactions for one user.

        Args:
            user_id: Optional fixed user id
            days_of_history: Days of transactions to generate
            end_date: Last day with transactions (defaults to yesterday)

        Returns:
            GeneratedUser with all data populated
        """
        user_id = user_id or str(uuid.uuid4())
        end_date = end_date or date.today() - timedelta(days=1)
        start_date = end_date - timedelta(days=days_of_history - 1)

        accounts = [
            {
                "id": str(uuid.uuid4()),
                "user_id": user_id,
                "name": name,
                "account_type": account_type,
                "balance": round(self.rng.uniform(*balance_range), 2),
            }
            for name, account_type, balance_range in ACCOUNT_PROFILES
        ]
        checking_id = accounts[0]["id"]

        categories = []
        category_ids = {}
        for key, profile in CATEGORY_PROFILES.items():
            category_id = str(uuid.uuid4())
            category_ids[key] = category_id
            categories.append({
                "id": category_id,
                "user_id": user_id,
                "name": profile["name"],
                "category_type": profile["type"],
                "color": profile["color"],
            })

        transactions = []
        current = start_date
        while current <= end_date:
            for key, profile in CATEGORY_PROFILES.items():
                if self._occurs_on(profile, current):
                    transactions.append(self._transaction(
                        user_id, checking_id, category_ids[key], profile, current
                    ))
            current += timedelta(days=1)

        return GeneratedUser(
            user_id=user_id,
            accounts=accounts,
            categories=categories,
            transactions=transactions
        )

    def _occurs_on(self, profile: Dict[str, Any], day: date) -> bool:
        if "days_of_month" in profile:
            return day.day in profile["days_of_month"]
        if "weekdays" in profile:
            return day.weekday() in profile["weekdays"]

        probability = profile["daily_probability"]
        probability *= profile.get("seasonality", {}).get(day.month, 1.0)
        return self.rng.random() < probability

    def _transaction(
        self,
        user_id: str,
        account_id: str,
        category_id: str,
        profile: Dict[str, Any],
        day: date
    ) -> Dict[str, Any]:
        return {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "account_id": account_id,
            "category_id": category_id,
            "title": profile["name"],
            "amount": round(self.rng.uniform(*profile["amount_range"]), 2),
            "transaction_type": profile["type"],
            "transaction_date": day.isoformat(),
            "is_recurring": profile["recurring"],
            "recurrence_pattern": "monthly" if profile["recurring"] else None,
        }


def load_demo_data_to_db(db_session, count: int = 1, seed: int = 42) -> List[str]:
    """
    Load demo data directly into the database.

    Args:
        db_session: SQLAlchemy database session
        count: Number of demo users to create
        seed: Random seed (reproducible demos)

    Returns:
        List of created user IDs
    """
    from .database.models import Account, Category, Transaction

    generator = DemoDataGenerator(seed=seed)
    user_ids = []

    for _ in range(count):
        user = generator.generate_user()

        for account_data in user.accounts:
            db_session.add(Account(**account_data))

        for category_data in user.categories:
            db_session.add(Category(**category_data))

        for transaction_data in user.transactions:
            data = dict(transaction_data)
            data["transaction_date"] = date.fromisoformat(data["transaction_date"])
            db_session.add(Transaction(**data))

        user_ids.append(user.user_id)

    db_session.commit()
    return user_ids


# Quick test function
if __name__ == "__main__":
    generator = DemoDataGenerator(seed=42)
    user = generator.generate_user()

    income = sum(t["amount"] for t in user.transactions if t["transaction_type"] == "income")
    expenses = sum(t["amount"] for t in user.transactions if t["transaction_type"] == "expense")

    print(f"Generated user: {user.user_id}")
    print(f"Transactions: {len(user.transactions)}")
    print(f"Income: {income:,.2f}  Expenses: {expenses:,.2f}")
