"""Pytest configuration and fixtures."""

import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Add backend directory to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from finflow.models.entities import (  # noqa: E402
    Account, AccountType, Budget, BudgetPeriod, SpendingType, Transaction, TransactionType
)
from finflow.services import database  # noqa: E402


@pytest.fixture
def ledger(tmp_path, monkeypatch):
    """Point the ledger store at a fresh SQLite file with S3 disabled."""
    monkeypatch.setenv('FINFLOW_DB_PATH', str(tmp_path / 'finflow-test.db'))
    monkeypatch.delenv('DATA_BUCKET', raising=False)
    database.close_db()
    yield database
    database.close_db()


@pytest.fixture
def user(ledger):
    """A registered user with the default categories."""
    return ledger.create_user('Test User', 'test@example.com', 'not-a-real-hash')


@pytest.fixture
def make_txn():
    """Build an in-memory transaction."""
    def _make(amount, day: date, txn_type: str = 'expense', category_id: int = 1,
              category_name: str = 'Food', spending_type: str = None, account_id: int = None):
        return Transaction(
            id=None,
            user_id=1,
            category_id=category_id,
            type=TransactionType(txn_type),
            amount=Decimal(str(amount)),
            transaction_date=day,
            account_id=account_id,
            spending_type=SpendingType(spending_type) if spending_type else None,
            category_name=category_name,
            category_color='#007180'
        )
    return _make


@pytest.fixture
def make_budget():
    """Build an in-memory budget."""
    def _make(amount, period: str = 'monthly', category_id: int = None, budget_id: int = 1,
              alert_threshold: int = 80, name: str = 'Budget', category_name: str = None):
        return Budget(
            id=budget_id,
            user_id=1,
            name=name,
            amount=Decimal(str(amount)),
            period=BudgetPeriod(period),
            start_date=date(2020, 1, 1),
            category_id=category_id,
            alert_threshold=alert_threshold,
            category_name=category_name
        )
    return _make


@pytest.fixture
def make_account():
    """Build an in-memory account."""
    def _make(initial_balance, account_id: int = 1, name: str = 'Wallet'):
        return Account(
            id=account_id,
            user_id=1,
            name=name,
            type=AccountType.CASH,
            initial_balance=Decimal(str(initial_balance))
        )
    return _make
