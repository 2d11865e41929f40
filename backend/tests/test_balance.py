"""Tests for account balance calculations."""

from datetime import date
from decimal import Decimal

from finflow.services.balance import (
    balance_history,
    balances_by_account,
    current_balance,
    monthly_balance_history,
)


class TestCurrentBalance:
    """Tests for current_balance."""

    def test_initial_plus_income_minus_expense(self, make_account, make_txn):
        """Balance = initial + income - expense, regardless of date."""
        account = make_account(1000000)
        transactions = [
            make_txn(500000, date(2025, 1, 5), 'income'),
            make_txn(200000, date(2030, 6, 1), 'expense'),
        ]
        assert current_balance(account, transactions) == Decimal('1300000')

    def test_no_transactions(self, make_account):
        """Account without transactions keeps its initial balance."""
        assert current_balance(make_account('250.50'), []) == Decimal('250.50')

    def test_decimal_precision(self, make_account, make_txn):
        """Many small amounts don't drift."""
        transactions = [make_txn('0.10', date(2025, 1, 1), 'income') for _ in range(10)]
        assert current_balance(make_account(0), transactions) == Decimal('1.00')


class TestBalancesByAccount:
    """Tests for balances_by_account."""

    def test_groups_by_account(self, make_account, make_txn):
        accounts = [make_account(100, account_id=1), make_account(50, account_id=2)]
        transactions = [
            make_txn(30, date(2025, 1, 1), 'expense', account_id=1),
            make_txn(20, date(2025, 1, 2), 'income', account_id=2),
            make_txn(999, date(2025, 1, 3), 'expense', account_id=None),
        ]
        balances = balances_by_account(accounts, transactions)
        assert balances == {1: Decimal('70'), 2: Decimal('70')}


class TestBalanceHistory:
    """Tests for the per-account day series."""

    def test_flat_series_without_transactions(self, make_account):
        """No transactions gives initial_balance every day."""
        history = balance_history(make_account(1000), [], date(2025, 3, 31), window_days=30)
        points = list(history)
        assert len(points) == 31
        assert points[0].date == date(2025, 3, 1)
        assert points[-1].date == date(2025, 3, 31)
        assert all(p.balance == Decimal('1000') for p in points)

    def test_income_at_window_start(self, make_account, make_txn):
        """Income dated at the window start counts from that day on."""
        today = date(2025, 3, 31)
        txn = make_txn(100000, date(2025, 3, 1), 'income')
        points = list(balance_history(make_account(500000), [txn], today, window_days=30))
        assert points[0].balance == Decimal('600000')
        assert points[-1].balance == Decimal('600000')

    def test_income_inside_window(self, make_account, make_txn):
        """Days before the transaction equal the initial balance."""
        today = date(2025, 3, 31)
        txn = make_txn(100000, date(2025, 3, 10), 'income')
        points = {p.date: p.balance for p in balance_history(make_account(500000), [txn], today)}
        assert points[date(2025, 3, 9)] == Decimal('500000')
        assert points[date(2025, 3, 10)] == Decimal('600000')
        assert points[date(2025, 3, 31)] == Decimal('600000')

    def test_pre_window_transactions_fold_into_opening(self, make_account, make_txn):
        today = date(2025, 3, 31)
        transactions = [
            make_txn(100, date(2025, 2, 15), 'income'),
            make_txn(50, date(2025, 3, 10), 'expense'),
        ]
        points = {p.date: p.balance for p in balance_history(make_account(1000), transactions, today)}
        assert points[date(2025, 3, 1)] == Decimal('1100')
        assert points[date(2025, 3, 9)] == Decimal('1100')
        assert points[date(2025, 3, 10)] == Decimal('1050')

    def test_future_transactions_ignored(self, make_account, make_txn):
        today = date(2025, 3, 31)
        txn = make_txn(100, date(2025, 4, 2), 'expense')
        history = balance_history(make_account(1000), [txn], today)
        assert list(history)[-1].balance == Decimal('1000')

    def test_series_is_restartable(self, make_account, make_txn):
        """Iterating twice yields the same points."""
        txn = make_txn(100, date(2025, 3, 20), 'income')
        history = balance_history(make_account(1000), [txn], date(2025, 3, 31), window_days=7)
        assert len(history) == 8
        assert history.to_list() == history.to_list()
        assert history.to_list()[0] == {'date': '2025-03-24', 'balance': Decimal('1100.00')}


class TestMonthlyBalanceHistory:
    """Tests for the portfolio month series."""

    def test_carries_balance_forward(self, make_txn):
        transactions = [
            make_txn(1000, date(2024, 12, 10), 'income'),
            make_txn(200, date(2025, 2, 5), 'expense'),
        ]
        history = monthly_balance_history(transactions, date(2025, 3, 15), months=3)
        assert [h['month_key'] for h in history] == ['2025-01', '2025-02', '2025-03']
        assert [h['month'] for h in history] == ['Jan', 'Feb', 'Mar']
        assert [h['value'] for h in history] == [Decimal('1000'), Decimal('800'), Decimal('800')]

    def test_months_before_any_activity_are_zero(self, make_txn):
        transactions = [make_txn(500, date(2025, 3, 1), 'income')]
        history = monthly_balance_history(transactions, date(2025, 3, 15), months=2)
        assert [h['value'] for h in history] == [Decimal('0'), Decimal('500')]

    def test_crosses_year_boundary(self):
        history = monthly_balance_history([], date(2025, 1, 10), months=2)
        assert [h['month_key'] for h in history] == ['2024-12', '2025-01']

    def test_default_six_months(self):
        assert len(monthly_balance_history([], date(2025, 6, 1))) == 6
