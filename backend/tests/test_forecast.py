"""Tests for the cash-flow forecast."""

from datetime import date
from decimal import Decimal

from finflow.services.forecast import (
    NOT_AT_RISK_DAYS,
    average_daily_expense,
    get_forecast,
    project_balance,
    safe_days_remaining,
)

TODAY = date(2025, 1, 20)


class TestAverageDailyExpense:
    """Tests for average_daily_expense."""

    def test_fixed_divisor(self, make_txn):
        """Divides by 30 even when spending happened on one day."""
        transactions = [make_txn(300, date(2025, 1, 10))]
        assert average_daily_expense(transactions, TODAY) == Decimal('10.00')

    def test_window_boundary(self, make_txn):
        transactions = [
            make_txn(30, date(2024, 12, 21)),
            make_txn(999, date(2024, 12, 20)),
            make_txn(999, date(2025, 1, 15), 'income'),
        ]
        assert average_daily_expense(transactions, TODAY) == Decimal('1.00')

    def test_rounded(self, make_txn):
        assert average_daily_expense([make_txn(100, TODAY)], TODAY) == Decimal('3.33')


class TestSafeDays:
    def test_sentinel_without_spending(self):
        assert safe_days_remaining(Decimal('5000'), Decimal('0')) == NOT_AT_RISK_DAYS == 999

    def test_floor(self):
        assert safe_days_remaining(Decimal('100'), Decimal('30')) == 3


class TestProjectBalance:
    def test_starts_tomorrow_and_floors_at_zero(self):
        projection = list(project_balance(Decimal('25'), Decimal('10'), TODAY))
        assert len(projection) == 7
        assert projection[0] == {'date': '2025-01-21', 'projected_balance': Decimal('15.00')}
        assert projection[1]['projected_balance'] == Decimal('5.00')
        assert projection[2]['projected_balance'] == Decimal('0.00')
        assert projection[-1] == {'date': '2025-01-27', 'projected_balance': Decimal('0.00')}


class TestGetForecast:
    """Tests for get_forecast."""

    def test_no_recent_expenses(self, make_txn):
        """Zero trailing expenses gives a zero average and the sentinel."""
        transactions = [
            make_txn(1000, date(2024, 1, 1), 'income'),
            make_txn(200, date(2024, 2, 1)),
        ]
        result = get_forecast(transactions, TODAY)
        assert result['current_balance'] == Decimal('800')
        assert result['average_daily_expense'] == Decimal('0')
        assert result['safe_days_remaining'] == 999
        assert result['estimated_end_of_month_balance'] == Decimal('800')
        assert all(p['projected_balance'] == Decimal('800') for p in result['projection'])

    def test_end_of_month_estimate(self, make_txn):
        transactions = [
            make_txn(1000, date(2025, 1, 1), 'income'),
            make_txn(300, date(2025, 1, 10)),
        ]
        result = get_forecast(transactions, TODAY)
        # 700 - 10/day * 11 days left in January
        assert result['estimated_end_of_month_balance'] == Decimal('590.00')
        assert result['safe_days_remaining'] == 70

    def test_estimate_never_negative(self, make_txn):
        transactions = [make_txn(3000, date(2025, 1, 10))]
        result = get_forecast(transactions, TODAY)
        assert result['current_balance'] == Decimal('-3000')
        assert result['estimated_end_of_month_balance'] == Decimal('0')
