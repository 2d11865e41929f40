"""Tests for spending insights."""

from datetime import date
from decimal import Decimal

from finflow.services.insights import (
    expense_change_insight,
    get_insights,
    need_want_trend_insight,
    top_category_insight,
    top_want_category_insight,
    weekly_reflection,
)

TODAY = date(2025, 1, 15)


def _sample(make_txn):
    return [
        make_txn(100, date(2024, 12, 3), spending_type='need', category_id=1, category_name='Food'),
        make_txn(100, date(2024, 12, 4), spending_type='want', category_id=2, category_name='Fun'),
        make_txn(300, date(2025, 1, 3), spending_type='need', category_id=1, category_name='Food'),
        make_txn(100, date(2025, 1, 13), spending_type='want', category_id=2, category_name='Fun'),
        make_txn(2000, date(2025, 1, 2), 'income', category_id=9, category_name='Salary'),
    ]


class TestInsightGenerators:
    """Each generator in isolation."""

    def test_expense_change(self, make_txn):
        insight = expense_change_insight(_sample(make_txn), '2025-01')
        assert insight['type'] == 'expense_change'
        assert insight['value'] == 100
        assert insight['trend'] == 'up'
        assert insight['description'] == 'Spending this month is up 100% from last month'

    def test_expense_change_down(self, make_txn):
        transactions = [make_txn(200, date(2024, 12, 1)), make_txn(50, date(2025, 1, 1))]
        insight = expense_change_insight(transactions, '2025-01')
        assert insight['value'] == -75
        assert insight['description'] == 'Spending this month is down 75% from last month'

    def test_top_category(self, make_txn):
        insight = top_category_insight(_sample(make_txn), '2025-01')
        assert insight['category'] == 'Food'
        assert insight['amount'] == Decimal('300')

    def test_top_want_category(self, make_txn):
        insight = top_want_category_insight(_sample(make_txn), '2025-01')
        assert insight['category'] == 'Fun'
        assert insight['amount'] == Decimal('100')

    def test_need_want_trend(self, make_txn):
        insight = need_want_trend_insight(_sample(make_txn), '2025-01')
        assert insight['want_percentage'] == 25
        assert insight['value'] == -25
        assert insight['trend'] == 'down'
        assert insight['description'] == 'Wants are 25% of tagged spending, down 25 points'

    def test_generators_return_none_without_data(self):
        for generator in (expense_change_insight, top_category_insight,
                          top_want_category_insight, need_want_trend_insight):
            assert generator([], '2025-01') is None


class TestWeeklyReflection:
    """Tests for weekly_reflection."""

    def test_counts_current_week_expenses(self, make_txn):
        transactions = [
            make_txn(100, date(2025, 1, 13), spending_type='want'),
            make_txn(50, date(2025, 1, 19), spending_type='need'),
            make_txn(999, date(2025, 1, 12), spending_type='want'),
            make_txn(999, date(2025, 1, 14), 'income'),
        ]
        reflection = weekly_reflection(transactions, TODAY)
        assert reflection['week'] == '2025-W03'
        assert reflection['total_transactions'] == 2
        assert reflection['want_transactions'] == 1
        assert reflection['total_amount'] == Decimal('150')
        assert reflection['message'] == 'This week you made 2 expenses totalling Rp 150'

    def test_empty_week(self):
        reflection = weekly_reflection([], TODAY)
        assert reflection['total_transactions'] == 0
        assert reflection['message'] == 'No transactions this week yet.'


class TestGetInsights:
    def test_keeps_generator_order_and_drops_empty(self, make_txn):
        result = get_insights(_sample(make_txn), TODAY)
        assert [i['type'] for i in result['insights']] == [
            'expense_change', 'top_category', 'top_want_category', 'need_want_trend'
        ]
        assert result['weekly_reflection']['total_transactions'] == 1

    def test_month_defaults_to_today(self, make_txn):
        transactions = [make_txn(10, date(2025, 1, 2))]
        types = [i['type'] for i in get_insights(transactions, TODAY)['insights']]
        assert types == ['expense_change', 'top_category']

    def test_no_data(self):
        assert get_insights([], TODAY)['insights'] == []
