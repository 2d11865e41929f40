"""Tests for budget calculation service."""

from datetime import date
from decimal import Decimal

import pytest

from finflow.models.entities import BudgetPeriod
from finflow.services.budget_calc import (
    check_alerts,
    daily_safe_spend,
    days_remaining,
    evaluate_budget,
    evaluate_budgets,
    expense_window_start,
    get_budget_summary,
    get_performance,
    period_window,
    progress_percentage,
    spent_amount,
)

TODAY = date(2025, 1, 15)


class TestPeriodWindow:
    """Tests for calendar period windows."""

    def test_weekly_starts_monday(self):
        """2025-01-15 is a Wednesday."""
        assert period_window(BudgetPeriod.WEEKLY, TODAY) == (date(2025, 1, 13), date(2025, 1, 19))

    def test_weekly_on_sunday(self):
        assert period_window(BudgetPeriod.WEEKLY, date(2025, 1, 19)) == (date(2025, 1, 13), date(2025, 1, 19))

    def test_monthly_february(self):
        assert period_window(BudgetPeriod.MONTHLY, date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_yearly(self):
        assert period_window(BudgetPeriod.YEARLY, TODAY) == (date(2025, 1, 1), date(2025, 12, 31))


class TestDaysRemaining:
    """Tests for days_remaining and daily_safe_spend."""

    def test_mid_month(self):
        assert days_remaining(BudgetPeriod.MONTHLY, TODAY) == 16

    def test_last_day_of_period_is_zero(self):
        assert days_remaining(BudgetPeriod.MONTHLY, date(2025, 1, 31)) == 0
        assert days_remaining(BudgetPeriod.YEARLY, date(2025, 12, 31)) == 0
        assert days_remaining(BudgetPeriod.WEEKLY, date(2025, 1, 19)) == 0

    def test_safe_spend_zero_days(self):
        """No division by zero on the last day."""
        assert daily_safe_spend(Decimal('500'), 0) == Decimal('0')

    def test_safe_spend_rounded(self):
        assert daily_safe_spend(Decimal('100'), 3) == Decimal('33.33')


class TestSpentAmount:
    """Tests for spent_amount."""

    def test_only_expenses_inside_window(self, make_budget, make_txn):
        budget = make_budget(1000)
        transactions = [
            make_txn(100, date(2025, 1, 1)),
            make_txn(50, date(2025, 1, 31)),
            make_txn(999, date(2024, 12, 31)),
            make_txn(999, date(2025, 2, 1)),
            make_txn(500, date(2025, 1, 10), 'income'),
        ]
        assert spent_amount(budget, transactions, TODAY) == Decimal('150')

    def test_scoped_to_category(self, make_budget, make_txn):
        budget = make_budget(1000, category_id=2)
        transactions = [
            make_txn(100, date(2025, 1, 5), category_id=1),
            make_txn(40, date(2025, 1, 6), category_id=2),
        ]
        assert spent_amount(budget, transactions, TODAY) == Decimal('40')

    def test_unscoped_counts_all_categories(self, make_budget, make_txn):
        budget = make_budget(1000)
        transactions = [
            make_txn(100, date(2025, 1, 5), category_id=1),
            make_txn(40, date(2025, 1, 6), category_id=2),
        ]
        assert spent_amount(budget, transactions, TODAY) == Decimal('140')

    def test_stored_start_date_is_ignored(self, make_budget, make_txn):
        """The window floats with today, not the budget's start_date."""
        budget = make_budget(1000)
        assert budget.start_date == date(2020, 1, 1)
        assert spent_amount(budget, [make_txn(10, date(2020, 1, 5))], TODAY) == Decimal('0')


class TestEvaluateBudget:
    """Threshold ordering for a 1,000,000 budget with an 80% threshold."""

    @pytest.mark.parametrize('spent,progress,over_threshold,exceeded', [
        (750000, 75, False, False),
        (850000, 85, True, False),
        (1200000, 100, True, True),
        (1000000, 100, True, True),
    ])
    def test_threshold_examples(self, make_budget, make_txn, spent, progress, over_threshold, exceeded):
        result = evaluate_budget(make_budget(1000000), [make_txn(spent, date(2025, 1, 10))], TODAY)
        assert result.progress_percentage == progress
        assert result.is_over_threshold is over_threshold
        assert result.is_exceeded is exceeded

    def test_remaining_floors_at_zero(self, make_budget, make_txn):
        result = evaluate_budget(make_budget(1000000), [make_txn(1200000, date(2025, 1, 10))], TODAY)
        assert result.remaining_amount == Decimal('0')
        assert result.daily_safe_spend == Decimal('0')

    def test_daily_safe_spend(self, make_budget, make_txn):
        result = evaluate_budget(make_budget(1000000), [make_txn(750000, date(2025, 1, 10))], TODAY)
        assert result.remaining_amount == Decimal('250000')
        assert result.days_remaining == 16
        assert result.daily_safe_spend == Decimal('15625.00')

    def test_zero_amount_budget(self, make_budget, make_txn):
        """A zero amount never divides by zero."""
        result = evaluate_budget(make_budget(0), [make_txn(100, date(2025, 1, 10))], TODAY)
        assert result.progress_percentage == 0
        assert progress_percentage(Decimal('0'), Decimal('0')) == 0

    def test_no_transactions(self, make_budget):
        result = evaluate_budget(make_budget(500), [], TODAY)
        assert result.spent_amount == Decimal('0')
        assert result.progress_percentage == 0
        assert result.status == 'on_track'

    def test_to_dict(self, make_budget, make_txn):
        budget = make_budget(1000, category_id=3, category_name='Food')
        data = evaluate_budget(budget, [make_txn(100, date(2025, 1, 10), category_id=3)], TODAY).to_dict()
        assert data['period_start'] == '2025-01-01'
        assert data['period_end'] == '2025-01-31'
        assert data['spent_amount'] == Decimal('100.00')
        assert data['progress_percentage'] == 10
        assert data['category']['name'] == 'Food'


@pytest.fixture
def portfolio(make_budget, make_txn):
    """One on-track, one near-limit and one exceeded budget."""
    budgets = [
        make_budget(1000000, category_id=1, budget_id=1, name='Food', category_name='Food'),
        make_budget(1000000, category_id=2, budget_id=2, name='Transport', category_name='Transportation'),
        make_budget(1000000, budget_id=3, name='Everything', period='weekly'),
    ]
    transactions = [
        make_txn(750000, date(2025, 1, 5), category_id=1),
        make_txn(850000, date(2025, 1, 6), category_id=2),
        make_txn(1200000, date(2025, 1, 14), category_id=4),
    ]
    return evaluate_budgets(budgets, transactions, TODAY)


class TestBudgetSummary:
    """Tests for get_budget_summary."""

    def test_totals(self, portfolio):
        summary = get_budget_summary(portfolio)
        assert summary['total_budget_amount'] == Decimal('3000000')
        # The weekly budget only sees the 1,200,000; the others predate Monday 2025-01-13
        assert summary['total_spent_amount'] == Decimal('2800000')
        assert summary['total_remaining'] == Decimal('200000')
        assert summary['overall_progress'] == 93

    def test_counts_partition_budgets(self, portfolio):
        summary = get_budget_summary(portfolio)
        assert summary['over_budget_count'] == 1
        assert summary['near_limit_count'] == 1
        assert summary['on_track_count'] == 1
        assert (summary['over_budget_count'] + summary['near_limit_count']
                + summary['on_track_count']) == summary['budget_count'] == 3

    def test_empty(self):
        summary = get_budget_summary([])
        assert summary['total_budget_amount'] == Decimal('0')
        assert summary['overall_progress'] == 0
        assert summary['budget_count'] == 0


class TestCheckAlerts:
    """Tests for check_alerts."""

    def test_alert_per_flagged_budget(self, portfolio):
        alerts = check_alerts(portfolio)
        assert [(a['budget_id'], a['type'], a['severity']) for a in alerts] == [
            (2, 'warning', 'medium'),
            (3, 'exceeded', 'high'),
        ]

    def test_warning_fields(self, portfolio):
        warning = check_alerts(portfolio)[0]
        assert warning['category_name'] == 'Transportation'
        assert warning['remaining'] == Decimal('150000')
        assert warning['message'] == "Budget 'Transport' is at 85%! Rp 150,000 remaining."

    def test_exceeded_fields(self, portfolio):
        exceeded = check_alerts(portfolio)[1]
        assert exceeded['category_name'] == 'Total'
        assert exceeded['overage'] == Decimal('200000')
        assert exceeded['message'] == (
            "Budget 'Everything' has been exceeded! Spent Rp 1,200,000 of Rp 1,000,000"
        )

    def test_no_alerts_when_on_track(self, make_budget):
        assert check_alerts(evaluate_budgets([make_budget(100)], [], TODAY)) == []


class TestPerformance:
    """Tests for get_performance."""

    def test_filters_by_period(self, portfolio):
        monthly = get_performance(portfolio, BudgetPeriod.MONTHLY)
        assert [(p['budget_id'], p['status']) for p in monthly] == [(1, 'on_track'), (2, 'warning')]

        weekly = get_performance(portfolio, BudgetPeriod.WEEKLY)
        assert len(weekly) == 1
        assert weekly[0]['status'] == 'exceeded'
        assert weekly[0]['category'] == 'Total'
        assert weekly[0]['progress'] == 100


class TestExpenseWindowStart:
    def test_earliest_start(self, make_budget):
        budgets = [make_budget(1, period='weekly'), make_budget(1, period='yearly')]
        assert expense_window_start(budgets, TODAY) == date(2025, 1, 1)

    def test_no_budgets(self):
        assert expense_window_start([], TODAY) is None
