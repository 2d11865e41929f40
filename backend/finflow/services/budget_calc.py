"""Budget calculation service.

Every figure is derived from the calendar period containing `today`,
never from the budget's stored start/end dates. Weeks run Monday..Sunday.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from aws_lambda_powertools import Logger

from finflow.models.entities import Budget, BudgetPeriod, Transaction, TransactionType, money, percent
from finflow.utils.dates import last_day_of_month, week_bounds
from finflow.utils.formatting import format_currency

logger = Logger(service="finflow-budgets")

# Label used when a budget is not scoped to a category
TOTAL_LABEL = 'Total'


def period_window(period: BudgetPeriod, today: date) -> Tuple[date, date]:
    """Calendar week/month/year containing today.

    Args:
        period: Budget period kind
        today: Reference date

    Returns:
        (period_start, period_end), both inclusive
    """
    if period is BudgetPeriod.WEEKLY:
        return week_bounds(today)

    if period is BudgetPeriod.YEARLY:
        return date(today.year, 1, 1), date(today.year, 12, 31)

    # Monthly
    return today.replace(day=1), last_day_of_month(today)


def spent_amount(budget: Budget, expenses: Iterable[Transaction], today: date) -> Decimal:
    """Sum of the owner's expenses inside the current period window.

    Unscoped budgets (no category) count every expense.

    Args:
        budget: The budget
        expenses: The owner's expense transactions (may span more than the window)
        today: Reference date

    Returns:
        Spent amount
    """
    start, end = period_window(budget.period, today)
    total = Decimal('0')

    for txn in expenses:
        if txn.type is not TransactionType.EXPENSE:
            continue
        if not start <= txn.transaction_date <= end:
            continue
        if budget.category_id and txn.category_id != budget.category_id:
            continue
        total += txn.amount

    return total


def remaining_amount(amount: Decimal, spent: Decimal) -> Decimal:
    """Amount left, floored at zero."""
    return max(Decimal('0'), amount - spent)


def progress_percentage(amount: Decimal, spent: Decimal) -> int:
    """Spent as a whole percentage of amount, capped at 100."""
    if amount <= 0:
        return 0
    return min(100, percent(spent, amount))


def days_remaining(period: BudgetPeriod, today: date) -> int:
    """Whole days from today to the end of the period (today not counted)."""
    _, end = period_window(period, today)
    return max(0, (end - today).days)


def daily_safe_spend(remaining: Decimal, days: int) -> Decimal:
    """How much can be spent per remaining day without exceeding the budget."""
    if days <= 0:
        return Decimal('0')
    return money(remaining / days)


@dataclass
class BudgetProgress:
    """Evaluated state of a budget for the current period."""
    budget: Budget
    period_start: date
    period_end: date
    spent_amount: Decimal
    remaining_amount: Decimal
    progress_percentage: int
    is_over_threshold: bool
    is_exceeded: bool
    days_remaining: int
    daily_safe_spend: Decimal

    @property
    def category_label(self) -> str:
        return self.budget.category_name or TOTAL_LABEL

    @property
    def status(self) -> str:
        if self.is_exceeded:
            return 'exceeded'
        if self.is_over_threshold:
            return 'warning'
        return 'on_track'

    def to_dict(self) -> dict:
        data = self.budget.to_dict()
        data.update({
            'budget_id': self.budget.id,
            'period_start': self.period_start.isoformat(),
            'period_end': self.period_end.isoformat(),
            'spent_amount': money(self.spent_amount),
            'remaining_amount': money(self.remaining_amount),
            'progress_percentage': self.progress_percentage,
            'is_over_threshold': self.is_over_threshold,
            'is_exceeded': self.is_exceeded,
            'days_remaining': self.days_remaining,
            'daily_safe_spend': self.daily_safe_spend,
        })
        return data


def evaluate_budget(budget: Budget, expenses: Iterable[Transaction], today: date) -> BudgetProgress:
    """Compute spent/remaining/progress/threshold state for a budget.

    Never raises for degenerate input: a zero amount gives 0% progress and
    the last day of a period gives zero days remaining and zero safe spend.

    Args:
        budget: The budget
        expenses: The owner's expense transactions
        today: Reference date

    Returns:
        BudgetProgress
    """
    start, end = period_window(budget.period, today)
    spent = spent_amount(budget, expenses, today)
    remaining = remaining_amount(budget.amount, spent)
    progress = progress_percentage(budget.amount, spent)
    days = days_remaining(budget.period, today)

    return BudgetProgress(
        budget=budget,
        period_start=start,
        period_end=end,
        spent_amount=spent,
        remaining_amount=remaining,
        progress_percentage=progress,
        is_over_threshold=progress >= budget.alert_threshold,
        is_exceeded=spent >= budget.amount,
        days_remaining=days,
        daily_safe_spend=daily_safe_spend(remaining, days)
    )


def evaluate_budgets(budgets: Iterable[Budget], expenses: Iterable[Transaction],
                     today: date) -> List[BudgetProgress]:
    """Evaluate several budgets against one batch of expenses."""
    expenses = list(expenses)
    return [evaluate_budget(b, expenses, today) for b in budgets]


def expense_window_start(budgets: Iterable[Budget], today: date) -> Optional[date]:
    """Earliest period start among budgets, for fetching only the expenses needed."""
    starts = [period_window(b.period, today)[0] for b in budgets]
    return min(starts) if starts else None


def get_budget_summary(progress: List[BudgetProgress]) -> dict:
    """Portfolio summary over evaluated active budgets.

    Spent amounts are summed per budget, so overlapping budgets count the
    same expense more than once.

    Args:
        progress: Evaluated active budgets

    Returns:
        Dict with totals, overall progress and status counts. The three
        counts always add up to budget_count.
    """
    total_budget = sum((p.budget.amount for p in progress), Decimal('0'))
    total_spent = sum((p.spent_amount for p in progress), Decimal('0'))
    total_remaining = max(Decimal('0'), total_budget - total_spent)

    over_budget = sum(1 for p in progress if p.is_exceeded)
    near_limit = sum(1 for p in progress if p.is_over_threshold and not p.is_exceeded)

    summary = {
        'total_budget_amount': money(total_budget),
        'total_spent_amount': money(total_spent),
        'total_remaining': money(total_remaining),
        'overall_progress': progress_percentage(total_budget, total_spent),
        'budget_count': len(progress),
        'over_budget_count': over_budget,
        'near_limit_count': near_limit,
        'on_track_count': len(progress) - over_budget - near_limit,
    }

    logger.debug("Budget summary computed", extra={
        "budget_count": summary['budget_count'],
        "over_budget_count": over_budget,
        "near_limit_count": near_limit
    })
    return summary


def check_alerts(progress: List[BudgetProgress], currency: str = 'IDR') -> List[dict]:
    """Alerts for exceeded (high) and near-limit (medium) budgets.

    On-track budgets produce no alert.

    Args:
        progress: Evaluated active budgets
        currency: Currency code used in alert messages

    Returns:
        List of alert dicts, in budget order
    """
    alerts = []

    for p in progress:
        budget = p.budget
        if p.is_exceeded:
            alerts.append({
                'type': 'exceeded',
                'severity': 'high',
                'budget_id': budget.id,
                'budget_name': budget.name,
                'category_name': p.category_label,
                'message': (
                    f"Budget '{budget.name}' has been exceeded! Spent "
                    f"{format_currency(p.spent_amount, currency)} of {format_currency(budget.amount, currency)}"
                ),
                'overage': money(p.spent_amount - budget.amount),
            })
        elif p.is_over_threshold:
            alerts.append({
                'type': 'warning',
                'severity': 'medium',
                'budget_id': budget.id,
                'budget_name': budget.name,
                'category_name': p.category_label,
                'message': (
                    f"Budget '{budget.name}' is at {p.progress_percentage}%! "
                    f"{format_currency(p.remaining_amount, currency)} remaining."
                ),
                'remaining': money(p.remaining_amount),
            })

    return alerts


def get_performance(progress: List[BudgetProgress], period: BudgetPeriod) -> List[dict]:
    """Status of each active budget of one period kind.

    Args:
        progress: Evaluated active budgets
        period: Period kind to keep

    Returns:
        List of dicts with status exceeded, warning or on_track
    """
    return [
        {
            'budget_id': p.budget.id,
            'name': p.budget.name,
            'category': p.category_label,
            'category_color': p.budget.category_color,
            'amount': p.budget.amount,
            'spent': money(p.spent_amount),
            'progress': p.progress_percentage,
            'status': p.status,
        }
        for p in progress
        if p.budget.period is period
    ]
