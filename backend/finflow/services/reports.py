"""Monthly report calculations.

All functions take a user's transactions (already fetched) and a YYYY-MM
month key. Month matching is by calendar month of the transaction date.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from finflow.models.entities import SpendingType, Transaction, TransactionType, money, percent
from finflow.services.balance import net_change
from finflow.utils.dates import month_key, previous_month_key

DEFAULT_CATEGORY_LIMIT = 10
TOP_CATEGORY_LIMIT = 5


def _in_month(transactions: Iterable[Transaction], month: str) -> List[Transaction]:
    return [t for t in transactions if t.month_key == month]


def _expenses(transactions: Iterable[Transaction]) -> List[Transaction]:
    return [t for t in transactions if t.type is TransactionType.EXPENSE]


def monthly_totals(transactions: Iterable[Transaction], month: str) -> Dict[str, Decimal]:
    """Total income and expense for one month.

    Args:
        transactions: A user's transactions
        month: Month key (YYYY-MM)

    Returns:
        Dict with income and expense
    """
    income = Decimal('0')
    expense = Decimal('0')

    for txn in _in_month(transactions, month):
        if txn.is_income:
            income += txn.amount
        else:
            expense += txn.amount

    return {'income': income, 'expense': expense}


def percentage_change(previous: Decimal, current: Decimal) -> int:
    """Whole-percent change from previous to current.

    A zero previous value gives 100 when current is positive, else 0.
    """
    if previous == 0:
        return 100 if current > 0 else 0
    return percent(current - previous, previous)


def category_breakdown(transactions: Iterable[Transaction], month: str,
                       limit: Optional[int] = DEFAULT_CATEGORY_LIMIT) -> List[dict]:
    """Expenses grouped by category for a month, largest first.

    Percentages are shares of the total of the categories returned.

    Args:
        transactions: A user's transactions
        month: Month key (YYYY-MM)
        limit: Keep only the top N categories (None for all)

    Returns:
        List of {category_id, category, color, amount, percentage}
    """
    groups: Dict[int, dict] = {}

    for txn in _expenses(_in_month(transactions, month)):
        group = groups.setdefault(txn.category_id, {
            'category_id': txn.category_id,
            'category': txn.category_name,
            'color': txn.category_color,
            'amount': Decimal('0'),
        })
        group['amount'] += txn.amount

    ordered = sorted(groups.values(), key=lambda g: (-g['amount'], g['category'] or ''))
    if limit is not None:
        ordered = ordered[:limit]

    total = sum((g['amount'] for g in ordered), Decimal('0'))
    for group in ordered:
        group['amount'] = money(group['amount'])
        group['percentage'] = percent(group['amount'], total)

    return ordered


def daily_breakdown(transactions: Iterable[Transaction], month: str) -> List[dict]:
    """Income and expense per day with activity, in date order."""
    days: Dict[date, Dict[str, Decimal]] = defaultdict(
        lambda: {'income': Decimal('0'), 'expense': Decimal('0')}
    )

    for txn in _in_month(transactions, month):
        days[txn.transaction_date][txn.type.value] += txn.amount

    return [
        {
            'date': day.isoformat(),
            'income': money(totals['income']),
            'expense': money(totals['expense']),
        }
        for day, totals in sorted(days.items())
    ]


def need_want_ratio(transactions: Iterable[Transaction], month: str) -> dict:
    """Split of a month's tagged expenses between needs and wants.

    Untagged expenses are ignored. Both percentages are 0 when nothing
    is tagged.
    """
    need = Decimal('0')
    want = Decimal('0')

    for txn in _expenses(_in_month(transactions, month)):
        if txn.spending_type is SpendingType.NEED:
            need += txn.amount
        elif txn.spending_type is SpendingType.WANT:
            want += txn.amount

    total = need + want
    return {
        'need': percent(need, total),
        'want': percent(want, total),
        'need_amount': money(need),
        'want_amount': money(want),
    }


def monthly_report(transactions: Iterable[Transaction], month: str) -> dict:
    """Full report for a month compared with the previous month.

    Args:
        transactions: A user's transactions (at least both months)
        month: Month key (YYYY-MM)

    Returns:
        Report dict
    """
    transactions = list(transactions)
    previous = previous_month_key(month)

    current_totals = monthly_totals(transactions, month)
    previous_totals = monthly_totals(transactions, previous)
    ratio = need_want_ratio(transactions, month)
    previous_ratio = need_want_ratio(transactions, previous)

    return {
        'month': month,
        'total_income': money(current_totals['income']),
        'total_expense': money(current_totals['expense']),
        'remaining_balance': money(current_totals['income'] - current_totals['expense']),
        'need_want_ratio': {
            'need_percentage': ratio['need'],
            'want_percentage': ratio['want'],
        },
        'comparison_with_previous': {
            'income_change': percentage_change(previous_totals['income'], current_totals['income']),
            'expense_change': percentage_change(previous_totals['expense'], current_totals['expense']),
            'want_change': percentage_change(previous_ratio['want_amount'], ratio['want_amount']),
        },
        'top_categories': category_breakdown(transactions, month, TOP_CATEGORY_LIMIT),
        'daily_breakdown': daily_breakdown(transactions, month),
    }


def dashboard_summary(transactions: Iterable[Transaction], today: date) -> dict:
    """Lifetime balance plus the current month's figures."""
    transactions = list(transactions)
    month = month_key(today)
    totals = monthly_totals(transactions, month)

    return {
        'current_balance': money(net_change(transactions)),
        'monthly_summary': {
            'month': month,
            'total_income': money(totals['income']),
            'total_expense': money(totals['expense']),
            'remaining': money(totals['income'] - totals['expense']),
        },
        'need_want_ratio': need_want_ratio(transactions, month),
        'expense_by_category': category_breakdown(transactions, month),
    }
