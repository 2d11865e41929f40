"""Spending insights.

Each generator looks at one aspect of a month and returns an insight dict,
or None when there is nothing to report. Generators are independent of
each other.
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, List, Optional

from finflow.models.entities import SpendingType, Transaction, TransactionType, money
from finflow.services import reports
from finflow.utils.dates import iso_week_key, month_key, previous_month_key, week_bounds
from finflow.utils.formatting import format_currency


def expense_change_insight(transactions: List[Transaction], month: str) -> Optional[dict]:
    """Month-over-month change in total expense."""
    current = reports.monthly_totals(transactions, month)['expense']
    previous = reports.monthly_totals(transactions, previous_month_key(month))['expense']

    if current == 0 and previous == 0:
        return None

    change = reports.percentage_change(previous, current)
    if change > 0:
        change_text = f"up {change}%"
    else:
        change_text = f"down {abs(change)}%"

    return {
        'type': 'expense_change',
        'title': 'Spending Change',
        'description': f"Spending this month is {change_text} from last month",
        'trend': 'up' if change > 0 else 'down',
        'value': change,
    }


def top_category_insight(transactions: List[Transaction], month: str) -> Optional[dict]:
    """Largest expense category of the month."""
    top = reports.category_breakdown(transactions, month, limit=1)
    if not top:
        return None

    return {
        'type': 'top_category',
        'title': 'Top Spending Category',
        'description': f"Your biggest expense this month: {top[0]['category']}",
        'category': top[0]['category'],
        'amount': top[0]['amount'],
    }


def top_want_category_insight(transactions: List[Transaction], month: str) -> Optional[dict]:
    """Largest category among expenses tagged as wants."""
    wants = [t for t in transactions if t.spending_type is SpendingType.WANT]
    top = reports.category_breakdown(wants, month, limit=1)
    if not top:
        return None

    return {
        'type': 'top_want_category',
        'title': 'Top Want Category',
        'description': f"Most of your 'want' spending went to {top[0]['category']}",
        'category': top[0]['category'],
        'amount': top[0]['amount'],
    }


def need_want_trend_insight(transactions: List[Transaction], month: str) -> Optional[dict]:
    """Change in the share of want spending against last month."""
    current = reports.need_want_ratio(transactions, month)
    previous = reports.need_want_ratio(transactions, previous_month_key(month))

    current_total = current['need_amount'] + current['want_amount']
    previous_total = previous['need_amount'] + previous['want_amount']
    if current_total == 0 and previous_total == 0:
        return None

    points = current['want'] - previous['want']
    if points > 0:
        description = f"Wants are {current['want']}% of tagged spending, up {points} points"
    elif points < 0:
        description = f"Wants are {current['want']}% of tagged spending, down {abs(points)} points"
    else:
        description = f"Wants are steady at {current['want']}% of tagged spending"

    return {
        'type': 'need_want_trend',
        'title': 'Needs vs Wants',
        'description': description,
        'trend': 'up' if points > 0 else 'down' if points < 0 else 'flat',
        'need_percentage': current['need'],
        'want_percentage': current['want'],
        'value': points,
    }


INSIGHT_GENERATORS: List[Callable[[List[Transaction], str], Optional[dict]]] = [
    expense_change_insight,
    top_category_insight,
    top_want_category_insight,
    need_want_trend_insight,
]


def weekly_reflection(transactions: Iterable[Transaction], today: date,
                      currency: str = 'IDR') -> dict:
    """Expense activity in the Monday..Sunday week containing today."""
    start, end = week_bounds(today)
    week_expenses = [
        t for t in transactions
        if t.type is TransactionType.EXPENSE and start <= t.transaction_date <= end
    ]
    total = sum((t.amount for t in week_expenses), Decimal('0'))
    want_count = sum(1 for t in week_expenses if t.spending_type is SpendingType.WANT)

    if week_expenses:
        message = (
            f"This week you made {len(week_expenses)} expenses "
            f"totalling {format_currency(total, currency)}"
        )
    else:
        message = "No transactions this week yet."

    return {
        'week': iso_week_key(today),
        'total_transactions': len(week_expenses),
        'want_transactions': want_count,
        'total_amount': money(total),
        'message': message,
    }


def get_insights(transactions: Iterable[Transaction], today: date,
                 month: Optional[str] = None, currency: str = 'IDR') -> dict:
    """Run every insight generator for a month.

    Args:
        transactions: A user's transactions
        today: Reference date (also picks the week for the reflection)
        month: Month key (YYYY-MM), defaults to today's month
        currency: Currency code for messages

    Returns:
        Dict with the non-empty insights, in generator order, and the weekly reflection
    """
    transactions = list(transactions)
    month = month or month_key(today)

    insights = []
    for generator in INSIGHT_GENERATORS:
        insight = generator(transactions, month)
        if insight is not None:
            insights.append(insight)

    return {
        'insights': insights,
        'weekly_reflection': weekly_reflection(transactions, today, currency),
    }
