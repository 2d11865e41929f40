"""Cash-flow forecast.

Naive linear projection: the average daily expense over the last 30 days
is assumed to continue unchanged.
"""

import math
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Iterator

from finflow.models.entities import Transaction, TransactionType, money
from finflow.services.balance import net_change
from finflow.utils.dates import last_day_of_month

# Trailing window (and fixed divisor) for the average daily expense
AVERAGE_WINDOW_DAYS = 30
PROJECTION_DAYS = 7
# Reported when there is no recent spending
NOT_AT_RISK_DAYS = 999


def average_daily_expense(transactions: Iterable[Transaction], today: date) -> Decimal:
    """Expenses dated within the last 30 days divided by 30.

    The divisor is fixed: days without spending still count.
    """
    since = today - timedelta(days=AVERAGE_WINDOW_DAYS)
    total = sum(
        (t.amount for t in transactions
         if t.type is TransactionType.EXPENSE and t.transaction_date >= since),
        Decimal('0')
    )
    return money(total / AVERAGE_WINDOW_DAYS)


def safe_days_remaining(balance: Decimal, daily_expense: Decimal) -> int:
    """Whole days the balance lasts at the given burn rate."""
    if daily_expense <= 0:
        return NOT_AT_RISK_DAYS
    return math.floor(balance / daily_expense)


def project_balance(balance: Decimal, daily_expense: Decimal, today: date,
                    days: int = PROJECTION_DAYS) -> Iterator[dict]:
    """Yield the projected balance for each of the next `days` days.

    Starts tomorrow; the balance never goes below zero.
    """
    for offset in range(1, days + 1):
        balance = max(Decimal('0'), balance - daily_expense)
        yield {
            'date': (today + timedelta(days=offset)).isoformat(),
            'projected_balance': money(balance),
        }


def get_forecast(transactions: Iterable[Transaction], today: date) -> dict:
    """Forecast end-of-month balance and runway.

    Args:
        transactions: All of a user's transactions
        today: Reference date

    Returns:
        Dict with current_balance, average_daily_expense,
        estimated_end_of_month_balance, safe_days_remaining and a 7-day projection
    """
    transactions = list(transactions)

    current = net_change(transactions)
    daily_expense = average_daily_expense(transactions, today)
    days_left = (last_day_of_month(today) - today).days

    estimated = max(Decimal('0'), current - daily_expense * days_left)

    return {
        'current_balance': money(current),
        'average_daily_expense': daily_expense,
        'estimated_end_of_month_balance': money(estimated),
        'safe_days_remaining': safe_days_remaining(current, daily_expense),
        'projection': list(project_balance(current, daily_expense, today)),
    }
