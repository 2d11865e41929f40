"""Account balance calculations.

Balances are always derived from the ledger:
initial_balance + income - expense. Nothing here reads or writes storage;
callers pass the account and its transactions in.
"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List

from finflow.models.entities import Account, BalancePoint, Transaction, money
from finflow.utils.dates import add_months, month_key

DEFAULT_HISTORY_DAYS = 30
DEFAULT_HISTORY_MONTHS = 6


def net_change(transactions: Iterable[Transaction]) -> Decimal:
    """Sum of income minus sum of expense."""
    return sum((t.signed_amount for t in transactions), Decimal('0'))


def current_balance(account: Account, transactions: Iterable[Transaction]) -> Decimal:
    """Current balance of an account.

    Args:
        account: The account
        transactions: All transactions referencing the account (no date filter)

    Returns:
        initial_balance + income - expense
    """
    return account.initial_balance + net_change(transactions)


def balances_by_account(accounts: Iterable[Account],
                        transactions: Iterable[Transaction]) -> Dict[int, Decimal]:
    """Current balance for each account from one batch of a user's transactions.

    Transactions without an account are ignored.
    """
    changes: Dict[int, Decimal] = defaultdict(Decimal)
    for txn in transactions:
        if txn.account_id is not None:
            changes[txn.account_id] += txn.signed_amount

    return {a.id: a.initial_balance + changes.get(a.id, Decimal('0')) for a in accounts}


class BalanceHistory:
    """Day-by-day balance series.

    Iterating yields one BalancePoint per calendar day from start to end
    inclusive. The series is computed lazily and can be iterated any
    number of times.
    """

    def __init__(self, opening_balance: Decimal, daily_changes: Dict[date, Decimal],
                 start: date, end: date):
        self.opening_balance = opening_balance
        self.daily_changes = daily_changes
        self.start = start
        self.end = end

    def __iter__(self) -> Iterator[BalancePoint]:
        running = self.opening_balance
        day = self.start
        while day <= self.end:
            running += self.daily_changes.get(day, Decimal('0'))
            yield BalancePoint(date=day, balance=money(running))
            day += timedelta(days=1)

    def __len__(self) -> int:
        return max(0, (self.end - self.start).days + 1)

    def to_list(self) -> List[dict]:
        return [point.to_dict() for point in self]


def balance_history(account: Account, transactions: Iterable[Transaction], today: date,
                    window_days: int = DEFAULT_HISTORY_DAYS) -> BalanceHistory:
    """Balance of an account for each day of a trailing window.

    Transactions before the window are folded into the opening balance
    once; each day of the window then applies that day's transactions
    before its point is recorded. Transactions after today are ignored.

    Args:
        account: The account
        transactions: The account's transactions
        today: Last day of the window
        window_days: Window covers today - window_days .. today

    Returns:
        BalanceHistory with window_days + 1 points
    """
    start = today - timedelta(days=window_days)

    opening = account.initial_balance
    daily: Dict[date, Decimal] = defaultdict(Decimal)

    for txn in transactions:
        if txn.transaction_date > today:
            continue
        if txn.transaction_date < start:
            opening += txn.signed_amount
        else:
            daily[txn.transaction_date] += txn.signed_amount

    return BalanceHistory(opening, dict(daily), start, today)


def monthly_balance_history(transactions: Iterable[Transaction], today: date,
                            months: int = DEFAULT_HISTORY_MONTHS) -> List[dict]:
    """Portfolio-wide cumulative balance at each of the trailing months.

    Builds a cumulative net balance per month that had activity, then for
    each of the last `months` months (ending with today's month) reports
    the latest cumulative value at or before it, carrying balances forward
    through months without transactions.

    Args:
        transactions: All of a user's transactions
        today: Reference date
        months: Number of months to report

    Returns:
        List of {month, month_key, value}, oldest first
    """
    changes: Dict[str, Decimal] = defaultdict(Decimal)
    for txn in transactions:
        changes[txn.month_key] += txn.signed_amount

    cumulative_by_month: List[tuple] = []
    cumulative = Decimal('0')
    for key in sorted(changes):
        cumulative += changes[key]
        cumulative_by_month.append((key, cumulative))

    history = []
    for offset in range(months - 1, -1, -1):
        year, month = add_months(today.year, today.month, -offset)
        first_day = date(year, month, 1)
        key = month_key(first_day)

        balance = Decimal('0')
        for m, value in cumulative_by_month:
            if m > key:
                break
            balance = value

        history.append({
            'month': first_day.strftime('%b'),
            'month_key': key,
            'value': money(balance),
        })

    return history
