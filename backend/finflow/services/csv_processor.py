"""CSV export of raw transaction rows."""

import csv
import io
import re
from typing import Iterable

from finflow.models.entities import Transaction

EXPORT_COLUMNS = [
    'ID',
    'Date',
    'Type',
    'Category',
    'Amount',
    'Note',
    'Spending Type',
]


def generate_csv(transactions: Iterable[Transaction]) -> str:
    """Generate CSV from transactions.

    Rows are written in the order given; no calculations are applied.

    Args:
        transactions: Transactions to export

    Returns:
        CSV content as string
    """
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_COLUMNS)

    for txn in transactions:
        writer.writerow([
            txn.id,
            txn.transaction_date.isoformat(),
            txn.type.value,
            txn.category_name or '',
            format_amount_for_csv(txn.amount),
            txn.note or '',
            txn.spending_type.value if txn.spending_type else '',
        ])

    return output.getvalue()


def format_amount_for_csv(amount) -> str:
    """Format amount for CSV output."""
    if amount is None:
        return ''
    return f"{amount:.2f}"


def _slug(value: str) -> str:
    return re.sub(r'[^a-z0-9_-]+', '_', value.strip().lower()).strip('_')


def export_filename(scope: str, fallback: str = '') -> str:
    """Download filename for an export, e.g. transactions_2025-01.csv.

    Args:
        scope: Month key or category name; empty for a full export
        fallback: Used when scope has no filename-safe characters

    Returns:
        CSV filename
    """
    slug = _slug(scope) or _slug(fallback)
    return f"transactions_{slug}.csv" if slug else "all_transactions.csv"
