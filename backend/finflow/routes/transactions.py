"""Transaction routes."""

import math
from datetime import date
from typing import Optional

from finflow.models.entities import SpendingType, TransactionType, User
from finflow.services import database
from finflow.utils.dates import is_month_key
from finflow.utils.http import not_found, success_response
from finflow.utils.validation import Validator

DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100

TRANSACTION_TYPES = [t.value for t in TransactionType]
SPENDING_TYPES = [t.value for t in SpendingType]

FILTER_FIELDS = ('type', 'category_id', 'account_id', 'spending_type', 'start_date', 'end_date', 'month')


def _validate_transaction(user: User, body: dict, partial: bool = False) -> dict:
    validator = Validator(body, partial=partial)
    category_id = validator.integer('category_id')
    account_id = validator.integer('account_id', required=False)
    validator.choice('type', TRANSACTION_TYPES)
    validator.amount('amount')
    validator.date('transaction_date', not_after=date.today())
    validator.string('note', required=False, max_length=255)
    validator.choice('spending_type', SPENDING_TYPES, required=False)

    if category_id and database.get_category(user.id, category_id) is None:
        validator.error('category_id', 'The selected category_id is invalid.')

    if account_id and database.get_account(user.id, account_id) is None:
        validator.error('account_id', 'The selected account_id is invalid.')

    return validator.validate()


def _page_number(value, default: int, maximum: Optional[int] = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number < 1:
        return default
    return min(number, maximum) if maximum else number


def handle_list_transactions(user: User, query: dict) -> dict:
    """List transactions with optional filters, newest first.

    Args:
        user: Authenticated user
        query: Query parameters (type, category_id, account_id, spending_type,
            start_date, end_date, month, page, per_page)

    Returns:
        Response with one page of transactions and pagination meta
    """
    filters = {k: query[k] for k in FILTER_FIELDS if query.get(k)}
    if 'month' in filters and not is_month_key(filters['month']):
        del filters['month']

    page = _page_number(query.get('page'), 1)
    per_page = _page_number(query.get('per_page'), DEFAULT_PER_PAGE, MAX_PER_PAGE)

    transactions, total = database.list_transactions(user.id, filters, page, per_page)

    return success_response({
        'transactions': [t.to_dict() for t in transactions],
        'pagination': {
            'current_page': page,
            'per_page': per_page,
            'total': total,
            'last_page': max(1, math.ceil(total / per_page))
        }
    })


def handle_create(user: User, body: dict) -> dict:
    """Record a transaction."""
    fields = _validate_transaction(user, body)
    txn = database.create_transaction(user.id, fields)
    return success_response(txn.to_dict(), status_code=201, message='Transaction created successfully')


def handle_get(user: User, transaction_id: int) -> dict:
    txn = database.get_transaction(user.id, transaction_id)
    if txn is None:
        return not_found('Transaction')
    return success_response(txn.to_dict())


def handle_update(user: User, transaction_id: int, body: dict) -> dict:
    """Update a transaction.

    Args:
        user: Authenticated user
        transaction_id: Transaction ID
        body: Fields to update

    Returns:
        Response with updated transaction
    """
    if database.get_transaction(user.id, transaction_id) is None:
        return not_found('Transaction')

    fields = _validate_transaction(user, body, partial=True)
    txn = database.update_transaction(user.id, transaction_id, fields)
    return success_response(txn.to_dict(), message='Transaction updated successfully')


def handle_delete(user: User, transaction_id: int) -> dict:
    if database.get_transaction(user.id, transaction_id) is None:
        return not_found('Transaction')

    database.delete_transaction(user.id, transaction_id)
    return success_response(None, message='Transaction deleted successfully')
