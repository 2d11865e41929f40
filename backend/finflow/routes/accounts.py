"""Account routes, including transfers and balance history."""

from decimal import Decimal

from finflow.models.entities import AccountType, User, money
from finflow.services import balance, database
from finflow.services.transfer import TransferError, transfer
from finflow.utils.dates import parse_as_of
from finflow.utils.http import error_response, not_found, success_response
from finflow.utils.validation import COLOR_PATTERN, CURRENCY_PATTERN, Validator

ACCOUNT_TYPES = [t.value for t in AccountType]
MAX_HISTORY_DAYS = 365


def _validate_account(body: dict, partial: bool = False) -> dict:
    validator = Validator(body, partial=partial)
    validator.string('name', max_length=100)
    validator.choice('type', ACCOUNT_TYPES)
    validator.amount('initial_balance', minimum=Decimal('0'), required=False)
    validator.string('currency', required=False, pattern=CURRENCY_PATTERN)
    validator.string('icon', required=False, max_length=50)
    validator.string('color', required=False, pattern=COLOR_PATTERN)
    validator.boolean('is_active')
    fields = validator.validate()

    if fields.get('currency'):
        fields['currency'] = fields['currency'].upper()
    return fields


def _with_balance(account, current: Decimal) -> dict:
    data = account.to_dict()
    data['current_balance'] = money(current)
    return data


def handle_list(user: User) -> dict:
    """List accounts with their current balances.

    Balances are computed from one fetch of the user's transactions.
    """
    accounts = database.get_accounts(user.id)
    balances = balance.balances_by_account(accounts, database.get_transactions(user.id))

    total = sum((balances[a.id] for a in accounts if a.is_active), Decimal('0'))

    return success_response({
        'accounts': [_with_balance(a, balances[a.id]) for a in accounts],
        'total_balance': money(total)
    })


def handle_create(user: User, body: dict) -> dict:
    """Create an account."""
    fields = _validate_account(body)
    account = database.create_account(user.id, fields)
    return success_response(_with_balance(account, account.initial_balance),
                            status_code=201, message='Account created successfully')


def handle_get(user: User, account_id: int) -> dict:
    """Show one account with its current balance."""
    account = database.get_account(user.id, account_id)
    if account is None:
        return not_found('Account')

    current = balance.current_balance(account, database.get_transactions(user.id, account_id=account.id))
    return success_response(_with_balance(account, current))


def handle_update(user: User, account_id: int, body: dict) -> dict:
    """Update an account."""
    if database.get_account(user.id, account_id) is None:
        return not_found('Account')

    fields = _validate_account(body, partial=True)
    account = database.update_account(user.id, account_id, fields)

    current = balance.current_balance(account, database.get_transactions(user.id, account_id=account.id))
    return success_response(_with_balance(account, current), message='Account updated successfully')


def handle_delete(user: User, account_id: int) -> dict:
    """Delete an account that has no transactions."""
    account = database.get_account(user.id, account_id)
    if account is None:
        return not_found('Account')

    if account.transaction_count:
        return error_response(422, 'HAS_TRANSACTIONS',
                              'Cannot delete an account that has transactions')

    database.delete_account(user.id, account_id)
    return success_response(None, message='Account deleted successfully')


def handle_transfer(user: User, body: dict) -> dict:
    """Move funds between two of the user's accounts."""
    validator = Validator(body)
    from_id = validator.integer('from_account_id')
    to_id = validator.integer('to_account_id')
    amount = validator.amount('amount')
    validator.string('note', required=False, max_length=255)
    validator.date('transaction_date', required=False)

    from_account = database.get_account(user.id, from_id) if from_id else None
    to_account = database.get_account(user.id, to_id) if to_id else None
    if from_id and from_account is None:
        validator.error('from_account_id', 'The selected from_account_id is invalid.')
    if to_id and to_account is None:
        validator.error('to_account_id', 'The selected to_account_id is invalid.')

    fields = validator.validate()

    try:
        result = transfer(
            from_account,
            to_account,
            amount,
            note=fields.get('note'),
            transaction_date=fields.get('transaction_date')
        )
    except TransferError as e:
        return error_response(422, e.code, e.message)

    return success_response({
        'expense_transaction': result['expense_transaction'].to_dict(),
        'income_transaction': result['income_transaction'].to_dict(),
        'from_account_new_balance': money(result['from_account_new_balance']),
        'to_account_new_balance': money(result['to_account_new_balance'])
    }, message='Transfer completed successfully')


def handle_balance_history(user: User, account_id: int, query: dict) -> dict:
    """Daily balance series for one account.

    Query:
        days: Window length (default 30)
        as_of_date: Last day of the window (default today)
    """
    account = database.get_account(user.id, account_id)
    if account is None:
        return not_found('Account')

    validator = Validator(query)
    days = validator.integer('days', required=False, minimum=1, maximum=MAX_HISTORY_DAYS)
    validator.validate()

    today = parse_as_of(query.get('as_of_date'))
    history = balance.balance_history(
        account,
        database.get_transactions(user.id, account_id=account.id),
        today,
        days or balance.DEFAULT_HISTORY_DAYS
    )

    return success_response({
        'account_id': account.id,
        'history': history.to_list()
    })
