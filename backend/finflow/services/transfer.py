"""Fund transfers between accounts."""

from datetime import date
from decimal import Decimal
from typing import Optional

from aws_lambda_powertools import Logger

from finflow.models.defaults import TRANSFER_CATEGORY_NAME
from finflow.models.entities import Account, Category
from finflow.services import balance, database

logger = Logger(service="finflow-transfer")


class TransferError(ValueError):
    """A transfer precondition failed."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def resolve_transfer_category(user_id: int, category_type: str) -> Category:
    """Category used to file one side of a transfer.

    Uses the owner's category of the given type named 'Other', falling
    back to their first category of that type.

    Raises:
        TransferError: The owner has no category of that type
    """
    category = database.find_category(user_id, category_type, TRANSFER_CATEGORY_NAME)
    if category is None:
        category = database.find_category(user_id, category_type)
    if category is None:
        raise TransferError(
            'MISSING_CATEGORY',
            f'No {category_type} category available to record the transfer'
        )
    return category


def transfer(from_account: Account, to_account: Account, amount: Decimal,
             note: Optional[str] = None, transaction_date: Optional[date] = None) -> dict:
    """Move funds between two accounts as a paired expense/income.

    Both transactions are written in a single database transaction: either
    both exist afterwards or neither does.

    Args:
        from_account: Source account (gets the expense)
        to_account: Destination account (gets the income)
        amount: Positive amount to move
        note: Free text appended to the generated notes
        transaction_date: Date for both transactions (defaults to today)

    Returns:
        Dict with both transactions and both accounts' new balances

    Raises:
        TransferError: Same account, non-positive amount, or no category
    """
    if from_account.id == to_account.id:
        raise TransferError('SAME_ACCOUNT', 'Cannot transfer to the same account')

    if amount is None or amount <= 0:
        raise TransferError('INVALID_AMOUNT', 'Transfer amount must be greater than zero')

    note = note or 'Transfer'
    transaction_date = transaction_date or date.today()

    expense_category = resolve_transfer_category(from_account.user_id, 'expense')
    income_category = resolve_transfer_category(to_account.user_id, 'income')

    with database.transaction() as conn:
        expense_id = database.insert_transaction(
            conn,
            from_account.user_id,
            expense_category.id,
            'expense',
            amount,
            transaction_date,
            account_id=from_account.id,
            note=f"Transfer to {to_account.name}: {note}"
        )
        income_id = database.insert_transaction(
            conn,
            to_account.user_id,
            income_category.id,
            'income',
            amount,
            transaction_date,
            account_id=to_account.id,
            note=f"Transfer from {from_account.name}: {note}"
        )

    from_balance = balance.current_balance(
        from_account, database.get_transactions(from_account.user_id, account_id=from_account.id)
    )
    to_balance = balance.current_balance(
        to_account, database.get_transactions(to_account.user_id, account_id=to_account.id)
    )

    logger.info("Transfer completed", extra={
        "from_account_id": from_account.id,
        "to_account_id": to_account.id,
        "expense_transaction_id": expense_id,
        "income_transaction_id": income_id
    })

    return {
        'expense_transaction': database.get_transaction(from_account.user_id, expense_id),
        'income_transaction': database.get_transaction(to_account.user_id, income_id),
        'from_account_new_balance': from_balance,
        'to_account_new_balance': to_balance,
    }
