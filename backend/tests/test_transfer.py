"""Tests for fund transfers between accounts."""

import sqlite3
from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest

from finflow.models.entities import TransactionType
from finflow.services import database
from finflow.services.transfer import TransferError, resolve_transfer_category, transfer


@pytest.fixture
def accounts(user):
    """Account A with 1,000,000 and account B with 500,000."""
    a = database.create_account(user.id, {'name': 'Bank A', 'type': 'bank', 'initial_balance': Decimal('1000000')})
    b = database.create_account(user.id, {'name': 'Wallet B', 'type': 'ewallet', 'initial_balance': Decimal('500000')})
    return a, b


class TestTransfer:
    """Tests for transfer."""

    def test_balance_symmetry(self, user, accounts):
        a, b = accounts
        result = transfer(a, b, Decimal('200000'), transaction_date=date(2025, 1, 10))

        assert result['from_account_new_balance'] == Decimal('800000')
        assert result['to_account_new_balance'] == Decimal('700000')

    def test_creates_exactly_two_transactions(self, user, accounts):
        a, b = accounts
        result = transfer(a, b, Decimal('200000'), note='Rent split', transaction_date=date(2025, 1, 10))

        all_transactions = database.get_transactions(user.id)
        assert len(all_transactions) == 2

        expense = result['expense_transaction']
        income = result['income_transaction']
        assert expense.type is TransactionType.EXPENSE
        assert expense.account_id == a.id
        assert expense.amount == Decimal('200000')
        assert expense.note == 'Transfer to Wallet B: Rent split'
        assert income.type is TransactionType.INCOME
        assert income.account_id == b.id
        assert income.amount == Decimal('200000')
        assert income.note == 'Transfer from Bank A: Rent split'
        assert expense.transaction_date == income.transaction_date == date(2025, 1, 10)

    def test_defaults(self, user, accounts):
        """Note defaults to 'Transfer' and the date to today."""
        a, b = accounts
        result = transfer(a, b, Decimal('1'))
        assert result['expense_transaction'].note == 'Transfer to Wallet B: Transfer'
        assert result['expense_transaction'].transaction_date == date.today()

    def test_uses_other_category(self, user, accounts):
        a, b = accounts
        result = transfer(a, b, Decimal('10'))
        assert result['expense_transaction'].category_name == 'Other'
        assert result['income_transaction'].category_name == 'Other'

    def test_same_account_rejected(self, user, accounts):
        a, _ = accounts
        with pytest.raises(TransferError) as exc_info:
            transfer(a, a, Decimal('10'))
        assert exc_info.value.code == 'SAME_ACCOUNT'
        assert database.get_transactions(user.id) == []

    @pytest.mark.parametrize('amount', [Decimal('0'), Decimal('-5')])
    def test_non_positive_amount_rejected(self, user, accounts, amount):
        a, b = accounts
        with pytest.raises(TransferError) as exc_info:
            transfer(a, b, amount)
        assert exc_info.value.code == 'INVALID_AMOUNT'

    def test_atomic_when_second_insert_fails(self, user, accounts):
        """A failure on the income side leaves no expense behind."""
        a, b = accounts
        real_insert = database.insert_transaction
        calls = []

        def failing_insert(conn, *args, **kwargs):
            calls.append(args)
            if len(calls) == 2:
                raise sqlite3.OperationalError('disk I/O error')
            return real_insert(conn, *args, **kwargs)

        with patch.object(database, 'insert_transaction', side_effect=failing_insert):
            with pytest.raises(sqlite3.OperationalError):
                transfer(a, b, Decimal('200000'))

        assert len(calls) == 2
        assert database.get_transactions(user.id) == []


class TestResolveTransferCategory:
    """Tests for transfer category resolution."""

    def test_falls_back_to_first_category_of_type(self, user):
        other = database.find_category(user.id, 'expense', 'Other')
        database.delete_category(user.id, other.id)

        category = resolve_transfer_category(user.id, 'expense')
        assert category.name == 'Food'

    def test_missing_category(self, user, accounts):
        with database.transaction():
            database.execute("DELETE FROM categories WHERE user_id = ? AND type = 'income'", (user.id,))

        with pytest.raises(TransferError) as exc_info:
            resolve_transfer_category(user.id, 'income')
        assert exc_info.value.code == 'MISSING_CATEGORY'

        a, b = accounts
        with pytest.raises(TransferError):
            transfer(a, b, Decimal('10'))
        assert database.get_transactions(user.id) == []
