"""Data model entities."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Optional

CENT = Decimal('0.01')


class TransactionType(Enum):
    """Transaction (and category) direction."""
    INCOME = "income"
    EXPENSE = "expense"


class SpendingType(Enum):
    """Optional need/want tag on expenses."""
    NEED = "need"
    WANT = "want"


class AccountType(Enum):
    """Account types."""
    BANK = "bank"
    EWALLET = "ewallet"
    CASH = "cash"
    INVESTMENT = "investment"
    CREDIT_CARD = "credit_card"
    OTHER = "other"


class BudgetPeriod(Enum):
    """Budget period kinds."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


ACCOUNT_TYPE_LABELS = {
    'bank': 'Bank',
    'ewallet': 'E-Wallet',
    'cash': 'Cash',
    'investment': 'Investment',
    'credit_card': 'Credit Card',
    'other': 'Other',
}

PERIOD_LABELS = {
    'weekly': 'Weekly',
    'monthly': 'Monthly',
    'yearly': 'Yearly',
}


def to_decimal(value: Any) -> Decimal:
    """Convert a stored REAL/str/int amount to Decimal without float noise."""
    if value is None:
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value: Decimal) -> Decimal:
    """Round to 2 decimal places."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def percent(part: Decimal, whole: Decimal) -> int:
    """Integer percentage of part in whole, rounded half away from zero.

    Returns 0 when whole is not positive.
    """
    if whole <= 0:
        return 0
    return int((part * 100 / whole).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def parse_date(value: Any) -> Optional[date]:
    """Parse a YYYY-MM-DD string (or pass through a date)."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], '%Y-%m-%d').date()


@dataclass
class User:
    """Application user."""
    id: int
    name: str
    email: str
    password_hash: str
    currency: str = 'IDR'
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict) -> 'User':
        """Create from database row dict."""
        return cls(
            id=d['id'],
            name=d['name'],
            email=d['email'],
            password_hash=d['password_hash'],
            currency=d.get('currency') or 'IDR',
            created_at=d.get('created_at')
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'currency': self.currency,
        }


@dataclass
class Category:
    """Transaction category."""
    id: int
    user_id: int
    name: str
    type: TransactionType
    color: Optional[str] = None
    is_default: bool = False
    transaction_count: Optional[int] = None

    @classmethod
    def from_dict(cls, d: dict) -> 'Category':
        """Create from database row dict."""
        return cls(
            id=d['id'],
            user_id=d['user_id'],
            name=d['name'],
            type=TransactionType(d['type']),
            color=d.get('color'),
            is_default=bool(d.get('is_default', 0)),
            transaction_count=d.get('transaction_count')
        )

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'name': self.name,
            'type': self.type.value,
            'color': self.color,
            'is_default': self.is_default,
        }
        if self.transaction_count is not None:
            data['transaction_count'] = self.transaction_count
        return data


@dataclass
class Account:
    """Money account. The current balance is never stored."""
    id: int
    user_id: int
    name: str
    type: AccountType
    initial_balance: Decimal
    currency: str = 'IDR'
    icon: Optional[str] = None
    color: Optional[str] = None
    is_active: bool = True
    transaction_count: Optional[int] = None

    @property
    def type_label(self) -> str:
        return ACCOUNT_TYPE_LABELS.get(self.type.value, self.type.value)

    @classmethod
    def from_dict(cls, d: dict) -> 'Account':
        """Create from database row dict."""
        return cls(
            id=d['id'],
            user_id=d['user_id'],
            name=d['name'],
            type=AccountType(d['type']),
            initial_balance=to_decimal(d.get('initial_balance')),
            currency=d.get('currency') or 'IDR',
            icon=d.get('icon'),
            color=d.get('color'),
            is_active=bool(d.get('is_active', 1)),
            transaction_count=d.get('transaction_count')
        )

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'name': self.name,
            'type': self.type.value,
            'type_label': self.type_label,
            'initial_balance': self.initial_balance,
            'currency': self.currency,
            'icon': self.icon,
            'color': self.color,
            'is_active': self.is_active,
        }
        if self.transaction_count is not None:
            data['transaction_count'] = self.transaction_count
        return data


@dataclass
class Transaction:
    """Ledger row. Amounts are positive; direction comes from type."""
    id: Optional[int]
    user_id: int
    category_id: int
    type: TransactionType
    amount: Decimal
    transaction_date: date
    account_id: Optional[int] = None
    note: Optional[str] = None
    spending_type: Optional[SpendingType] = None
    # Joined fields for display
    category_name: Optional[str] = None
    category_color: Optional[str] = None

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.is_income else -self.amount

    @property
    def month_key(self) -> str:
        return self.transaction_date.strftime('%Y-%m')

    @classmethod
    def from_dict(cls, d: dict) -> 'Transaction':
        """Create from database row dict."""
        spending_type = d.get('spending_type')
        return cls(
            id=d.get('id'),
            user_id=d['user_id'],
            category_id=d['category_id'],
            type=TransactionType(d['type']),
            amount=to_decimal(d['amount']),
            transaction_date=parse_date(d['transaction_date']),
            account_id=d.get('account_id'),
            note=d.get('note'),
            spending_type=SpendingType(spending_type) if spending_type else None,
            category_name=d.get('category_name'),
            category_color=d.get('category_color')
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'type': self.type.value,
            'amount': self.amount,
            'transaction_date': self.transaction_date.isoformat(),
            'note': self.note,
            'spending_type': self.spending_type.value if self.spending_type else None,
            'account_id': self.account_id,
            'category': {
                'id': self.category_id,
                'name': self.category_name,
                'color': self.category_color,
            },
        }


@dataclass
class Budget:
    """Spending budget. Spent/remaining/progress are derived, never stored."""
    id: int
    user_id: int
    name: str
    amount: Decimal
    period: BudgetPeriod
    start_date: date
    category_id: Optional[int] = None
    end_date: Optional[date] = None
    alert_threshold: int = 80
    is_active: bool = True
    # Joined fields for display
    category_name: Optional[str] = None
    category_color: Optional[str] = None

    @property
    def period_label(self) -> str:
        return PERIOD_LABELS.get(self.period.value, self.period.value)

    @classmethod
    def from_dict(cls, d: dict) -> 'Budget':
        """Create from database row dict."""
        threshold = d.get('alert_threshold')
        return cls(
            id=d['id'],
            user_id=d['user_id'],
            name=d['name'],
            amount=to_decimal(d['amount']),
            period=BudgetPeriod(d.get('period') or 'monthly'),
            start_date=parse_date(d['start_date']),
            category_id=d.get('category_id'),
            end_date=parse_date(d.get('end_date')),
            alert_threshold=int(threshold) if threshold is not None else 80,
            is_active=bool(d.get('is_active', 1)),
            category_name=d.get('category_name'),
            category_color=d.get('category_color')
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'amount': self.amount,
            'period': self.period.value,
            'period_label': self.period_label,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'alert_threshold': self.alert_threshold,
            'is_active': self.is_active,
            'category': {
                'id': self.category_id,
                'name': self.category_name,
                'color': self.category_color,
            } if self.category_id else None,
        }


@dataclass
class BalancePoint:
    """Derived (date, balance) pair. Not persisted."""
    date: date
    balance: Decimal

    def to_dict(self) -> dict:
        return {'date': self.date.isoformat(), 'balance': self.balance}
