"""Display formatting for money values."""

from decimal import Decimal
from typing import Union

CURRENCY_SYMBOLS = {
    'IDR': 'Rp',
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
    'SGD': 'S$',
}

# Currencies shown without minor units
ZERO_DECIMAL_CURRENCIES = {'IDR', 'JPY', 'KRW', 'VND'}


def format_currency(amount: Union[Decimal, float, int], currency: str = 'IDR') -> str:
    """Format amount as a currency string, e.g. 'Rp 1,200,000' or '$1,234.50'."""
    currency = (currency or 'IDR').upper()
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    places = 0 if currency in ZERO_DECIMAL_CURRENCIES else 2
    sign = '-' if amount < 0 else ''
    number = f"{abs(Decimal(str(amount))):,.{places}f}"
    separator = '' if symbol in ('$', '€', '£', 'S$') else ' '
    return f"{sign}{symbol}{separator}{number}"
