"""Request body validation."""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional

from finflow.models.entities import parse_date

COLOR_PATTERN = re.compile(r'^#[0-9A-Fa-f]{6}$')
CURRENCY_PATTERN = re.compile(r'^[A-Za-z]{3}$')
EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


class ValidationError(ValueError):
    """Request data failed validation."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__('The given data was invalid.')
        self.errors = errors


class Validator:
    """Collects per-field errors while pulling cleaned values out of a body.

    Each accessor returns the cleaned value (or None) and records an error
    for the field when the value is invalid. With partial=True, fields
    missing from the body are skipped instead of reported as required,
    which is how updates are validated.
    """

    def __init__(self, body: Optional[dict], partial: bool = False):
        self.body = body or {}
        self.partial = partial
        self.errors: Dict[str, str] = {}
        self.cleaned: Dict[str, Any] = {}

    def _present(self, field: str) -> bool:
        value = self.body.get(field)
        return value is not None and value != ''

    def _skip(self, field: str, required: bool) -> bool:
        """True when the field is absent and that is allowed."""
        if self._present(field):
            return False
        if required and not (self.partial and field not in self.body):
            self.errors[field] = f'The {field} field is required.'
        elif field in self.body:
            # Explicit null clears an optional field
            self.cleaned[field] = None
        return True

    def string(self, field: str, required: bool = True, max_length: Optional[int] = None,
               pattern: Optional[re.Pattern] = None) -> Optional[str]:
        if self._skip(field, required):
            return None
        value = str(self.body[field]).strip()
        if required and not value:
            self.errors[field] = f'The {field} field is required.'
            return None
        if max_length is not None and len(value) > max_length:
            self.errors[field] = f'The {field} may not be greater than {max_length} characters.'
            return None
        if pattern is not None and not pattern.match(value):
            self.errors[field] = f'The {field} format is invalid.'
            return None
        self.cleaned[field] = value
        return value

    def choice(self, field: str, choices: Iterable[str], required: bool = True) -> Optional[str]:
        if self._skip(field, required):
            return None
        value = str(self.body[field])
        if value not in set(choices):
            self.errors[field] = f'The selected {field} is invalid.'
            return None
        self.cleaned[field] = value
        return value

    def amount(self, field: str, minimum: Decimal = Decimal('0.01'),
               required: bool = True) -> Optional[Decimal]:
        if self._skip(field, required):
            return None
        try:
            value = Decimal(str(self.body[field]))
        except (InvalidOperation, ValueError):
            self.errors[field] = f'The {field} must be a number.'
            return None
        if not value.is_finite() or value < minimum:
            self.errors[field] = f'The {field} must be at least {minimum}.'
            return None
        self.cleaned[field] = value
        return value

    def integer(self, field: str, required: bool = True, minimum: Optional[int] = None,
                maximum: Optional[int] = None) -> Optional[int]:
        if self._skip(field, required):
            return None
        try:
            value = int(self.body[field])
        except (TypeError, ValueError):
            self.errors[field] = f'The {field} must be an integer.'
            return None
        if (minimum is not None and value < minimum) or (maximum is not None and value > maximum):
            self.errors[field] = f'The {field} must be between {minimum} and {maximum}.'
            return None
        self.cleaned[field] = value
        return value

    def date(self, field: str, required: bool = True,
             not_after: Optional[date] = None, after: Optional[date] = None) -> Optional[date]:
        if self._skip(field, required):
            return None
        try:
            value = parse_date(self.body[field])
        except (TypeError, ValueError):
            self.errors[field] = f'The {field} is not a valid date.'
            return None
        if not_after is not None and value > not_after:
            self.errors[field] = f'The {field} must not be in the future.'
            return None
        if after is not None and value <= after:
            self.errors[field] = f'The {field} must be a date after {after.isoformat()}.'
            return None
        self.cleaned[field] = value
        return value

    def boolean(self, field: str) -> Optional[bool]:
        if field not in self.body:
            return None
        value = self.body[field]
        if isinstance(value, str):
            value = value.lower() in ('1', 'true', 'yes')
        self.cleaned[field] = bool(value)
        return self.cleaned[field]

    def error(self, field: str, message: str) -> None:
        self.errors[field] = message
        self.cleaned.pop(field, None)

    def validate(self) -> Dict[str, Any]:
        """Return the cleaned fields, or raise with every recorded error."""
        if self.errors:
            raise ValidationError(self.errors)
        return self.cleaned
