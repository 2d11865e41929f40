"""User settings routes."""

from finflow.models.entities import User
from finflow.routes.auth import check_password_strength
from finflow.services import database
from finflow.utils.auth import hash_password, verify_password
from finflow.utils.http import success_response
from finflow.utils.validation import CURRENCY_PATTERN, EMAIL_PATTERN, Validator


def handle_get(user: User) -> dict:
    data = user.to_dict()
    data['created_at'] = user.created_at
    return success_response(data)


def handle_update(user: User, body: dict) -> dict:
    """Update name, email or display currency.

    Args:
        user: Authenticated user
        body: Any of name, email, currency

    Returns:
        Response with the updated user
    """
    validator = Validator(body, partial=True)
    validator.string('name', max_length=255)
    email = validator.string('email', max_length=255, pattern=EMAIL_PATTERN)
    currency = validator.string('currency', pattern=CURRENCY_PATTERN)

    if email:
        owner = database.get_user_by_email(email)
        if owner is not None and owner.id != user.id:
            validator.error('email', 'The email has already been taken.')

    fields = validator.validate()
    if currency:
        fields['currency'] = currency.upper()

    updated = database.update_user(user.id, fields)
    return success_response(updated.to_dict(), message='Settings updated successfully')


def handle_change_password(user: User, body: dict) -> dict:
    """Change the password after checking the current one.

    Args:
        user: Authenticated user
        body: current_password, password and password_confirmation

    Returns:
        Response with a confirmation message
    """
    validator = Validator(body)
    current = validator.string('current_password')
    password = validator.string('password')
    validator.string('password_confirmation')

    if current and not verify_password(current, user.password_hash):
        validator.error('current_password', 'The current password is incorrect.')

    check_password_strength(validator, 'password', password)
    if password and body.get('password_confirmation') != body.get('password'):
        validator.error('password', 'The password confirmation does not match.')

    fields = validator.validate()

    database.update_password(user.id, hash_password(fields['password']))
    return success_response(None, message='Password changed successfully')


def handle_delete_account(user: User, body: dict) -> dict:
    """Delete the user and all of their data.

    Requires the current password and an explicit confirm flag.
    """
    validator = Validator(body)
    password = validator.string('password')
    confirm = validator.boolean('confirm')

    if password and not verify_password(password, user.password_hash):
        validator.error('password', 'The password is incorrect.')

    if not confirm:
        validator.error('confirm', 'The confirm field must be accepted.')

    validator.validate()

    database.delete_user(user.id)
    return success_response(None, message='Account deleted successfully')
