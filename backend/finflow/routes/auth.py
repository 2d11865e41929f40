"""Authentication routes."""

from finflow.services import database
from finflow.utils.auth import authenticate, create_token, get_current_user, hash_password
from finflow.utils.http import error_response, success_response
from finflow.utils.validation import CURRENCY_PATTERN, EMAIL_PATTERN, Validator

MIN_PASSWORD_LENGTH = 8
# bcrypt only accepts up to 72 bytes of input
MAX_PASSWORD_BYTES = 72


def check_password_strength(validator: Validator, field: str, password) -> None:
    """Record an error when a new password is too short or too long for bcrypt."""
    if not password:
        return
    if len(password) < MIN_PASSWORD_LENGTH:
        validator.error(field, f'The {field} must be at least {MIN_PASSWORD_LENGTH} characters.')
    elif len(password.encode('utf-8')) > MAX_PASSWORD_BYTES:
        validator.error(field, f'The {field} may not be greater than {MAX_PASSWORD_BYTES} bytes.')


def handle_register(body: dict) -> dict:
    """Handle registration request.

    Creates the user with the default category set and logs them in.

    Args:
        body: Request body with name, email, password and optional currency

    Returns:
        Response dict with token and user, or validation errors
    """
    validator = Validator(body)
    validator.string('name', max_length=255)
    email = validator.string('email', max_length=255, pattern=EMAIL_PATTERN)
    password = validator.string('password')
    validator.string('currency', required=False, pattern=CURRENCY_PATTERN)

    check_password_strength(validator, 'password', password)

    if email and database.get_user_by_email(email):
        validator.error('email', 'The email has already been taken.')

    fields = validator.validate()

    user = database.create_user(
        fields['name'],
        fields['email'],
        hash_password(fields['password']),
        (fields.get('currency') or 'IDR').upper()
    )
    token, expires_at = create_token(user.id)

    return success_response({
        'token': token,
        'expires_at': expires_at.isoformat(),
        'user': user.to_dict()
    }, status_code=201, message='Registration successful')


def handle_login(body: dict) -> dict:
    """Handle login request.

    Args:
        body: Request body with 'email' and 'password' fields

    Returns:
        Response dict with token or error
    """
    validator = Validator(body)
    validator.string('email')
    validator.string('password')
    fields = validator.validate()

    result = authenticate(fields['email'], fields['password'])

    if result is None:
        return error_response(401, 'UNAUTHORIZED', 'Invalid email or password')

    token, user, expires_at = result

    return success_response({
        'token': token,
        'expires_at': expires_at.isoformat(),
        'user': user.to_dict()
    })


def handle_verify(headers: dict) -> dict:
    """Handle token verification request.

    Args:
        headers: Request headers

    Returns:
        Response dict with validity status
    """
    user = get_current_user(headers)

    if user is None:
        return error_response(401, 'UNAUTHORIZED', 'Invalid or expired token')

    return success_response({
        'valid': True,
        'user': user.to_dict()
    })
