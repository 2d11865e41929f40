"""Authentication utilities."""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import bcrypt
import jwt
from aws_lambda_powertools import Logger

from finflow.models.entities import User
from finflow.services import database

logger = Logger(service="finflow-auth")

DEFAULT_TOKEN_EXPIRY_HOURS = 24


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash string
    """
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a bcrypt hash.

    Args:
        password: Plain text password
        password_hash: Bcrypt hash to check against

    Returns:
        True if password matches
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash
        return False


def get_jwt_secret() -> str:
    """Get JWT secret from environment."""
    secret = os.environ.get('JWT_SECRET', '')
    if not secret:
        # Fallback for local development
        secret = 'dev-secret-do-not-use-in-production'
    return secret


def get_token_expiry_hours() -> int:
    """Token lifetime in hours from TOKEN_EXPIRY_HOURS."""
    try:
        return int(os.environ.get('TOKEN_EXPIRY_HOURS', DEFAULT_TOKEN_EXPIRY_HOURS))
    except ValueError:
        return DEFAULT_TOKEN_EXPIRY_HOURS


def create_token(user_id: int) -> Tuple[str, datetime]:
    """Create a JWT token for a user.

    Args:
        user_id: Authenticated user ID

    Returns:
        Tuple of (token string, expiration datetime)
    """
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(hours=get_token_expiry_hours())
    payload = {
        'sub': str(user_id),
        'exp': expires_at,
        'iat': now
    }
    token = jwt.encode(payload, get_jwt_secret(), algorithm='HS256')
    return token, expires_at


def verify_token(token: str) -> Optional[dict]:
    """Verify and decode a JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded payload dict, or None if invalid/expired
    """
    try:
        return jwt.decode(token, get_jwt_secret(), algorithms=['HS256'])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def authenticate(email: str, password: str) -> Optional[Tuple[str, User, datetime]]:
    """Authenticate with email and password and return a token.

    Args:
        email: Login email
        password: Plain text password

    Returns:
        Tuple of (token, user, expires_at), or None if invalid
    """
    user = database.get_user_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Login rejected", extra={"email": email})
        return None

    token, expires_at = create_token(user.id)
    return token, user, expires_at


def require_auth(headers: dict) -> Optional[dict]:
    """Check authorization header and return token payload.

    Args:
        headers: Request headers dict

    Returns:
        Token payload dict, or None if not authorized
    """
    headers = headers or {}
    auth_header = headers.get('authorization', headers.get('Authorization', ''))
    if not auth_header.startswith('Bearer '):
        return None

    token = auth_header[7:]  # Remove 'Bearer ' prefix
    return verify_token(token)


def get_current_user(headers: dict) -> Optional[User]:
    """Resolve the user a request is authenticated as.

    Args:
        headers: Request headers dict

    Returns:
        User, or None when the token is missing, invalid or for a deleted user
    """
    payload = require_auth(headers)
    if payload is None:
        return None

    try:
        user_id = int(payload.get('sub'))
    except (TypeError, ValueError):
        return None

    return database.get_user(user_id)
