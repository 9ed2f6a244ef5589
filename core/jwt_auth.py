"""JWT token authentication module.

Provides token generation and validation for the provisioning API.
Callers present a short-lived access token instead of a shared secret.

SECURITY FEATURES:
- Short-lived access tokens (15 min default)
- Cryptographically secure secret key requirement
- Token type validation to prevent token confusion attacks
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from core import config
from core.errors import ProvisionerError


class TokenError(ProvisionerError):
    """Base exception for JWT-related errors."""
    pass


class TokenExpiredError(TokenError):
    """Token has expired."""
    pass


class InvalidTokenError(TokenError):
    """Token is invalid or malformed."""
    pass


class MissingSecretKeyError(TokenError):
    """JWT_SECRET_KEY not configured."""
    pass


def _get_secret_key() -> str:
    """Get JWT secret key with validation.

    Raises:
        MissingSecretKeyError: If no secret key is configured
    """
    if config.JWT_SECRET_KEY:
        return config.JWT_SECRET_KEY

    raise MissingSecretKeyError(
        "JWT_SECRET_KEY environment variable not set. "
        "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
    )


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a short-lived access token.

    Args:
        subject: Identity of the caller (e.g., a pipeline or service name)
        expires_delta: Custom expiration time (default: JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

    Returns:
        Signed JWT access token
    """
    secret = _get_secret_key()

    if expires_delta is None:
        expires_delta = timedelta(minutes=config.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

    now = datetime.now(timezone.utc)
    payload = {
        "type": "access",
        "sub": subject,
        "exp": now + expires_delta,
        "iat": now,
        "jti": secrets.token_hex(16),  # Unique token ID
    }

    return jwt.encode(payload, secret, algorithm=config.JWT_ALGORITHM)


def verify_access_token(token: str) -> dict:
    """Verify and decode an access token.

    Args:
        token: JWT access token

    Returns:
        Token payload

    Raises:
        TokenExpiredError: If token has expired
        InvalidTokenError: If token is invalid or wrong type
    """
    secret = _get_secret_key()

    try:
        payload = jwt.decode(token, secret, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError("Access token has expired") from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(f"Invalid token: {e}") from e

    # Verify token type to prevent token confusion attacks
    if payload.get("type") != "access":
        raise InvalidTokenError("Invalid token type - expected access token")
    if not payload.get("sub"):
        raise InvalidTokenError("Token missing subject")

    return payload
