"""FastAPI dependencies for authentication and vault access.

Provides reusable dependency injection for protected endpoints.
Includes trusted proxy validation to prevent X-Forwarded-For spoofing.
"""

import logging
import os
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core import SecretVault, open_vault
from core.jwt_auth import (
    InvalidTokenError,
    MissingSecretKeyError,
    TokenExpiredError,
    verify_access_token,
)

logger = logging.getLogger(__name__)

security_bearer = HTTPBearer(auto_error=False)

# SECURITY: Only trust X-Forwarded-For headers from these IP addresses
TRUSTED_PROXIES: set[str] = set(
    ip.strip() for ip in os.environ.get("TRUSTED_PROXIES", "").split(",") if ip.strip()
)

VaultOpener = Callable[[str], SecretVault]


def _get_client_ip(request: Request) -> str:
    """Extract client IP from request with trusted proxy validation.

    Only trusts X-Forwarded-For if the direct connection comes from a
    configured trusted proxy (TRUSTED_PROXIES environment variable).
    """
    direct_ip = request.client.host if request.client else "unknown"

    if TRUSTED_PROXIES and direct_ip in TRUSTED_PROXIES:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            # Take the first IP in the chain (original client)
            client_ip = forwarded.split(",")[0].strip()
            if client_ip:
                return client_ip

    return direct_ip


def get_current_client(
    request: Request,
    bearer_credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_bearer),
) -> str:
    """Dependency to verify the caller's Bearer access token.

    Returns:
        Token subject

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
        HTTPException: 500 if token signing is not configured
    """
    client_ip = _get_client_ip(request)

    if not bearer_credentials or not bearer_credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required. Use a Bearer token.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = verify_access_token(bearer_credentials.credentials)
    except TokenExpiredError:
        logger.warning("Expired access token from %s", client_ip)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token has expired.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except InvalidTokenError:
        logger.warning("Invalid access token from %s", client_ip)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid access token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except MissingSecretKeyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="JWT authentication not configured"
        )

    return payload["sub"]


def get_vault_opener() -> VaultOpener:
    """Dependency returning a function that opens a vault by name.

    File vaults are unlocked with VAULT_MASTER_PASSWORD from the service
    environment.
    """
    master_password = os.environ.get("VAULT_MASTER_PASSWORD")

    def opener(key_vault_name: str) -> SecretVault:
        return open_vault(key_vault_name, master_password=master_password)

    return opener
