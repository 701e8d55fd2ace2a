"""
JWT Token Utilities

This module handles JSON Web Token (JWT) creation and verification for wallet authentication.
After a user successfully signs the login challenge with their wallet, this module creates a
JWT token that is used for subsequent authenticated API requests.

Flow:
1. User verifies wallet signature -> create_access_token() generates JWT
2. User makes API request with JWT in Authorization header -> verify_token() validates it
3. Protected endpoints use get_current_user() from dependencies.py to extract the address

The JWT contains:
- address: The authenticated wallet address (lowercase)
- iat: Issued at timestamp
- exp: Expiration timestamp (configurable via ACCESS_TOKEN_EXPIRE_SECONDS)
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from tipjar.core.config import settings


if not settings.ENCODE_KEY:
    raise RuntimeError("ENCODE_KEY is not configured")


def create_access_token(
    address: str,
    expires_in: Optional[int] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Create a JWT access token for an authenticated wallet address.

    Args:
        address: The wallet address that was verified
        expires_in: Lifetime in seconds, defaults to ACCESS_TOKEN_EXPIRE_SECONDS
        extra_claims: Optional additional claims to include in the JWT payload

    Returns:
        A JWT token string that can be used in Authorization: Bearer <token> header

    Raises:
        ValueError: If address is empty
    """
    if not address:
        raise ValueError("address is required")

    if expires_in is None:
        expires_in = settings.ACCESS_TOKEN_EXPIRE_SECONDS

    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "address": address.lower(),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    if extra_claims:
        payload.update(extra_claims)

    return jwt.encode(payload, settings.ENCODE_KEY, algorithm=settings.ENCODE_ALGORITHM)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify and decode a JWT token.

    Checks token signature, expiration, and required payload fields.

    Returns:
        Decoded payload containing ``address``, or None when the token is
        missing, expired, tampered with or lacks the address claim
    """
    if not token:
        return None

    try:
        payload = jwt.decode(token, settings.ENCODE_KEY, algorithms=[settings.ENCODE_ALGORITHM])
    except jwt.InvalidTokenError:
        # ExpiredSignatureError is a subclass
        return None

    if not payload.get("address"):
        return None

    return payload
