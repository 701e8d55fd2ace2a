"""
FastAPI Authentication Dependencies
This module provides FastAPI dependency functions that can be injected into route handlers
to extract and validate JWT tokens from the Authorization header.
Usage in endpoints:
    @router.get("/protected")
    def protected_route(address: str = Depends(get_current_user)):
        # address is the lowercase wallet address from the JWT
        return {"user": address}
Flow:
1. Client sends request with Authorization: Bearer <token> header
2. FastAPI calls get_current_user() dependency
3. _extract_token() extracts the token from the header
4. verify_token() validates the JWT (from jwt_utils.py)
5. Returns the address to the route handler
"""

from typing import Optional

from fastapi import Header, HTTPException, status

from tipjar.core.jwt_utils import verify_token


def _extract_token(authorization: Optional[str]) -> str:
    """
    Extract JWT token from a "Bearer <token>" Authorization header.
    Raises:
        HTTPException 401: If the header is missing or not a bearer token
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
        )

    authorization = authorization.strip()
    if not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
        )
    token = authorization[7:].strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
        )
    return token


def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> str:
    """
    returning wallet address.
    """
    payload = verify_token(_extract_token(authorization))
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    return str(payload["address"]).lower()
