import logging

from fastapi import Depends, HTTPException, status

from tipjar.core.router_decorated import APIRouter
import tipjar.schemas.auth as schemas
from tipjar.services.auth_service import AuthService, get_auth_service

router = APIRouter()
group_tags = ["auth"]

logger = logging.getLogger(__name__)


@router.post(
    "/nonce",
    tags=group_tags,
    response_model=schemas.NonceResponse,
    status_code=status.HTTP_200_OK,
)
def request_nonce(
    body: schemas.NonceRequest,
    auth: AuthService = Depends(get_auth_service),
) -> schemas.NonceResponse:
    """Generate and store a nonce for a wallet address, replacing any earlier one."""
    nonce = auth.generate_nonce(body.address)
    return schemas.NonceResponse(nonce=nonce, message=auth.build_message(nonce))


@router.post(
    "/verify",
    tags=group_tags,
    response_model=schemas.AuthResponse,
)
def verify_wallet(
    body: schemas.VerifyRequest,
    auth: AuthService = Depends(get_auth_service),
) -> schemas.AuthResponse:
    """Verify the signed login message and return an access token.

    The nonce is single-use: it is deleted once the signature checks out, so
    the client must request a new one for every login attempt.
    """
    nonce = auth.get_nonce(body.address)
    if not nonce:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Nonce not found or expired. Request a new nonce.",
        )

    message = auth.build_message(nonce)
    if not auth.verify_signature(body.address, message, body.signature):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature")

    # a concurrent verify with the same nonce may have consumed it meanwhile
    if not auth.consume_nonce(body.address, nonce):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Nonce not found or expired. Request a new nonce.",
        )

    token = auth.generate_token(body.address)
    logger.info("Wallet %s authenticated", body.address.lower())

    return schemas.AuthResponse(token=token, address=body.address.lower())
