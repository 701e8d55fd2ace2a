"""
Ethereum Wallet Authentication Utilities

This module handles the EVM-specific cryptographic operations for wallet authentication.
It implements the signature check for EIP-191 ``personal_sign`` messages.

Authentication Flow:
1. Backend generates a random nonce -> generate_nonce()
2. Frontend signs "Sign this message to authenticate: <nonce>" with the wallet
3. Frontend sends: address, signature
4. Backend recovers the signer -> verify_signature()
   - Rebuilds the EIP-191 signable message
   - Recovers the signing address from the 65-byte signature
   - Compares it with the claimed address, case-insensitively

The recovery uses eth_account (the signing library underneath web3.py).
"""

import logging
import secrets

from eth_account import Account
from eth_account.messages import encode_defunct

logger = logging.getLogger(__name__)

NONCE_NUM_BYTES = 32  # 32 bytes = 64 hex characters
AUTH_MESSAGE_PREFIX = "Sign this message to authenticate: "


def generate_nonce(num_bytes: int = NONCE_NUM_BYTES) -> str:
    """
    Generate a cryptographically secure random nonce for wallet authentication.

    Args:
        num_bytes: Number of random bytes to generate (default: 32 = 64 hex chars)

    Returns:
        Hex-encoded random string (e.g., "a1b2c3d4...")
    """
    if num_bytes <= 0:
        num_bytes = NONCE_NUM_BYTES
    return secrets.token_hex(num_bytes)


def build_auth_message(nonce: str) -> str:
    """The exact text the wallet is asked to sign."""
    return f"{AUTH_MESSAGE_PREFIX}{nonce}"


def recover_signer(message: str, signature: str) -> str:
    """Recover the checksummed address that produced ``signature`` over ``message``."""
    signable = encode_defunct(text=message)
    return Account.recover_message(signable, signature=signature)


def verify_signature(address: str, message: str, signature: str) -> bool:
    """
    Check that ``signature`` over ``message`` was produced by ``address``.

    Any failure while decoding or recovering (bad hex, wrong length, invalid
    curve point) is reported as a failed verification rather than raised.
    """
    if not address or not signature:
        return False
    try:
        recovered = recover_signer(message, signature)
    except Exception as e:
        logger.info("Signature verification error: %s", e)
        return False
    return recovered.lower() == address.strip().lower()
