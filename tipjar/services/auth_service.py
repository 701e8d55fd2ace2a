"""
Wallet login service: single-use nonces, signature checks and session tokens.

Nonces live in an injected expiring store (Redis or the in-memory fallback of
``HybridCacheManager``), keyed by lowercase address. A nonce expires after
NONCE_EXPIRY_SECONDS and is deleted as soon as a login succeeds.
"""

from typing import Any, Dict, Optional

from tipjar.core import jwt_utils, wallet_auth
from tipjar.core.cache import HybridCacheManager, cache_manager
from tipjar.core.config import settings

NONCE_KEY_PREFIX = "nonce:"


class AuthService:
    def __init__(
        self,
        store: Optional[HybridCacheManager] = None,
        nonce_ttl: int = settings.NONCE_EXPIRY_SECONDS,
    ):
        self.store = store if store is not None else cache_manager
        self.nonce_ttl = nonce_ttl

    @staticmethod
    def _key(address: str) -> str:
        return f"{NONCE_KEY_PREFIX}{address.strip().lower()}"

    def generate_nonce(self, address: str) -> str:
        """Mint a nonce for the address, replacing any earlier one."""
        nonce = wallet_auth.generate_nonce()
        self.store.set(self._key(address), nonce, cache_type=None, ttl_seconds=self.nonce_ttl)
        return nonce

    def get_nonce(self, address: str) -> Optional[str]:
        nonce = self.store.get(self._key(address))
        if not isinstance(nonce, str):
            return None
        return nonce

    def delete_nonce(self, address: str) -> None:
        self.store.delete(self._key(address))

    def consume_nonce(self, address: str, nonce: str) -> bool:
        """Atomically remove ``nonce`` if it is still the current one; True for exactly one caller."""
        return self.store.consume(self._key(address), nonce)

    @staticmethod
    def build_message(nonce: str) -> str:
        return wallet_auth.build_auth_message(nonce)

    @staticmethod
    def verify_signature(address: str, message: str, signature: str) -> bool:
        return wallet_auth.verify_signature(address, message, signature)

    @staticmethod
    def generate_token(address: str, expires_in: Optional[int] = None) -> str:
        return jwt_utils.create_access_token(address, expires_in=expires_in)

    @staticmethod
    def verify_token(token: str) -> Optional[Dict[str, Any]]:
        return jwt_utils.verify_token(token)


auth_service = AuthService()


def get_auth_service() -> AuthService:
    """FastAPI dependency, overridable in tests."""
    return auth_service
