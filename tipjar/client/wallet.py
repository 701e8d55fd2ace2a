"""
Wallet session: the login handshake seen from the client side.

    1. POST /auth/nonce            -> {nonce, message}
    2. sign ``message`` (EIP-191 personal_sign) with the wallet key
    3. POST /auth/verify           -> {token, address}
    4. keep the token for later calls

A failed step raises; the caller starts over from step 1.
"""

import logging
from typing import Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount

from tipjar.client.api import TipJarApiClient

logger = logging.getLogger(__name__)


def sign_message(account: LocalAccount, message: str) -> str:
    """0x-prefixed hex signature of ``message``."""
    signed = account.sign_message(encode_defunct(text=message))
    return "0x" + bytes(signed.signature).hex()


class WalletSession:
    def __init__(self, account: LocalAccount, api: TipJarApiClient):
        self.account = account
        self.api = api

    @classmethod
    def from_private_key(cls, private_key: str, api: TipJarApiClient) -> "WalletSession":
        return cls(Account.from_key(private_key), api)

    @property
    def address(self) -> str:
        return self.account.address

    @property
    def is_authenticated(self) -> bool:
        return self.api.token_store.load() is not None

    def login(self) -> str:
        """Run the nonce/sign/verify handshake and store the token."""
        nonce_res = self.api.get_nonce(self.address)
        message: Optional[str] = nonce_res.get("message")
        if not message:
            raise ValueError("nonce response carries no message to sign")

        signature = sign_message(self.account, message)
        verify_res = self.api.verify(self.address, signature)
        token = verify_res["token"]
        self.api.token_store.save(token)
        logger.info("Logged in as %s", verify_res.get("address", self.address.lower()))
        return token

    def logout(self) -> None:
        self.api.token_store.clear()
