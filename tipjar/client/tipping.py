"""
Tips go straight from the wallet to the creator's tip-jar contract; the
backend never sees them. ``TipSender`` builds the payable ``tip()`` call,
signs it locally and waits for the receipt.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from eth_account.signers.local import LocalAccount
from web3 import Web3

from tipjar.core.blockchain import TIPJAR_ABI
from tipjar.core.config import settings

logger = logging.getLogger(__name__)


class TipFailed(Exception):
    """The tip transaction was mined but reverted."""


class TipSender:
    def __init__(self, web3: Web3, account: LocalAccount, chain_id: Optional[int] = settings.CHAIN_ID):
        self.web3 = web3
        self.account = account
        self.chain_id = chain_id

    def build_tip_transaction(self, tip_jar_address: str, amount_ether: str | Decimal) -> Dict[str, Any]:
        value = Web3.to_wei(Decimal(str(amount_ether)), "ether")
        if value <= 0:
            raise ValueError("tip amount must be positive")
        contract = self.web3.eth.contract(
            address=Web3.to_checksum_address(tip_jar_address),
            abi=TIPJAR_ABI,
        )
        tx_params: Dict[str, Any] = {
            "from": self.account.address,
            "value": value,
            "nonce": self.web3.eth.get_transaction_count(self.account.address),
        }
        if self.chain_id is not None:
            tx_params["chainId"] = self.chain_id
        return contract.functions.tip().build_transaction(tx_params)

    def send_tip(self, tip_jar_address: str, amount_ether: str | Decimal, timeout: float = 120) -> str:
        """Send ``amount_ether`` to the tip jar, returns the transaction hash."""
        tx = self.build_tip_transaction(tip_jar_address, amount_ether)
        signed = self.account.sign_transaction(tx)
        tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
        logger.info("Tip of %s ETH sent to %s: %s", amount_ether, tip_jar_address, tx_hash.hex())

        receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        if receipt["status"] != 1:
            raise TipFailed(f"tip transaction {tx_hash.hex()} reverted")
        return tx_hash.hex()
