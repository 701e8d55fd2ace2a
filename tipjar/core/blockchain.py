"""
Web3 provider and contract handles for the tip-jar registry and tip jars.

Only the read-only functions the backend calls are described in the ABIs
below, plus ``tip()`` which the client uses to send a payment.
"""

import logging
from typing import Optional

from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from tipjar.core.config import settings
from tipjar.core.errors import BlockchainNotConfigured, InvalidContractAddress

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def _view(name: str, inputs: list, outputs: list) -> dict:
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view",
        "inputs": inputs,
        "outputs": outputs,
    }


def _arg(name: str, type_: str) -> dict:
    return {"name": name, "type": type_}


TIPJAR_FACTORY_ABI = [
    _view("creatorToTipJar", [_arg("", "address")], [_arg("", "address")]),
    _view("getTipJar", [_arg("creator", "address")], [_arg("", "address")]),
    _view("getAllTipJars", [], [_arg("", "address[]")]),
    _view("getTipJarCount", [], [_arg("", "uint256")]),
]

TIP_RECORD_TUPLE = {
    "name": "",
    "type": "tuple[]",
    "components": [_arg("tipper", "address"), _arg("amount", "uint256")],
}

TIPJAR_ABI = [
    _view("creator", [], [_arg("", "address")]),
    _view("minTip", [], [_arg("", "uint256")]),
    _view("totalTips", [], [_arg("", "uint256")]),
    _view("tipCounter", [], [_arg("", "uint256")]),
    _view("getTotalTips", [], [_arg("", "uint256")]),
    _view("getRecentTip", [_arg("index", "uint256")], [_arg("tipper", "address"), _arg("amount", "uint256")]),
    _view("getAllRecentTips", [], [TIP_RECORD_TUPLE]),
    {
        "type": "function",
        "name": "tip",
        "stateMutability": "payable",
        "inputs": [],
        "outputs": [],
    },
]

_web3: Optional[AsyncWeb3] = None


def get_web3() -> AsyncWeb3:
    global _web3
    if _web3 is None:
        if not settings.RPC_URL:
            raise BlockchainNotConfigured("RPC_URL not configured")
        _web3 = AsyncWeb3(AsyncHTTPProvider(settings.RPC_URL))
    return _web3


def to_checksum(address: str) -> str:
    try:
        return Web3.to_checksum_address(address)
    except (ValueError, TypeError) as e:
        raise InvalidContractAddress(f"invalid address {address!r}: {e}")


def get_tip_jar_factory_contract():
    if not settings.TIPJAR_FACTORY_ADDRESS:
        raise BlockchainNotConfigured("TIPJAR_FACTORY_ADDRESS not configured")
    return get_web3().eth.contract(
        address=to_checksum(settings.TIPJAR_FACTORY_ADDRESS),
        abi=TIPJAR_FACTORY_ABI,
    )


def get_tip_jar_contract(address: str):
    return get_web3().eth.contract(address=to_checksum(address), abi=TIPJAR_ABI)
