"""
Read-only views over the tip-jar contracts.

The registry maps a creator to their tip jar (zero address: none). Jar
metadata is read with independent concurrent calls. Amounts are converted
from wei to decimal ether strings ("1.0", "0.05") at this boundary.

Failures are classified (see tipjar.core.errors) and logged here; the
provider's own error text never reaches the API response.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Awaitable, List, Optional

from web3 import Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from tipjar.core.blockchain import (
    ZERO_ADDRESS,
    get_tip_jar_contract,
    get_tip_jar_factory_contract,
    to_checksum,
)
from tipjar.core.cache import cache
from tipjar.core.config import settings
from tipjar.core.errors import BlockchainError, BlockchainUnavailable, ContractCallFailed
from tipjar.schemas.tipjar import TipJarInfo, TipRecord

logger = logging.getLogger(__name__)


def format_ether(wei: int) -> str:
    value = Decimal(Web3.from_wei(int(wei), "ether"))
    text = format(value.normalize(), "f")
    if "." not in text:
        text += ".0"
    return text


async def _call(call: Awaitable[Any], what: str) -> Any:
    try:
        return await asyncio.wait_for(call, timeout=settings.BLOCKCHAIN_TIMEOUT_SECONDS)
    except BlockchainError:
        raise
    except asyncio.TimeoutError:
        logger.warning("Timed out reading %s", what)
        raise BlockchainUnavailable()
    except (ConnectionError, OSError) as e:
        logger.warning("Node unreachable reading %s: %s", what, e)
        raise BlockchainUnavailable()
    except (ContractLogicError, BadFunctionCallOutput) as e:
        logger.warning("Contract call %s failed: %s", what, e)
        raise ContractCallFailed()
    except Exception as e:
        logger.warning("Unexpected error reading %s: %r", what, e)
        raise ContractCallFailed()


@cache("in-1m", key_prefix="tipjar_address")
async def get_tip_jar_address(creator_address: str) -> Optional[str]:
    """Tip jar of a creator, or None when the registry has none."""
    factory = get_tip_jar_factory_contract()
    tip_jar = await _call(
        factory.functions.getTipJar(to_checksum(creator_address)).call(),
        "getTipJar",
    )
    if not tip_jar or int(tip_jar, 16) == int(ZERO_ADDRESS, 16):
        return None
    return tip_jar


@cache("in-1m", key_prefix="tipjar_info", value_type=TipJarInfo)
async def get_tip_jar_info(tip_jar_address: str) -> TipJarInfo:
    tip_jar = get_tip_jar_contract(tip_jar_address)
    fns = tip_jar.functions
    results = await asyncio.gather(
        _call(fns.creator().call(), "creator"),
        _call(fns.minTip().call(), "minTip"),
        _call(fns.totalTips().call(), "totalTips"),
        _call(fns.tipCounter().call(), "tipCounter"),
        return_exceptions=True,
    )
    # every read has settled here; report the first failure
    for result in results:
        if isinstance(result, BaseException):
            raise result
    creator, min_tip, total_tips, tip_counter = results
    return TipJarInfo(
        address=tip_jar_address,
        creator=creator,
        min_tip=format_ether(min_tip),
        total_tips=format_ether(total_tips),
        tip_counter=int(tip_counter),
    )


@cache("in-1m", key_prefix="tipjar_recent", value_type=List[TipRecord])
async def get_recent_tips(tip_jar_address: str) -> List[TipRecord]:
    tip_jar = get_tip_jar_contract(tip_jar_address)
    recent = await _call(tip_jar.functions.getAllRecentTips().call(), "getAllRecentTips")
    # each entry decodes as (tipper, amount)
    return [TipRecord(tipper=tip[0], amount=format_ether(tip[1])) for tip in recent]


@cache("in-1m", key_prefix="tipjar_all")
async def get_all_tip_jars() -> List[str]:
    factory = get_tip_jar_factory_contract()
    return list(await _call(factory.functions.getAllTipJars().call(), "getAllTipJars"))


async def has_tip_jar(creator_address: str) -> bool:
    return await get_tip_jar_address(creator_address) is not None
