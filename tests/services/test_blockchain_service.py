import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from tipjar.core.config import settings
from tipjar.core.errors import (
    BlockchainNotConfigured,
    BlockchainUnavailable,
    ContractCallFailed,
    InvalidContractAddress,
)
from tipjar.services import blockchain_service
from tipjar.services.blockchain_service import format_ether

TIP_JAR = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"


class TestFormatEther:
    @pytest.mark.parametrize(
        "wei, expected",
        [
            (0, "0.0"),
            (10**18, "1.0"),
            (5 * 10**16, "0.05"),
            (1, "0.000000000000000001"),
            (1234 * 10**18, "1234.0"),
            (15 * 10**17, "1.5"),
        ],
    )
    def test_format(self, wei, expected):
        assert format_ether(wei) == expected


class TestCallClassification:
    def test_timeout_is_unavailable(self, monkeypatch):
        monkeypatch.setattr(settings, "BLOCKCHAIN_TIMEOUT_SECONDS", 0.01)
        with pytest.raises(BlockchainUnavailable):
            asyncio.run(blockchain_service._call(asyncio.sleep(1), "slow"))

    def test_connection_error_is_unavailable(self):
        call = AsyncMock(side_effect=ConnectionError("refused"))()
        with pytest.raises(BlockchainUnavailable):
            asyncio.run(blockchain_service._call(call, "down"))

    @pytest.mark.parametrize("error", [ContractLogicError("reverted"), BadFunctionCallOutput("empty")])
    def test_contract_errors(self, error):
        call = AsyncMock(side_effect=error)()
        with pytest.raises(ContractCallFailed):
            asyncio.run(blockchain_service._call(call, "broken"))

    def test_result_passes_through(self):
        call = AsyncMock(return_value=42)()
        assert asyncio.run(blockchain_service._call(call, "ok")) == 42


class TestTipJarReads:
    def test_unconfigured_factory(self):
        with pytest.raises(BlockchainNotConfigured):
            asyncio.run(blockchain_service.get_tip_jar_address("0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"))

    @patch("tipjar.services.blockchain_service.get_tip_jar_factory_contract")
    def test_invalid_creator_address(self, mock_factory):
        mock_factory.return_value = MagicMock()
        with pytest.raises(InvalidContractAddress):
            asyncio.run(blockchain_service.get_tip_jar_address("0x123"))

    @patch("tipjar.services.blockchain_service.get_tip_jar_factory_contract")
    def test_has_tip_jar(self, mock_factory):
        factory = MagicMock()
        factory.functions.getTipJar.return_value.call = AsyncMock(return_value=TIP_JAR)
        mock_factory.return_value = factory

        assert asyncio.run(blockchain_service.has_tip_jar("0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"))

    @patch("tipjar.services.blockchain_service.get_tip_jar_contract")
    def test_info_is_cached(self, mock_contract):
        contract = MagicMock()
        fns = contract.functions
        fns.creator.return_value.call = AsyncMock(return_value="0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed")
        fns.minTip.return_value.call = AsyncMock(return_value=0)
        fns.totalTips.return_value.call = AsyncMock(return_value=2 * 10**18)
        fns.tipCounter.return_value.call = AsyncMock(return_value=2)
        mock_contract.return_value = contract

        first = asyncio.run(blockchain_service.get_tip_jar_info(TIP_JAR))
        second = asyncio.run(blockchain_service.get_tip_jar_info(TIP_JAR))

        assert first == second
        assert second.total_tips == "2.0"
        assert second.min_tip == "0.0"
        mock_contract.assert_called_once_with(TIP_JAR)

    @patch("tipjar.services.blockchain_service.get_tip_jar_contract")
    def test_info_waits_for_all_reads_before_failing(self, mock_contract):
        finished = []

        async def slow_total():
            await asyncio.sleep(0.05)
            finished.append("totalTips")
            return 10**18

        contract = MagicMock()
        fns = contract.functions
        fns.creator.return_value.call = AsyncMock(side_effect=ContractLogicError("reverted"))
        fns.minTip.return_value.call = AsyncMock(return_value=0)
        fns.totalTips.return_value.call = slow_total
        fns.tipCounter.return_value.call = AsyncMock(side_effect=ConnectionError("refused"))
        mock_contract.return_value = contract

        with pytest.raises(ContractCallFailed):
            asyncio.run(blockchain_service.get_tip_jar_info(TIP_JAR))
        assert finished == ["totalTips"]
