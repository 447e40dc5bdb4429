"""Pool and lending state readers backed by EVM contracts."""

import os
from unittest.mock import MagicMock

import pytest
from web3 import HTTPProvider, Web3
from web3.exceptions import ContractLogicError

from yield_vault.amm.quote import AmmQuoteEngine
from yield_vault.errors import ExternalStateUnreadable
from yield_vault.lending.market import fetch_exchange_rate
from yield_vault.onchain.abi import get_abi_by_filename
from yield_vault.onchain.erc_4626 import ERC4626RateReader
from yield_vault.onchain.uniswap_v2 import UniswapV2PairReader

JSON_RPC_ETHEREUM = os.environ.get("JSON_RPC_ETHEREUM")

#: Uniswap v2 USDC/WETH on Ethereum mainnet
USDC_WETH_PAIR = "0xB4e16d0168e52d35CaCD2c6185b44281Ec28C9Dc"

USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


def make_pair_contract(reserve0: int, reserve1: int) -> MagicMock:
    contract = MagicMock()
    contract.address = USDC_WETH_PAIR
    contract.functions.token0.return_value.call.return_value = USDC.lower()
    contract.functions.getReserves.return_value.call.return_value = [reserve0, reserve1, 1_700_000_000]
    return contract


def test_bundled_abi():
    names = {entry["name"] for entry in get_abi_by_filename("IERC4626.json")["abi"]}
    assert {"asset", "totalAssets", "totalSupply"} <= names


def test_pair_reader_orients_reserves():
    reader = UniswapV2PairReader(make_pair_contract(1_000_000_000, 2_000_000_000))
    state = reader.read_pool_state()
    assert state.asset_1_id == USDC
    assert state.fee_bps == 30

    engine = AmmQuoteEngine(reader)
    assert engine.read_snapshot(USDC).reserve_in == 1_000_000_000
    assert engine.read_snapshot("0xother").reserve_in == 2_000_000_000


def test_pair_reader_failed_call():
    contract = make_pair_contract(1, 1)
    contract.functions.getReserves.return_value.call.side_effect = ContractLogicError("execution reverted")
    reader = UniswapV2PairReader(contract)

    assert not reader.read_pool_state().is_complete()
    with pytest.raises(ExternalStateUnreadable):
        AmmQuoteEngine(reader).get_expected_output(1_000, USDC)


def test_erc_4626_rate():
    contract = MagicMock()
    contract.functions.totalAssets.return_value.call.return_value = 1_050_000_000
    contract.functions.totalSupply.return_value.call.return_value = 1_000_000_000
    assert fetch_exchange_rate(ERC4626RateReader(contract)) == 1_050_000


def test_erc_4626_failed_call_has_no_rate():
    contract = MagicMock()
    contract.functions.totalAssets.return_value.call.side_effect = ContractLogicError("execution reverted")
    assert fetch_exchange_rate(ERC4626RateReader(contract)) is None


@pytest.mark.skipif(JSON_RPC_ETHEREUM is None, reason="JSON_RPC_ETHEREUM needed to run this test")
def test_live_uniswap_v2_quote():
    web3 = Web3(HTTPProvider(JSON_RPC_ETHEREUM))
    reader = UniswapV2PairReader.from_address(web3, USDC_WETH_PAIR.lower())
    engine = AmmQuoteEngine(reader)

    # 1000 USDC buys some WETH
    expected, min_output = engine.quote_with_slippage(1_000 * 10**6, USDC, 50)
    assert expected > 0
    assert min_output < expected
