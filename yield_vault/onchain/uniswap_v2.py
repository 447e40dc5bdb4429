"""Uniswap v2 pair as a pool state source.

Lets the quote engine price against a live Uniswap v2 compatible pair.
Uniswap v2 pairs do not store their fee, so it is configured per reader.

Example:

.. code-block:: python

    from web3 import Web3, HTTPProvider
    from yield_vault.amm.quote import AmmQuoteEngine
    from yield_vault.onchain.uniswap_v2 import UniswapV2PairReader

    web3 = Web3(HTTPProvider(json_rpc_url))
    reader = UniswapV2PairReader.from_address(web3, "0xB4e16d0168e52d35CaCD2c6185b44281Ec28C9Dc")
    engine = AmmQuoteEngine(reader)
    weth_out = engine.get_expected_output(1_000 * 10**6, usdc_address)

"""

import logging

from eth_typing import HexAddress
from web3 import Web3
from web3.contract import Contract
from web3.exceptions import BadFunctionCallOutput, ContractLogicError
from web3.types import BlockIdentifier

from yield_vault.amm.pool import PoolState, PoolStateReader
from yield_vault.onchain.abi import get_deployed_contract

logger = logging.getLogger(__name__)


class UniswapV2PairReader(PoolStateReader):
    """Read reserves from a Uniswap v2 pair contract.

    ``token0`` becomes the first asset. Asset ids are checksummed addresses.
    """

    def __init__(self, contract: Contract, fee_bps: int = 30, block_identifier: BlockIdentifier = "latest"):
        self.contract = contract
        self.fee_bps = fee_bps
        self.block_identifier = block_identifier

    def __repr__(self):
        return f"<UniswapV2PairReader {self.contract.address}>"

    @classmethod
    def from_address(cls, web3: Web3, address: HexAddress | str, fee_bps: int = 30) -> "UniswapV2PairReader":
        return cls(get_deployed_contract(web3, "UniswapV2Pair.json", address), fee_bps=fee_bps)

    def read_pool_state(self) -> PoolState:
        """Read token0 and reserves.

        Failed calls leave the fields empty, the quote engine refuses to price on those.
        """
        try:
            token0 = self.contract.functions.token0().call(block_identifier=self.block_identifier)
            reserve0, reserve1, _ = self.contract.functions.getReserves().call(block_identifier=self.block_identifier)
        except (BadFunctionCallOutput, ContractLogicError) as e:
            logger.warning("Could not read reserves from %s: %s", self.contract.address, e)
            return PoolState(fee_bps=self.fee_bps)

        return PoolState(
            asset_1_id=Web3.to_checksum_address(token0),
            asset_1_reserves=reserve0,
            asset_2_reserves=reserve1,
            fee_bps=self.fee_bps,
        )
