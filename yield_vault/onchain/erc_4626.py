"""ERC-4626 vault as a lending exchange rate source.

``totalAssets() / totalSupply()`` plays the role of
``total_deposits / circulating_receipts``.

.. note ::

    The rate is a raw unit ratio. Vaults whose share token has different
    decimals from the underlying report a rate scaled by the decimal difference.
"""

import logging

from eth_typing import HexAddress
from web3 import Web3
from web3.contract import Contract
from web3.exceptions import BadFunctionCallOutput, ContractLogicError
from web3.types import BlockIdentifier

from yield_vault.lending.market import LendingState, LendingStateReader
from yield_vault.onchain.abi import get_deployed_contract

logger = logging.getLogger(__name__)


class ERC4626RateReader(LendingStateReader):
    """Read total assets and share supply of an ERC-4626 vault."""

    def __init__(self, contract: Contract, block_identifier: BlockIdentifier = "latest"):
        self.contract = contract
        self.block_identifier = block_identifier

    def __repr__(self):
        return f"<ERC4626RateReader {self.contract.address}>"

    @classmethod
    def from_address(cls, web3: Web3, address: HexAddress | str) -> "ERC4626RateReader":
        return cls(get_deployed_contract(web3, "IERC4626.json", address))

    def read_lending_state(self) -> LendingState:
        try:
            total_assets = self.contract.functions.totalAssets().call(block_identifier=self.block_identifier)
            total_supply = self.contract.functions.totalSupply().call(block_identifier=self.block_identifier)
        except (BadFunctionCallOutput, ContractLogicError) as e:
            logger.warning("Could not read ERC-4626 state from %s: %s", self.contract.address, e)
            return LendingState()

        return LendingState(total_deposits=total_assets, circulating_receipts=total_supply)
