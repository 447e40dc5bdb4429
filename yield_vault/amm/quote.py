"""Constant-product price estimation.

Reads pool reserves and fee fresh for every quote and applies the x*y=k
output formula with the fee taken from the input side.
"""

import logging

from yield_vault.amm.pool import PoolSnapshot, PoolStateReader
from yield_vault.balances import AssetId
from yield_vault.constants import BPS_BASE
from yield_vault.errors import ExternalStateUnreadable, ZeroOutput
from yield_vault.fixed_point import mul_div_floor

logger = logging.getLogger(__name__)


class AmmQuoteEngine:
    """Estimate swap output against a single pool."""

    def __init__(self, reader: PoolStateReader):
        self.reader = reader

    def read_snapshot(self, asset_in: AssetId) -> PoolSnapshot:
        """Read the pool and orient the reserves for selling ``asset_in``.

        :raise ExternalStateUnreadable:
            Any of the four pool state fields is missing
        """
        state = self.reader.read_pool_state()
        if not state.is_complete():
            logger.warning("Incomplete pool state from %s: %s", self.reader, state)
            raise ExternalStateUnreadable(f"Cannot read pool state: {state}")

        if state.asset_1_id == asset_in:
            return PoolSnapshot(state.asset_1_reserves, state.asset_2_reserves, state.fee_bps)
        return PoolSnapshot(state.asset_2_reserves, state.asset_1_reserves, state.fee_bps)

    def get_expected_output(self, amount_in: int, asset_in: AssetId) -> int:
        """How much we would get for selling ``amount_in`` of ``asset_in`` right now.

        :raise ZeroOutput:
            The trade would give nothing
        """
        snapshot = self.read_snapshot(asset_in)
        expected = self.get_amount_out_from_reserves(
            amount_in,
            snapshot.reserve_in,
            snapshot.reserve_out,
            fee_bps=snapshot.fee_bps,
        )
        if expected == 0:
            raise ZeroOutput(f"Selling {amount_in} {asset_in} gives zero, pool {snapshot}")
        return expected

    def quote_with_slippage(self, amount_in: int, asset_in: AssetId, slippage_bps: int) -> tuple[int, int]:
        """Expected output and the minimum we accept.

        :return:
            Tuple (expected output, min output)
        """
        expected = self.get_expected_output(amount_in, asset_in)
        return expected, self.calculate_min_output(expected, slippage_bps)

    @staticmethod
    def calculate_min_output(expected: int, slippage_bps: int) -> int:
        assert 0 <= slippage_bps <= BPS_BASE, f"Bad slippage: {slippage_bps}"
        return mul_div_floor(expected, BPS_BASE - slippage_bps, BPS_BASE)

    @staticmethod
    def get_amount_out_from_reserves(
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        *,
        fee_bps: int = 30,
    ) -> int:
        """Given an input asset amount, returns the maximum output amount of the other asset.

        :param amount_in: the amount of input tokens.
        :param reserve_in: the reserve of the input token.
        :param reserve_out: the reserve of the output token.
        :param fee_bps: trading fee in bps, taken from the input.
        :return: the maximum output amount, rounded down.
        """
        assert 0 <= fee_bps < BPS_BASE, f"Bad fee: {fee_bps}"
        net_input = mul_div_floor(amount_in, BPS_BASE - fee_bps, BPS_BASE)
        if reserve_in + net_input == 0:
            return 0
        return mul_div_floor(reserve_out, net_input, reserve_in + net_input)
