"""Bounded-slippage swap with balance-delta verification."""

import logging
from dataclasses import dataclass

from yield_vault.amm.pool import ExternalAmmPool
from yield_vault.amm.quote import AmmQuoteEngine
from yield_vault.balances import Account, AssetId, AssetLedger
from yield_vault.constants import BPS_BASE
from yield_vault.errors import SlippageExceeded

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SwapResult:
    """What happened in one swap."""

    #: How much we sold
    amount_in: int

    #: Quote before the swap
    expected_output: int

    #: Lowest output we accepted
    min_output: int

    #: What actually arrived in the trader's balance
    realized_output: int


class SwapExecutor:
    """Quote, swap and verify.

    - The quote is computed from the pool reserves, not taken from the caller
    - The pool's own reported output is ignored; the trader's balance delta is the result
    """

    def __init__(self, pool: ExternalAmmPool, max_slippage_bps: int = BPS_BASE):
        assert 0 <= max_slippage_bps <= BPS_BASE, f"Bad slippage ceiling: {max_slippage_bps}"
        self.pool = pool
        self.quote_engine = AmmQuoteEngine(pool)
        self.max_slippage_bps = max_slippage_bps

    def execute(
        self,
        assets: AssetLedger,
        trader: Account,
        asset_in: AssetId,
        asset_out: AssetId,
        amount_in: int,
        slippage_bps: int,
    ) -> SwapResult:
        """Sell ``amount_in`` of ``asset_in`` for ``asset_out``.

        :param trader:
            Holder whose assets are swapped, usually the vault account

        :param slippage_bps:
            Tolerated shortfall against the quote

        :raise SlippageExceeded:
            ``slippage_bps`` is above the ceiling, or the realised output fell short
        """
        if slippage_bps > self.max_slippage_bps:
            raise SlippageExceeded(f"Slippage {slippage_bps} bps exceeds maximum {self.max_slippage_bps} bps")

        expected, min_output = self.quote_engine.quote_with_slippage(amount_in, asset_in, slippage_bps)

        before = assets.balance_of(trader, asset_out)
        assets.transfer(trader, self.pool.account, asset_in, amount_in)
        reported = self.pool.swap(assets, trader, asset_in, amount_in, min_output)
        after = assets.balance_of(trader, asset_out)
        realized = after - before

        if realized < min_output:
            raise SlippageExceeded(f"Swap output {realized} below minimum {min_output}, pool reported {reported}")

        logger.info(
            "Swapped %d %s -> %d %s, expected %d, min %d",
            amount_in,
            asset_in,
            realized,
            asset_out,
            expected,
            min_output,
        )
        return SwapResult(
            amount_in=amount_in,
            expected_output=expected,
            min_output=min_output,
            realized_output=realized,
        )
