"""Constant-product pool interface and an in-memory pool.

The vaults never trust a pool's own account of a swap. They read the raw
pool state to quote, and measure what actually landed in their balance
afterwards, see :py:mod:`yield_vault.amm.swap`.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from yield_vault.balances import Account, AssetId, AssetLedger
from yield_vault.constants import BPS_BASE
from yield_vault.errors import SlippageExceeded, ZeroAmount
from yield_vault.fixed_point import mul_div_floor

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class PoolState:
    """Raw pool state as stored by the pool.

    Any field may be missing if the pool does not expose it
    or the read failed.
    """

    #: Which asset the first reserve is denominated in
    asset_1_id: Optional[AssetId] = None

    #: Reserve of the first asset
    asset_1_reserves: Optional[int] = None

    #: Reserve of the second asset
    asset_2_reserves: Optional[int] = None

    #: Total swap fee in basis points
    fee_bps: Optional[int] = None

    def is_complete(self) -> bool:
        return None not in (self.asset_1_id, self.asset_1_reserves, self.asset_2_reserves, self.fee_bps)


@dataclass(slots=True, frozen=True)
class PoolSnapshot:
    """Pool reserves oriented for one trade direction.

    Fetched fresh for every quote, never stored.
    """

    #: Reserve of the asset we sell
    reserve_in: int

    #: Reserve of the asset we buy
    reserve_out: int

    #: Swap fee in basis points
    fee_bps: int


class PoolStateReader(ABC):
    """Anything we can read constant-product pool state from."""

    @abstractmethod
    def read_pool_state(self) -> PoolState:
        """Read the current reserves and fee."""


class ExternalAmmPool(PoolStateReader):
    """A pool we can also trade against."""

    #: Account the input asset must be transferred to before :py:meth:`swap`
    account: Account

    @abstractmethod
    def swap(
        self,
        assets: AssetLedger,
        trader: Account,
        asset_in: AssetId,
        amount_in: int,
        min_amount_out: int,
    ) -> int:
        """Fixed-input swap.

        The trader has already sent ``amount_in`` of ``asset_in`` to :py:attr:`account`.

        :return:
            Output amount as reported by the pool
        """


class ConstantProductPool(ExternalAmmPool):
    """In-memory two-asset x*y=k pool.

    Reserves are kept in the pool state and backed by the pool account
    balance in the asset ledger.
    """

    def __init__(
        self,
        account: Account,
        asset_1_id: AssetId,
        asset_2_id: AssetId,
        fee_bps: int = 30,
        delivery_shortfall_bps: int = 0,
    ):
        """
        :param account:
            Pool's holder identity in the asset ledger

        :param fee_bps:
            Swap fee, deducted from the input

        :param delivery_shortfall_bps:
            Deliver this much less than the pool reports.
            Simulates a misbehaving pool.
        """
        assert 0 <= fee_bps < BPS_BASE, f"Bad fee: {fee_bps}"
        assert asset_1_id != asset_2_id
        self.account = account
        self.asset_1_id = asset_1_id
        self.asset_2_id = asset_2_id
        self.asset_1_reserves = 0
        self.asset_2_reserves = 0
        self.fee_bps = fee_bps
        self.delivery_shortfall_bps = delivery_shortfall_bps

    def __repr__(self):
        return f"<ConstantProductPool {self.asset_1_id}:{self.asset_1_reserves} {self.asset_2_id}:{self.asset_2_reserves} fee:{self.fee_bps}>"

    def read_pool_state(self) -> PoolState:
        return PoolState(
            asset_1_id=self.asset_1_id,
            asset_1_reserves=self.asset_1_reserves,
            asset_2_reserves=self.asset_2_reserves,
            fee_bps=self.fee_bps,
        )

    def set_fee(self, fee_bps: int):
        assert 0 <= fee_bps < BPS_BASE, f"Bad fee: {fee_bps}"
        self.fee_bps = fee_bps

    def add_liquidity(self, assets: AssetLedger, amount_1: int, amount_2: int):
        """Seed the pool with new reserves."""
        assets.mint(self.account, self.asset_1_id, amount_1)
        assets.mint(self.account, self.asset_2_id, amount_2)
        self.asset_1_reserves += amount_1
        self.asset_2_reserves += amount_2

    def swap(
        self,
        assets: AssetLedger,
        trader: Account,
        asset_in: AssetId,
        amount_in: int,
        min_amount_out: int,
    ) -> int:
        if amount_in <= 0:
            raise ZeroAmount("Nothing to swap")

        if asset_in == self.asset_1_id:
            reserve_in, reserve_out, asset_out = self.asset_1_reserves, self.asset_2_reserves, self.asset_2_id
        else:
            assert asset_in == self.asset_2_id, f"Unknown asset {asset_in} for {self}"
            reserve_in, reserve_out, asset_out = self.asset_2_reserves, self.asset_1_reserves, self.asset_1_id

        net_input = mul_div_floor(amount_in, BPS_BASE - self.fee_bps, BPS_BASE)
        amount_out = mul_div_floor(reserve_out, net_input, reserve_in + net_input)

        if amount_out < min_amount_out:
            raise SlippageExceeded(f"Pool output {amount_out} below minimum {min_amount_out}")

        if asset_in == self.asset_1_id:
            self.asset_1_reserves = reserve_in + amount_in
            self.asset_2_reserves = reserve_out - amount_out
        else:
            self.asset_2_reserves = reserve_in + amount_in
            self.asset_1_reserves = reserve_out - amount_out

        delivered = amount_out - mul_div_floor(amount_out, self.delivery_shortfall_bps, BPS_BASE)
        if delivered > 0:
            assets.transfer(self.account, trader, asset_out, delivered)

        logger.debug("Swapped %d %s for %d %s, delivered %d", amount_in, asset_in, amount_out, asset_out, delivered)
        return amount_out
