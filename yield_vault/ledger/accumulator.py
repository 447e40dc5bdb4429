"""Yield-per-unit accumulator ledger.

The classic staking rewards pattern. One global accumulator grows with
every distribution; each position remembers the accumulator value at its
last settlement, and the difference times its stake is what it earned.

.. code-block:: text

    owed += stake * (yield_per_unit - snapshot) / SCALE

Distributions are O(1) regardless of the number of depositors.
"""

import logging

from yield_vault.balances import Account
from yield_vault.constants import SCALE
from yield_vault.errors import InsufficientFunds, InsufficientStake, ZeroAmount
from yield_vault.fixed_point import mul_div_floor
from yield_vault.positions import PositionStore, UserPosition

logger = logging.getLogger(__name__)


class AccumulatorLedger:
    """Stake and owed yield for an accumulator vault.

    Yield is owed in the payout asset; the stake is in the deposit asset.
    """

    def __init__(self, vault_id: str):
        self.positions = PositionStore(vault_id)

        #: Sum of all position stakes
        self.total_stake = 0

        #: Payout per unit of stake since inception, times :py:data:`SCALE`
        self.yield_per_unit = 0

    def open(self, account: Account) -> UserPosition:
        """Opt in. New positions earn nothing from past distributions."""
        return self.positions.open(account, snapshot=self.yield_per_unit)

    def settle(self, account: Account) -> UserPosition:
        """Move everything earned since the last snapshot into the owed balance."""
        position = self.positions.get(account)
        if position.stake > 0 and self.yield_per_unit > position.snapshot:
            earned = mul_div_floor(position.stake, self.yield_per_unit - position.snapshot, SCALE)
            position.claimable += earned
            logger.debug("Settled %s: earned %d, owed %d", account, earned, position.claimable)
        position.snapshot = self.yield_per_unit
        return position

    def pending(self, account: Account) -> int:
        """Owed plus not yet settled yield, without touching state."""
        position = self.positions.find(account)
        if position is None:
            return 0
        owed = position.claimable
        if position.stake > 0 and self.yield_per_unit > position.snapshot:
            owed += mul_div_floor(position.stake, self.yield_per_unit - position.snapshot, SCALE)
        return owed

    def distribute(self, amount: int) -> int:
        """Spread ``amount`` across all current stake.

        Rounding dust stays in the vault.

        :return:
            Accumulator increase

        :raise InsufficientStake:
            Nobody to distribute to
        """
        if self.total_stake == 0:
            raise InsufficientStake("No depositors to distribute to")
        increase = mul_div_floor(amount, SCALE, self.total_stake)
        self.yield_per_unit += increase
        logger.info("Distributed %d over stake %d, yield per unit now %d", amount, self.total_stake, self.yield_per_unit)
        return increase

    def credit(self, account: Account, amount: int) -> UserPosition:
        position = self.settle(account)
        position.stake += amount
        self.total_stake += amount
        return position

    def debit(self, account: Account, amount: int) -> UserPosition:
        position = self.settle(account)
        if amount <= 0:
            raise ZeroAmount("Nothing to withdraw")
        if amount > position.stake:
            raise InsufficientFunds(f"{account} has {position.stake} staked, tried to withdraw {amount}")
        position.stake -= amount
        self.total_stake -= amount
        return position

    def take_owed(self, account: Account) -> int:
        """Settle and zero the owed balance.

        :return:
            Amount the account can now be paid
        """
        position = self.settle(account)
        owed = position.claimable
        position.claimable = 0
        return owed

    def close(self, account: Account) -> tuple[int, int]:
        """Settle and drop the position.

        :return:
            Tuple (stake, owed yield) to pay out
        """
        position = self.settle(account)
        self.total_stake -= position.stake
        self.positions.close(account)
        return position.stake, position.claimable
