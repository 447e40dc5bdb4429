"""Accumulator vault.

Users stake a deposit asset. Yield arrives in the vault as a separate yield
asset, is sold for a payout asset and distributed pro rata through the
:py:class:`~yield_vault.ledger.accumulator.AccumulatorLedger`.
"""

import logging
from dataclasses import dataclass

from yield_vault.amm.pool import ExternalAmmPool
from yield_vault.balances import Account, AssetLedger
from yield_vault.config import AccumulatorVaultConfig
from yield_vault.errors import ZeroAmount
from yield_vault.farm import DynamicFarmBonusPool
from yield_vault.fees import split_creator_fee
from yield_vault.ledger.accumulator import AccumulatorLedger
from yield_vault.vault.base import Distribution, SwapVaultBase

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class AccumulatorVaultStats:
    total_deposits: int
    yield_per_unit: int
    creator_unclaimed: int
    pending_balance: int
    payout_balance: int
    total_yield_generated: int


class AccumulatorVault(SwapVaultBase):
    """Stake one asset, earn another.

    The farm rate scales with the farm balance, see
    :py:class:`~yield_vault.farm.DynamicFarmBonusPool`.
    """

    def __init__(self, config: AccumulatorVaultConfig, assets: AssetLedger, pool: ExternalAmmPool):
        super().__init__(
            config,
            assets,
            pool,
            DynamicFarmBonusPool(config.emission_ratio),
            config.payout_asset,
        )
        self.deposit_asset = config.deposit_asset
        self.ledger = AccumulatorLedger(config.vault_id)

    @property
    def total_stake(self) -> int:
        return self.ledger.total_stake

    def get_participants(self) -> list:
        return super().get_participants() + [self.ledger, self.ledger.positions]

    def _allocate(self, total_output: int) -> tuple[int, int]:
        creator_cut, depositor_cut = split_creator_fee(total_output, self.creator_fee_percent)
        if depositor_cut > 0:
            self.ledger.distribute(depositor_cut)
        return creator_cut, depositor_cut

    def opt_in(self, account: Account):
        with self._action():
            self.ledger.open(account)

    def close_out(self, account: Account) -> tuple[int, int]:
        """Withdraw the whole stake and claim all yield.

        :return:
            Tuple (deposit asset returned, payout asset paid)
        """
        with self._action():
            stake, owed = self.ledger.close(account)
            self._pay(account, self.deposit_asset, stake)
            self._pay(account, self.payout_asset, owed)
            return stake, owed

    def deposit(self, account: Account, amount: int, slippage_bps: int = 0):
        """Stake deposit asset.

        Pending yield is handled by the deposit gate first, so it only
        goes to depositors who were in while it accrued.

        :param slippage_bps:
            Used if the gate runs the distribution
        """
        with self._action():
            self._gate_deposit(slippage_bps)
            self._check_min_deposit(amount, self.config.min_deposit)
            self.ledger.credit(account, amount)
            self._receive(account, self.deposit_asset, amount)

    def withdraw(self, account: Account, amount: int = 0) -> int:
        """Unstake. Zero withdraws everything.

        :return:
            Amount returned
        """
        with self._action():
            if amount == 0:
                amount = self.ledger.positions.get(account).stake
            self.ledger.debit(account, amount)
            self._pay(account, self.deposit_asset, amount)
            return amount

    def claim(self, account: Account) -> int:
        """Pay out owed yield in the payout asset."""
        with self._action():
            owed = self.ledger.take_owed(account)
            if owed == 0:
                raise ZeroAmount("Nothing to claim")
            self._pay(account, self.payout_asset, owed)
            return owed

    def swap_yield(self, slippage_bps: int) -> Distribution:
        """Convert pending yield and distribute it. Anyone may call this."""
        return self._run_distribution(slippage_bps)

    def set_emission_ratio(self, caller: Account, emission_ratio: int):
        with self._action():
            self._require_admin(caller)
            self.farm.set_emission_ratio(emission_ratio)

    def get_pending_yield(self, account: Account) -> int:
        return self.ledger.pending(account)

    def get_user_deposit(self, account: Account) -> int:
        position = self.ledger.positions.find(account)
        return position.stake if position else 0

    def get_vault_stats(self) -> AccumulatorVaultStats:
        return AccumulatorVaultStats(
            total_deposits=self.ledger.total_stake,
            yield_per_unit=self.ledger.yield_per_unit,
            creator_unclaimed=self.creator_unclaimed,
            pending_balance=self.get_pending_balance(),
            payout_balance=self.assets.balance_of(self.account, self.payout_asset),
            total_yield_generated=self.total_yield_generated,
        )
