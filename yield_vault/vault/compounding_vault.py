"""Auto-compounding vault.

Yield asset is sold for more of the base asset, which is added to the
share pool. Users never claim; their shares are simply worth more.
"""

import logging
from dataclasses import dataclass

from yield_vault.amm.pool import ExternalAmmPool
from yield_vault.balances import Account, AssetLedger
from yield_vault.config import CompoundingVaultConfig
from yield_vault.farm import FarmBonusPool
from yield_vault.ledger.shares import ShareLedger
from yield_vault.vault.base import Distribution, SwapQuote, SwapVaultBase

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CompoundingVaultStats:
    total_shares: int
    total_value: int
    creator_unclaimed: int
    pending_balance: int
    base_balance: int
    total_yield_compounded: int

    #: Base asset per share times ``SCALE``
    share_price: int


class CompoundingVault(SwapVaultBase):
    """Deposit base asset, receive shares, yield compounds."""

    def __init__(self, config: CompoundingVaultConfig, assets: AssetLedger, pool: ExternalAmmPool):
        super().__init__(
            config,
            assets,
            pool,
            FarmBonusPool(config.farm_emission_rate_bps),
            config.base_asset,
        )
        self.base_asset = config.base_asset
        self.ledger = ShareLedger(config.vault_id)

    @property
    def total_stake(self) -> int:
        return self.ledger.total_shares

    def get_participants(self) -> list:
        return super().get_participants() + [self.ledger, self.ledger.positions]

    def _allocate(self, total_output: int) -> tuple[int, int]:
        return self.ledger.compound(total_output, self.creator_fee_percent)

    def opt_in(self, account: Account):
        with self._action():
            self.ledger.open(account)

    def close_out(self, account: Account) -> int:
        """Redeem all shares and leave.

        :return:
            Base asset returned
        """
        with self._action():
            value = self.ledger.close(account)
            self._pay(account, self.base_asset, value)
            return value

    def deposit(self, account: Account, amount: int, slippage_bps: int = 0) -> int:
        """Deposit base asset for shares.

        :return:
            Shares minted
        """
        with self._action():
            self._gate_deposit(slippage_bps)
            self._check_min_deposit(amount, self.config.min_deposit)
            shares = self.ledger.mint(account, amount)
            self._receive(account, self.base_asset, amount)
            logger.debug("%s deposited %d for %d shares", account, amount, shares)
            return shares

    def withdraw(self, account: Account, shares: int = 0) -> int:
        """Redeem shares. Zero redeems all of them.

        :return:
            Base asset returned
        """
        with self._action():
            if shares == 0:
                shares = self.ledger.positions.get(account).stake
            value = self.ledger.burn(account, shares)
            self._pay(account, self.base_asset, value)
            return value

    def compound_yield(self, slippage_bps: int) -> Distribution:
        """Convert pending yield into base asset. Anyone may call this."""
        return self._run_distribution(slippage_bps)

    def set_farm_emission_rate(self, caller: Account, emission_rate_bps: int):
        with self._action():
            self._require_admin(caller)
            self.farm.set_emission_rate(emission_rate_bps)

    def get_user_balance(self, account: Account) -> int:
        """Current base asset value of the account's shares."""
        return self.ledger.to_value(self.ledger.shares_of(account))

    def get_user_shares(self, account: Account) -> int:
        return self.ledger.shares_of(account)

    def preview_deposit(self, amount: int) -> int:
        return self.ledger.to_shares(amount)

    def preview_withdraw(self, shares: int) -> int:
        return self.ledger.to_value(shares)

    def get_compound_quote(self) -> SwapQuote:
        return self.get_swap_quote()

    def get_vault_stats(self) -> CompoundingVaultStats:
        return CompoundingVaultStats(
            total_shares=self.ledger.total_shares,
            total_value=self.ledger.total_value,
            creator_unclaimed=self.creator_unclaimed,
            pending_balance=self.get_pending_balance(),
            base_balance=self.assets.balance_of(self.account, self.base_asset),
            total_yield_compounded=self.total_yield_generated,
            share_price=self.ledger.share_price(),
        )
