"""Lending-backed harvest vault.

Deposits are lent out to an external lending protocol. Interest shows up
as a growing receipt exchange rate; the creator or the platform
periodically harvests it into a payout asset, see
:py:mod:`yield_vault.ledger.harvest` for the accounting.

Principal is always withdrawn in the base asset, yield only ever leaves
as the payout asset. Closing out forfeits yield not yet harvested.
"""

import logging
from dataclasses import dataclass

from yield_vault.amm.pool import ExternalAmmPool
from yield_vault.amm.swap import SwapExecutor
from yield_vault.balances import Account, AssetLedger
from yield_vault.config import HarvestVaultConfig, validate_harvest_threshold
from yield_vault.constants import MAX_HARVEST_SLIPPAGE_BPS, RATE_PRECISION
from yield_vault.errors import BelowMinimumThreshold, InsufficientFunds, InsufficientStake, SlippageExceeded, VaultPaused, ZeroAmount
from yield_vault.fees import deduct_bps_fee
from yield_vault.fixed_point import mul_div_ceil, mul_div_floor
from yield_vault.ledger.harvest import HarvestRecord, TwoStageHarvestLedger
from yield_vault.lending.market import ExternalLendingProtocol, fetch_exchange_rate
from yield_vault.positions import UserPosition
from yield_vault.vault.base import VaultBase

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class HarvestVaultStats:
    total_receipts: int
    total_principal: int
    rate_snapshot: int
    receipt_balance: int
    payout_balance: int
    collected_fees: int


@dataclass(slots=True, frozen=True)
class HarvestPositionView:
    #: Receipt tokens attributed to the account
    receipts: int

    #: Base asset the account may withdraw
    principal: int

    #: Receipts valued at the last seen exchange rate
    value: int

    #: Base asset yield waiting for a harvest
    unrealized: int

    #: Payout asset ready to claim
    claimable: int


class HarvestVault(VaultBase):
    """Deposit base asset, earn lending interest paid out in another asset."""

    def __init__(
        self,
        config: HarvestVaultConfig,
        assets: AssetLedger,
        lending: ExternalLendingProtocol,
        pool: ExternalAmmPool,
    ):
        super().__init__(config.vault_id, assets, config.creator, config.platform)
        assert lending.base_asset == config.base_asset, f"Lending protocol lends {lending.base_asset}, vault takes {config.base_asset}"
        assert lending.receipt_asset == config.receipt_asset, f"Lending protocol issues {lending.receipt_asset}, vault expects {config.receipt_asset}"
        self.config = config
        self.base_asset = config.base_asset
        self.receipt_asset = config.receipt_asset
        self.payout_asset = config.payout_asset
        self.lending = lending
        self.pool = pool
        self.executor = SwapExecutor(pool, MAX_HARVEST_SLIPPAGE_BPS)
        self.ledger = TwoStageHarvestLedger(config.vault_id, config.rate_tolerance_bps)
        self.min_harvest_threshold = config.min_harvest_threshold
        self.paused = False
        self.collected_fees = 0
        self.total_yield_harvested = 0

        self.ledger.observe_rate(fetch_exchange_rate(lending))

    def get_participants(self) -> list:
        return [self, self.ledger, self.ledger.positions, self.executor, self.assets, self.lending, self.pool]

    def _require_not_paused(self):
        if self.paused:
            raise VaultPaused(f"{self.vault_id} is paused")

    def _refresh_rate(self) -> int:
        """Stage 1 for every action."""
        self.ledger.observe_rate(fetch_exchange_rate(self.lending))
        return self.ledger.rate_snapshot

    def _receipt_balance(self) -> int:
        return self.assets.balance_of(self.account, self.receipt_asset)

    def _lend(self, amount: int) -> int:
        """Lend base asset, return receipts received."""
        before = self._receipt_balance()
        self.assets.transfer(self.account, self.lending.account, self.base_asset, amount)
        self.lending.deposit(self.assets, self.account, amount)
        received = self._receipt_balance() - before
        if received == 0:
            raise ZeroAmount("No receipts received from the lending protocol")
        return received

    def _redeem(self, receipts: int) -> int:
        """Redeem receipts, return base asset received."""
        before = self.assets.balance_of(self.account, self.base_asset)
        self.assets.transfer(self.account, self.lending.account, self.receipt_asset, receipts)
        self.lending.redeem(self.assets, self.account, receipts)
        return self.assets.balance_of(self.account, self.base_asset) - before

    def _receipts_for(self, amount: int, position: UserPosition) -> int:
        """Receipts to redeem for ``amount`` of base asset, capped by what the position and the vault hold."""
        receipts = mul_div_ceil(amount, RATE_PRECISION, self.ledger.rate_snapshot)
        return min(receipts, position.stake, self._receipt_balance())

    def _pay_out_principal(self, account: Account, receipts: int) -> int:
        if receipts == 0:
            return 0
        received = self._redeem(receipts)
        net, fee = deduct_bps_fee(received, self.config.withdraw_fee_bps)
        self.collected_fees += fee
        self._pay(account, self.base_asset, net)
        return net

    def opt_in(self, account: Account):
        with self._action():
            self._require_not_paused()
            self._refresh_rate()
            self.ledger.open(account)

    def deposit(self, account: Account, amount: int) -> int:
        """Deposit base asset and lend it out.

        :return:
            Receipts credited to the account
        """
        with self._action():
            self._require_not_paused()
            self._check_min_deposit(amount, self.config.min_deposit)
            self._refresh_rate()
            self.ledger.positions.get(account)

            self._receive(account, self.base_asset, amount)
            net, fee = deduct_bps_fee(amount, self.config.deposit_fee_bps)
            self.collected_fees += fee

            receipts = self._lend(net)
            self.ledger.credit(account, receipts, net)
            logger.debug("%s deposited %d, fee %d, %d receipts", account, amount, fee, receipts)
            return receipts

    def withdraw(self, account: Account, amount: int = 0) -> int:
        """Withdraw principal. Zero withdraws all of it.

        Yield is never withdrawn here; claim it in the payout asset.

        :return:
            Base asset paid after the withdraw fee
        """
        with self._action():
            self._require_not_paused()
            self._refresh_rate()
            position = self.ledger.settle(account)

            if amount == 0:
                amount = position.principal
            if amount == 0:
                raise ZeroAmount("Nothing to withdraw")
            if amount > position.principal:
                raise InsufficientFunds(f"{account} has {position.principal} principal, tried to withdraw {amount}")

            receipts = self._receipts_for(amount, position)
            self.ledger.debit(account, amount, receipts)
            return self._pay_out_principal(account, receipts)

    def claim(self, account: Account) -> int:
        """Pay out converted yield."""
        with self._action():
            self._require_not_paused()
            self._refresh_rate()
            claimable = self.ledger.take_claimable(account)
            if claimable == 0:
                raise ZeroAmount("Nothing to claim")
            self._pay(account, self.payout_asset, claimable)
            return claimable

    def close_out(self, account: Account) -> tuple[int, int]:
        """Withdraw all principal, claim all converted yield and leave.

        Yield accrued since the last harvest is forfeited.

        :return:
            Tuple (base asset paid, payout asset paid)
        """
        with self._action():
            self._refresh_rate()
            position = self.ledger.settle(account)
            receipts = 0
            if position.principal > 0:
                receipts = self._receipts_for(position.principal, position)
            position = self.ledger.close(account)
            base_paid = self._pay_out_principal(account, receipts)
            self._pay(account, self.payout_asset, position.claimable)
            return base_paid, position.claimable

    def harvest(self, caller: Account, slippage_bps: int) -> HarvestRecord:
        """Convert all unrealized yield into the payout asset.

        :raise BelowMinimumThreshold:
            Not enough yield accrued yet
        """
        with self._action():
            self._require_admin(caller)
            self._require_not_paused()
            if slippage_bps > MAX_HARVEST_SLIPPAGE_BPS:
                raise SlippageExceeded(f"Harvest slippage {slippage_bps} bps exceeds {MAX_HARVEST_SLIPPAGE_BPS} bps")

            rate = self._refresh_rate()
            holdings = self._receipt_balance()
            value = mul_div_floor(holdings, rate, RATE_PRECISION)
            if value < self.ledger.total_principal:
                raise BelowMinimumThreshold(f"No yield to harvest, value {value} below principal {self.ledger.total_principal}")

            unrealized = value - self.ledger.total_principal
            if unrealized < self.min_harvest_threshold:
                raise BelowMinimumThreshold(f"Unrealized {unrealized} below harvest threshold {self.min_harvest_threshold}")
            # Positions emptied by a withdraw still hold unrealized yield
            if self.ledger.accrued_unrealized == 0:
                raise InsufficientStake("No depositor yield to harvest")

            receipts = min(mul_div_ceil(unrealized, RATE_PRECISION, rate), holdings)
            converted = self._redeem(receipts)
            result = self.executor.execute(
                self.assets,
                self.account,
                self.base_asset,
                self.payout_asset,
                converted,
                slippage_bps,
            )
            self.total_yield_harvested += converted
            return self.ledger.record_harvest(rate, converted, result.realized_output, receipts)

    def claim_fees(self, caller: Account) -> int:
        """Creator collects deposit and withdraw fees."""
        with self._action():
            self._require_creator(caller)
            amount = self.collected_fees
            if amount == 0:
                raise ZeroAmount("No fees collected")
            self.collected_fees = 0
            self._pay(caller, self.base_asset, amount)
            return amount

    def set_paused(self, caller: Account, paused: bool):
        with self._action():
            self._require_creator(caller)
            self.paused = paused
            logger.info("%s paused: %s", self.vault_id, paused)

    def update_min_harvest_threshold(self, caller: Account, threshold: int):
        with self._action():
            self._require_admin(caller)
            validate_harvest_threshold(threshold)
            self.min_harvest_threshold = threshold

    def update_pool(self, caller: Account, pool: ExternalAmmPool):
        """Point harvests at a different AMM pool."""
        with self._action():
            self._require_admin(caller)
            self.pool = pool
            self.executor = SwapExecutor(pool, MAX_HARVEST_SLIPPAGE_BPS)

    def get_vault_stats(self) -> HarvestVaultStats:
        return HarvestVaultStats(
            total_receipts=self.ledger.total_stake,
            total_principal=self.ledger.total_principal,
            rate_snapshot=self.ledger.rate_snapshot,
            receipt_balance=self._receipt_balance(),
            payout_balance=self.assets.balance_of(self.account, self.payout_asset),
            collected_fees=self.collected_fees,
        )

    def get_user_position(self, account: Account) -> HarvestPositionView:
        position = self.ledger.preview(account)
        if position is None:
            return HarvestPositionView(0, 0, 0, 0, 0)
        return HarvestPositionView(
            receipts=position.stake,
            principal=position.principal,
            value=mul_div_floor(position.stake, self.ledger.rate_snapshot, RATE_PRECISION),
            unrealized=position.unrealized,
            claimable=position.claimable,
        )

    def get_pending_yield(self, account: Account) -> tuple[int, int]:
        """
        :return:
            Tuple (unrealized base asset, claimable payout asset)
        """
        return self.ledger.pending(account)
