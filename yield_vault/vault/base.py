"""Vault front-end base classes.

- :py:class:`VaultBase` handles asset movement, authorisation and atomic actions
- :py:class:`SwapVaultBase` adds yield conversion through an AMM with
  farm bonus, creator fee and deposit gating

Vaults have no upgrade or delete entry point: once created, their rules
cannot be changed beyond the admin parameters exposed here.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from yield_vault.amm.pool import ExternalAmmPool
from yield_vault.amm.swap import SwapExecutor, SwapResult
from yield_vault.atomic import atomic
from yield_vault.balances import Account, AssetId, AssetLedger
from yield_vault.config import SwapVaultConfig, validate_creator_fee, validate_max_slippage, validate_swap_threshold
from yield_vault.constants import QUOTE_PREVIEW_SLIPPAGE_BPS
from yield_vault.errors import BelowMinimumThreshold, InsufficientStake, SlippageExceeded, Unauthorized, ZeroAmount
from yield_vault.farm import FarmBonusPool
from yield_vault.gate import DepositGate

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SwapQuote:
    """Read-only preview of converting the pending yield."""

    #: Yield asset waiting for conversion
    pending_balance: int

    #: Expected output for all of it
    expected_output: int

    #: Minimum output at the preview slippage
    min_output: int


@dataclass(slots=True, frozen=True)
class FarmStats:
    #: Payout asset left in the farm
    balance: int

    #: Configured emission setting, a ratio or a rate depending on the farm
    emission_setting: int

    #: Rate the next distribution would use, in bps
    current_rate_bps: int


@dataclass(slots=True, frozen=True)
class Distribution:
    """Outcome of one conversion cycle."""

    swap: SwapResult

    #: Farm top-up
    farm_bonus: int

    #: Creator cut of swap output plus bonus
    creator_cut: int

    #: What depositors got
    depositor_cut: int


class VaultBase(ABC):
    """Shared vault plumbing.

    Subclasses call :py:meth:`_action` around every state-changing operation
    so failures leave no trace.
    """

    def __init__(self, vault_id: str, assets: AssetLedger, creator: Account, platform: Account):
        self.vault_id = vault_id

        #: Vault's own holder identity in the asset ledger
        self.account = f"vault:{vault_id}"

        self.assets = assets
        self.creator = creator
        self.platform = platform

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.vault_id}>"

    @abstractmethod
    def get_participants(self) -> list:
        """Everything an action may mutate."""

    def _action(self):
        return atomic(*self.get_participants())

    def _require_creator(self, caller: Account):
        if caller != self.creator:
            raise Unauthorized(f"{caller} is not the creator of {self.vault_id}")

    def _require_admin(self, caller: Account):
        if caller not in (self.creator, self.platform):
            raise Unauthorized(f"{caller} is neither the creator nor the platform of {self.vault_id}")

    def _receive(self, sender: Account, asset: AssetId, amount: int):
        self.assets.transfer(sender, self.account, asset, amount)

    def _pay(self, receiver: Account, asset: AssetId, amount: int):
        if amount > 0:
            self.assets.transfer(self.account, receiver, asset, amount)

    def _check_min_deposit(self, amount: int, min_deposit: int):
        if amount < min_deposit:
            raise BelowMinimumThreshold(f"Deposit {amount} below minimum {min_deposit}")

    @abstractmethod
    def opt_in(self, account: Account):
        """Create an empty position for the account."""

    @abstractmethod
    def close_out(self, account: Account):
        """Pay out everything the account is owed and delete its position."""

    @abstractmethod
    def get_vault_stats(self):
        """Vault-wide totals."""


class SwapVaultBase(VaultBase):
    """Vault receiving yield in one asset and converting it on an AMM.

    Yield asset lands in the vault account from outside, e.g. airdrops.
    """

    def __init__(
        self,
        config: SwapVaultConfig,
        assets: AssetLedger,
        pool: ExternalAmmPool,
        farm: FarmBonusPool,
        payout_asset: AssetId,
    ):
        super().__init__(config.vault_id, assets, config.creator, config.platform)
        self.config = config
        self.yield_asset = config.yield_asset
        self.payout_asset = payout_asset
        self.pool = pool
        self.farm = farm
        self.executor = SwapExecutor(pool, config.max_slippage_bps)
        self.gate = DepositGate(config.min_swap_threshold, config.gate_policy)
        self.creator_fee_percent = config.creator_fee_percent
        self.creator_unclaimed = 0
        self.total_yield_generated = 0

    @property
    @abstractmethod
    def total_stake(self) -> int:
        """Stake that a distribution would be spread over."""

    @abstractmethod
    def _allocate(self, total_output: int) -> tuple[int, int]:
        """Split converted yield and hand the depositor part to the ledger.

        :return:
            Tuple (creator cut, depositor cut)
        """

    @property
    def min_swap_threshold(self) -> int:
        return self.gate.threshold

    @property
    def max_slippage_bps(self) -> int:
        return self.executor.max_slippage_bps

    def get_participants(self) -> list:
        return [self, self.farm, self.gate, self.executor, self.assets, self.pool]

    def get_pending_balance(self) -> int:
        """Yield asset waiting for conversion."""
        return self.assets.balance_of(self.account, self.yield_asset)

    def _check_slippage(self, slippage_bps: int):
        if slippage_bps > self.max_slippage_bps:
            raise SlippageExceeded(f"Slippage {slippage_bps} bps exceeds maximum {self.max_slippage_bps} bps")

    def _distribute(self, slippage_bps: int) -> Distribution:
        """Convert all pending yield, add the farm bonus and split it."""
        pending = self.get_pending_balance()
        result = self.executor.execute(
            self.assets,
            self.account,
            self.yield_asset,
            self.payout_asset,
            pending,
            slippage_bps,
        )
        bonus = self.farm.take_bonus(result.realized_output, self.total_stake)
        total_output = result.realized_output + bonus
        self.total_yield_generated += total_output

        creator_cut, depositor_cut = self._allocate(total_output)
        self.creator_unclaimed += creator_cut

        logger.info(
            "%s distributed %d (swap %d + farm %d), creator %d, depositors %d",
            self.vault_id,
            total_output,
            result.realized_output,
            bonus,
            creator_cut,
            depositor_cut,
        )
        return Distribution(swap=result, farm_bonus=bonus, creator_cut=creator_cut, depositor_cut=depositor_cut)

    def _gate_deposit(self, slippage_bps: int):
        self._check_slippage(slippage_bps)
        self.gate.check(
            self.get_pending_balance(),
            self.total_stake,
            lambda: self._distribute(slippage_bps),
        )

    def _run_distribution(self, slippage_bps: int) -> Distribution:
        """Permissionless conversion entry point shared by the subclasses."""
        with self._action():
            self._check_slippage(slippage_bps)
            pending = self.get_pending_balance()
            if pending < self.min_swap_threshold:
                raise BelowMinimumThreshold(f"Pending {pending} below swap threshold {self.min_swap_threshold}")
            if self.total_stake == 0:
                raise InsufficientStake("No depositors to distribute to")
            return self._distribute(slippage_bps)

    def claim_creator(self, caller: Account) -> int:
        """Pay the creator their accumulated cut."""
        with self._action():
            self._require_creator(caller)
            amount = self.creator_unclaimed
            if amount == 0:
                raise ZeroAmount("Nothing to claim")
            self.creator_unclaimed = 0
            self._pay(caller, self.payout_asset, amount)
            return amount

    def contribute_farm(self, contributor: Account, amount: int):
        """Anyone may top up the farm with payout asset."""
        with self._action():
            self.farm.contribute(amount)
            self._receive(contributor, self.payout_asset, amount)

    def update_min_swap_threshold(self, caller: Account, threshold: int):
        with self._action():
            self._require_admin(caller)
            validate_swap_threshold(threshold)
            self.gate.threshold = threshold

    def update_max_slippage(self, caller: Account, max_slippage_bps: int):
        with self._action():
            self._require_creator(caller)
            validate_max_slippage(max_slippage_bps)
            self.executor.max_slippage_bps = max_slippage_bps

    def update_creator_fee_rate(self, caller: Account, fee_percent: int):
        with self._action():
            self._require_creator(caller)
            validate_creator_fee(fee_percent)
            self.creator_fee_percent = fee_percent

    def get_swap_quote(self) -> SwapQuote:
        """Preview converting the pending balance at the reference slippage."""
        pending = self.get_pending_balance()
        if pending == 0:
            return SwapQuote(0, 0, 0)
        expected, min_output = self.executor.quote_engine.quote_with_slippage(pending, self.yield_asset, QUOTE_PREVIEW_SLIPPAGE_BPS)
        return SwapQuote(pending, expected, min_output)

    def get_farm_stats(self) -> FarmStats:
        return FarmStats(
            balance=self.farm.balance,
            emission_setting=self.farm.emission_setting,
            current_rate_bps=self.farm.get_current_rate(self.total_stake),
        )
