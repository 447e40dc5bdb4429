"""Vault configuration.

Configs are validated on construction against the bounds in
:py:mod:`yield_vault.constants`. Parameters that admins may change later
are copied into the vault on creation; the config itself is frozen.
"""

from dataclasses import dataclass

from yield_vault.balances import Account, AssetId
from yield_vault.constants import (
    BPS_BASE,
    DEFAULT_RATE_TOLERANCE_BPS,
    MAX_CREATOR_FEE_PERCENT,
    MAX_FARM_EMISSION_BPS,
    MAX_HARVEST_FEE_BPS,
    MAX_SLIPPAGE_BPS,
    MAX_SWAP_THRESHOLD,
    MIN_DEPOSIT_AMOUNT,
    MIN_HARVEST_THRESHOLD,
    MIN_MAX_SLIPPAGE_BPS,
    MIN_SWAP_THRESHOLD,
)
from yield_vault.errors import InvalidParameter
from yield_vault.gate import GatePolicy


def validate_creator_fee(fee_percent: int):
    if not 0 <= fee_percent <= MAX_CREATOR_FEE_PERCENT:
        raise InvalidParameter(f"Creator fee {fee_percent}% exceeds maximum {MAX_CREATOR_FEE_PERCENT}%")


def validate_swap_threshold(threshold: int):
    if threshold < MIN_SWAP_THRESHOLD:
        raise InvalidParameter(f"Swap threshold {threshold} too low, min {MIN_SWAP_THRESHOLD}")
    if threshold > MAX_SWAP_THRESHOLD:
        raise InvalidParameter(f"Swap threshold {threshold} too high, max {MAX_SWAP_THRESHOLD}")


def validate_max_slippage(max_slippage_bps: int):
    if not MIN_MAX_SLIPPAGE_BPS <= max_slippage_bps <= MAX_SLIPPAGE_BPS:
        raise InvalidParameter(f"Max slippage {max_slippage_bps} bps must be within {MIN_MAX_SLIPPAGE_BPS}-{MAX_SLIPPAGE_BPS}")


def validate_harvest_threshold(threshold: int):
    if threshold < MIN_HARVEST_THRESHOLD:
        raise InvalidParameter(f"Harvest threshold {threshold} too low, min {MIN_HARVEST_THRESHOLD}")


@dataclass(frozen=True)
class SwapVaultConfig:
    """Settings shared by vaults that convert an incoming yield asset through an AMM."""

    #: Vault identity, also the key prefix of its positions
    vault_id: str

    #: Asset airdropped to the vault as yield, sold on the AMM
    yield_asset: AssetId

    #: Vault creator, collects the creator fee
    creator: Account

    #: Platform operator, may run some admin actions
    platform: Account

    #: Creator cut of converted yield, whole percents
    creator_fee_percent: int = 0

    #: Yield asset balance that triggers a conversion
    min_swap_threshold: int = MIN_SWAP_THRESHOLD

    #: Highest slippage a caller may ask for
    max_slippage_bps: int = MIN_MAX_SLIPPAGE_BPS

    #: Smallest accepted deposit
    min_deposit: int = MIN_DEPOSIT_AMOUNT

    #: How to treat deposits while yield waits for conversion
    gate_policy: GatePolicy = GatePolicy.reject

    def __post_init__(self):
        validate_creator_fee(self.creator_fee_percent)
        validate_swap_threshold(self.min_swap_threshold)
        validate_max_slippage(self.max_slippage_bps)
        if self.min_deposit <= 0:
            raise InvalidParameter(f"Bad min deposit: {self.min_deposit}")


@dataclass(frozen=True)
class AccumulatorVaultConfig(SwapVaultConfig):
    """Deposit one asset, get paid yield in another."""

    #: Asset users stake
    deposit_asset: AssetId = None

    #: Asset yield is paid in
    payout_asset: AssetId = None

    #: Initial farm emission ratio, 0 disables the farm
    emission_ratio: int = 0

    def __post_init__(self):
        super().__post_init__()
        assets = (self.deposit_asset, self.yield_asset, self.payout_asset)
        if None in assets:
            raise InvalidParameter(f"All assets must be set: {assets}")
        if len(set(assets)) != 3:
            raise InvalidParameter(f"Deposit, yield and payout assets must be different: {assets}")
        if self.emission_ratio < 0:
            raise InvalidParameter(f"Bad emission ratio: {self.emission_ratio}")


@dataclass(frozen=True)
class CompoundingVaultConfig(SwapVaultConfig):
    """Deposit an asset, yield is converted into more of it."""

    #: Asset users deposit and yield compounds into
    base_asset: AssetId = None

    #: Initial farm emission rate
    farm_emission_rate_bps: int = 0

    def __post_init__(self):
        super().__post_init__()
        if self.base_asset is None:
            raise InvalidParameter("Base asset must be set")
        if self.base_asset == self.yield_asset:
            raise InvalidParameter(f"Base and yield assets must be different: {self.base_asset}")
        if not 0 <= self.farm_emission_rate_bps <= MAX_FARM_EMISSION_BPS:
            raise InvalidParameter(f"Bad farm emission rate: {self.farm_emission_rate_bps}")


@dataclass(frozen=True)
class HarvestVaultConfig:
    """Deposit into a lending protocol, yield is harvested into a payout asset."""

    vault_id: str

    #: Asset users deposit and the lending protocol lends out
    base_asset: AssetId

    #: Lending protocol receipt token
    receipt_asset: AssetId

    #: Asset harvested yield is paid in
    payout_asset: AssetId

    #: Vault creator, may pause and harvest
    creator: Account

    #: Platform operator, may harvest
    platform: Account

    #: Fee taken from deposits
    deposit_fee_bps: int = 0

    #: Fee taken from withdrawals
    withdraw_fee_bps: int = 0

    #: Unrealized yield needed before a harvest
    min_harvest_threshold: int = MIN_HARVEST_THRESHOLD

    #: Smallest accepted deposit
    min_deposit: int = MIN_DEPOSIT_AMOUNT

    #: Tolerated exchange rate drop between reads
    rate_tolerance_bps: int = DEFAULT_RATE_TOLERANCE_BPS

    def __post_init__(self):
        assets = (self.base_asset, self.receipt_asset, self.payout_asset)
        if len(set(assets)) != 3:
            raise InvalidParameter(f"Base, receipt and payout assets must be different: {assets}")
        for name in ("deposit_fee_bps", "withdraw_fee_bps"):
            value = getattr(self, name)
            if not 0 <= value <= MAX_HARVEST_FEE_BPS:
                raise InvalidParameter(f"{name} {value} exceeds maximum {MAX_HARVEST_FEE_BPS}")
        validate_harvest_threshold(self.min_harvest_threshold)
        if not 0 <= self.rate_tolerance_bps < BPS_BASE:
            raise InvalidParameter(f"Bad rate tolerance: {self.rate_tolerance_bps}")
        if self.min_deposit <= 0:
            raise InvalidParameter(f"Bad min deposit: {self.min_deposit}")
