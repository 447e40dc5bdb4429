"""Shared fixtures: an asset ledger with funded users and AMM pools."""

import pytest

from yield_vault.amm.pool import ConstantProductPool
from yield_vault.balances import AssetLedger
from yield_vault.config import AccumulatorVaultConfig, CompoundingVaultConfig, HarvestVaultConfig
from yield_vault.lending.market import SimulatedLendingMarket
from yield_vault.vault.accumulator_vault import AccumulatorVault
from yield_vault.vault.compounding_vault import CompoundingVault
from yield_vault.vault.harvest_vault import HarvestVault


#: Users get this much of every asset
STARTING_BALANCE = 10_000_000_000


@pytest.fixture()
def assets() -> AssetLedger:
    ledger = AssetLedger()
    for user in ("alice", "bob", "carol", "sponsor"):
        for asset in ("ALPHA", "USDC", "PROJECT"):
            ledger.mint(user, asset, STARTING_BALANCE)
    return ledger


@pytest.fixture()
def project_pool(assets) -> ConstantProductPool:
    """USDC/PROJECT pool, 1 USDC ~ 5 PROJECT."""
    pool = ConstantProductPool("pool:usdc-project", "USDC", "PROJECT", fee_bps=30)
    pool.add_liquidity(assets, 100_000_000_000, 500_000_000_000)
    return pool


@pytest.fixture()
def alpha_pool(assets) -> ConstantProductPool:
    """ALPHA/USDC pool with ALPHA as the first asset, 1 USDC ~ 2 ALPHA."""
    pool = ConstantProductPool("pool:alpha-usdc", "ALPHA", "USDC", fee_bps=30)
    pool.add_liquidity(assets, 200_000_000_000, 100_000_000_000)
    return pool


@pytest.fixture()
def accumulator_config() -> AccumulatorVaultConfig:
    return AccumulatorVaultConfig(
        vault_id="alpha-project",
        yield_asset="USDC",
        creator="creator",
        platform="platform",
        creator_fee_percent=5,
        deposit_asset="ALPHA",
        payout_asset="PROJECT",
    )


@pytest.fixture()
def accumulator_vault(accumulator_config, assets, project_pool) -> AccumulatorVault:
    return AccumulatorVault(accumulator_config, assets, project_pool)


@pytest.fixture()
def compounding_config() -> CompoundingVaultConfig:
    return CompoundingVaultConfig(
        vault_id="alpha-compound",
        yield_asset="USDC",
        creator="creator",
        platform="platform",
        creator_fee_percent=5,
        base_asset="ALPHA",
    )


@pytest.fixture()
def compounding_vault(compounding_config, assets, alpha_pool) -> CompoundingVault:
    return CompoundingVault(compounding_config, assets, alpha_pool)


@pytest.fixture()
def market() -> SimulatedLendingMarket:
    return SimulatedLendingMarket("lending:usdc", "USDC", "cUSDC")


@pytest.fixture()
def harvest_config() -> HarvestVaultConfig:
    return HarvestVaultConfig(
        vault_id="usdc-harvest",
        base_asset="USDC",
        receipt_asset="cUSDC",
        payout_asset="PROJECT",
        creator="creator",
        platform="platform",
    )


@pytest.fixture()
def harvest_vault(harvest_config, assets, market, project_pool) -> HarvestVault:
    return HarvestVault(harvest_config, assets, market, project_pool)
