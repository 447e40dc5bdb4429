"""Run all three vault models through a short scenario.

Usage:

.. code-block:: shell

    LOG_LEVEL=info python scripts/simulate-vaults.py

"""

import logging

from yield_vault.amm.pool import ConstantProductPool
from yield_vault.balances import AssetLedger
from yield_vault.config import AccumulatorVaultConfig, CompoundingVaultConfig, HarvestVaultConfig
from yield_vault.gate import GatePolicy
from yield_vault.lending.market import SimulatedLendingMarket
from yield_vault.utils import setup_console_logging
from yield_vault.vault.accumulator_vault import AccumulatorVault
from yield_vault.vault.compounding_vault import CompoundingVault
from yield_vault.vault.harvest_vault import HarvestVault

logger = logging.getLogger(__name__)

setup_console_logging(default_log_level="info")

assets = AssetLedger()
for user in ("alice", "bob"):
    assets.mint(user, "ALPHA", 1_000_000_000)
    assets.mint(user, "USDC", 1_000_000_000)

usdc_project = ConstantProductPool("pool:usdc-project", "USDC", "PROJECT", fee_bps=30)
usdc_project.add_liquidity(assets, 10_000_000_000, 50_000_000_000)
usdc_alpha = ConstantProductPool("pool:usdc-alpha", "USDC", "ALPHA", fee_bps=30)
usdc_alpha.add_liquidity(assets, 10_000_000_000, 20_000_000_000)

#
# Accumulator vault: stake ALPHA, earn PROJECT
#
accumulator = AccumulatorVault(
    AccumulatorVaultConfig(
        vault_id="alpha-project",
        yield_asset="USDC",
        creator="creator",
        platform="platform",
        creator_fee_percent=5,
        deposit_asset="ALPHA",
        payout_asset="PROJECT",
    ),
    assets,
    usdc_project,
)
for user, amount in (("alice", 70_000_000), ("bob", 130_000_000)):
    accumulator.opt_in(user)
    accumulator.deposit(user, amount)

assets.mint(accumulator.account, "USDC", 3_000_000)
accumulator.swap_yield(slippage_bps=100)
for user in ("alice", "bob"):
    logger.info("Accumulator: %s earned %d PROJECT", user, accumulator.get_pending_yield(user))

#
# Compounding vault: ALPHA yield compounds into ALPHA
#
compounding = CompoundingVault(
    CompoundingVaultConfig(
        vault_id="alpha-compound",
        yield_asset="USDC",
        creator="creator",
        platform="platform",
        base_asset="ALPHA",
        gate_policy=GatePolicy.distribute_first,
    ),
    assets,
    usdc_alpha,
)
compounding.opt_in("alice")
compounding.deposit("alice", 100_000_000)
assets.mint(compounding.account, "USDC", 5_000_000)
compounding.opt_in("bob")
compounding.deposit("bob", 100_000_000, slippage_bps=100)
stats = compounding.get_vault_stats()
logger.info("Compounding: share price %d, alice %d, bob %d", stats.share_price, compounding.get_user_balance("alice"), compounding.get_user_balance("bob"))

#
# Harvest vault: USDC lent out, interest harvested into PROJECT
#
market = SimulatedLendingMarket("lending:usdc", "USDC", "cUSDC")
harvest = HarvestVault(
    HarvestVaultConfig(
        vault_id="usdc-harvest",
        base_asset="USDC",
        receipt_asset="cUSDC",
        payout_asset="PROJECT",
        creator="creator",
        platform="platform",
    ),
    assets,
    market,
    usdc_project,
)
harvest.opt_in("alice")
harvest.deposit("alice", 100_000_000)
market.accrue_interest(assets, 5_000_000)
record = harvest.harvest("creator", slippage_bps=100)
logger.info("Harvest converted %d USDC into %d PROJECT", record.converted, record.payout)
base_paid, payout_paid = harvest.close_out("alice")
logger.info("Harvest vault: alice got back %d USDC and %d PROJECT", base_paid, payout_paid)
