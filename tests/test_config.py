"""Vault configuration validation."""

import pytest

from yield_vault.config import AccumulatorVaultConfig, CompoundingVaultConfig, HarvestVaultConfig
from yield_vault.errors import InvalidParameter


def make_accumulator_config(**kwargs) -> AccumulatorVaultConfig:
    params = dict(
        vault_id="test",
        yield_asset="USDC",
        creator="creator",
        platform="platform",
        deposit_asset="ALPHA",
        payout_asset="PROJECT",
    )
    params.update(kwargs)
    return AccumulatorVaultConfig(**params)


def test_defaults():
    config = make_accumulator_config()
    assert config.min_swap_threshold == 200_000
    assert config.max_slippage_bps == 500
    assert config.min_deposit == 1_000_000


@pytest.mark.parametrize(
    "kwargs",
    [
        {"creator_fee_percent": 7},
        {"min_swap_threshold": 199_999},
        {"min_swap_threshold": 50_000_001},
        {"max_slippage_bps": 499},
        {"max_slippage_bps": 10_001},
        {"payout_asset": "USDC"},
        {"deposit_asset": "PROJECT"},
        {"emission_ratio": -1},
    ],
)
def test_accumulator_config_rejects(kwargs):
    with pytest.raises(InvalidParameter):
        make_accumulator_config(**kwargs)


def test_compounding_config_rejects_same_assets():
    with pytest.raises(InvalidParameter):
        CompoundingVaultConfig(vault_id="test", yield_asset="USDC", creator="c", platform="p", base_asset="USDC")

    with pytest.raises(InvalidParameter):
        CompoundingVaultConfig(vault_id="test", yield_asset="USDC", creator="c", platform="p", base_asset="ALPHA", farm_emission_rate_bps=50_001)


def test_harvest_config_rejects():
    base = dict(vault_id="test", base_asset="USDC", receipt_asset="cUSDC", payout_asset="PROJECT", creator="c", platform="p")
    HarvestVaultConfig(**base, deposit_fee_bps=500)

    with pytest.raises(InvalidParameter):
        HarvestVaultConfig(**base, deposit_fee_bps=501)

    with pytest.raises(InvalidParameter):
        HarvestVaultConfig(**base, min_harvest_threshold=999_999)

    # InvalidParameter is also a ValueError
    with pytest.raises(ValueError):
        HarvestVaultConfig(**{**base, "payout_asset": "USDC"})
