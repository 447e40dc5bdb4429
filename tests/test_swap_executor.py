"""Bounded-slippage swaps with balance verification."""

import pytest

from yield_vault.amm.pool import ConstantProductPool
from yield_vault.amm.quote import AmmQuoteEngine
from yield_vault.amm.swap import SwapExecutor
from yield_vault.errors import SlippageExceeded


def test_swap(assets, project_pool):
    executor = SwapExecutor(project_pool, max_slippage_bps=500)
    expected = AmmQuoteEngine(project_pool).get_expected_output(1_000_000, "USDC")

    result = executor.execute(assets, "alice", "USDC", "PROJECT", 1_000_000, 100)

    assert result.amount_in == 1_000_000
    assert result.expected_output == expected
    assert result.realized_output == expected
    assert result.min_output == expected * 9900 // 10_000
    assert assets.balance_of("alice", "USDC") == 10_000_000_000 - 1_000_000
    assert assets.balance_of("alice", "PROJECT") == 10_000_000_000 + expected
    assert project_pool.asset_1_reserves == 100_000_000_000 + 1_000_000


def test_slippage_above_ceiling(assets, project_pool):
    executor = SwapExecutor(project_pool, max_slippage_bps=500)
    with pytest.raises(SlippageExceeded):
        executor.execute(assets, "alice", "USDC", "PROJECT", 1_000_000, 501)


def test_short_delivery_rejected(assets):
    """Pool claims full output but delivers less; the balance delta wins."""
    pool = ConstantProductPool("pool:bad", "USDC", "PROJECT", fee_bps=30, delivery_shortfall_bps=200)
    pool.add_liquidity(assets, 100_000_000_000, 500_000_000_000)
    executor = SwapExecutor(pool, max_slippage_bps=500)

    with pytest.raises(SlippageExceeded):
        executor.execute(assets, "alice", "USDC", "PROJECT", 1_000_000, 100)


def test_short_delivery_within_tolerance(assets):
    """Realized output is what arrived, not what the pool reported."""
    pool = ConstantProductPool("pool:bad", "USDC", "PROJECT", fee_bps=30, delivery_shortfall_bps=50)
    pool.add_liquidity(assets, 100_000_000_000, 500_000_000_000)
    executor = SwapExecutor(pool, max_slippage_bps=500)

    result = executor.execute(assets, "alice", "USDC", "PROJECT", 1_000_000, 100)
    assert result.realized_output < result.expected_output
    assert result.realized_output >= result.min_output
    assert assets.balance_of("alice", "PROJECT") == 10_000_000_000 + result.realized_output


def test_pool_moves_against_us(assets, project_pool):
    """Pool-side minimum check trips when the price moved between quote and swap."""

    class FrontRunPool(ConstantProductPool):
        def swap(self, assets, trader, asset_in, amount_in, min_amount_out):
            # Someone dumps a large USDC order first
            self.asset_1_reserves += 50_000_000_000
            return super().swap(assets, trader, asset_in, amount_in, min_amount_out)

    pool = FrontRunPool("pool:front", "USDC", "PROJECT", fee_bps=30)
    pool.add_liquidity(assets, 100_000_000_000, 500_000_000_000)
    executor = SwapExecutor(pool, max_slippage_bps=500)

    with pytest.raises(SlippageExceeded):
        executor.execute(assets, "alice", "USDC", "PROJECT", 1_000_000, 100)
