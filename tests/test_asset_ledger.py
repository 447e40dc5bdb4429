"""In-memory asset holdings."""

import pytest

from yield_vault.balances import AssetLedger
from yield_vault.errors import InsufficientFunds, ZeroAmount


def test_transfer():
    assets = AssetLedger()
    assets.mint("alice", "USDC", 1_000)
    assets.transfer("alice", "bob", "USDC", 400)
    assert assets.balance_of("alice", "USDC") == 600
    assert assets.balance_of("bob", "USDC") == 400
    assert assets.balance_of("bob", "PROJECT") == 0


def test_transfer_refusals():
    assets = AssetLedger()
    assets.mint("alice", "USDC", 1_000)

    with pytest.raises(ZeroAmount):
        assets.transfer("alice", "bob", "USDC", 0)

    with pytest.raises(InsufficientFunds):
        assets.transfer("alice", "bob", "USDC", 1_001)


def test_burn():
    assets = AssetLedger()
    assets.mint("market", "cUSDC", 500)
    assets.burn("market", "cUSDC", 200)
    assert assets.balance_of("market", "cUSDC") == 300

    with pytest.raises(InsufficientFunds):
        assets.burn("market", "cUSDC", 301)
