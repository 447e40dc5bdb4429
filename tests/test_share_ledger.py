"""Share price ledger."""

import pytest

from yield_vault.constants import SCALE
from yield_vault.errors import InsufficientFunds, ZeroAmount
from yield_vault.ledger.shares import ShareLedger


@pytest.fixture()
def ledger() -> ShareLedger:
    ledger = ShareLedger("test")
    ledger.open("alice")
    ledger.open("bob")
    return ledger


def test_first_deposit_one_to_one(ledger):
    assert ledger.share_price() == SCALE
    assert ledger.mint("alice", 1000) == 1000
    assert ledger.share_price() == SCALE


def test_compound_raises_share_price(ledger):
    """1000 in, 76 compounded, 1076 out."""
    ledger.mint("alice", 1000)

    operator_cut, vault_cut = ledger.compound(76, 0)
    assert (operator_cut, vault_cut) == (0, 76)
    assert ledger.total_shares == 1000
    assert ledger.share_price() == 1_076_000_000_000

    assert ledger.burn("alice", 1000) == 1076
    assert ledger.total_value == 0
    assert ledger.total_shares == 0


def test_operator_fee_split(ledger):
    ledger.mint("alice", 1000)
    operator_cut, vault_cut = ledger.compound(1000, 5)
    assert operator_cut == 50
    assert vault_cut == 950
    assert ledger.total_value == 1950


def test_later_depositor_pays_current_price(ledger):
    ledger.mint("alice", 1000)
    ledger.compound(1000, 0)

    # Price is 2.0 now
    assert ledger.mint("bob", 1000) == 500
    assert ledger.to_value(500) == 1000
    assert ledger.to_value(1000) == 2000


def test_deposit_withdraw_without_yield(ledger):
    ledger.mint("alice", 123_456)
    ledger.mint("bob", 7_890)
    assert ledger.burn("alice", 123_456) == 123_456
    assert ledger.close("bob") == 7_890


def test_zero_shares_minted(ledger):
    ledger.mint("alice", 10)
    ledger.compound(1000, 0)
    # Price 101, one unit buys no share
    with pytest.raises(ZeroAmount):
        ledger.mint("bob", 1)


def test_burn_more_than_owned(ledger):
    ledger.mint("alice", 10)
    with pytest.raises(InsufficientFunds):
        ledger.burn("alice", 11)


def test_empty_vault_conversions(ledger):
    assert ledger.to_shares(500) == 500
    assert ledger.to_value(500) == 0
