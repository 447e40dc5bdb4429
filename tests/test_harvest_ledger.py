"""Two-stage harvest accounting."""

import pytest

from yield_vault.errors import InsufficientStake, RateRegression
from yield_vault.ledger.harvest import TwoStageHarvestLedger


@pytest.fixture()
def ledger() -> TwoStageHarvestLedger:
    ledger = TwoStageHarvestLedger("test", rate_tolerance_bps=10)
    ledger.observe_rate(1_000_000)
    ledger.open("alice")
    ledger.credit("alice", 100_000_000, 100_000_000)
    return ledger


def test_rate_increase_accrues_unrealized(ledger):
    assert ledger.observe_rate(1_050_000) == 50_000
    assert ledger.yield_per_unit == 50_000
    assert ledger.pending("alice") == (5_000_000, 0)

    # Read-only preview did not settle
    assert ledger.positions.get("alice").unrealized == 0


def test_post_harvest_yield_stays_unrealized(ledger):
    """Yield accrued after a harvest waits for the next one."""
    ledger.observe_rate(1_050_000)
    record = ledger.record_harvest(1_050_000, converted=5_000_000, payout=25_000_000, receipts_redeemed=4_761_905)
    assert record.payout_ratio == 5 * 10**12
    assert record.yield_per_unit == 50_000

    ledger.observe_rate(1_060_000)
    position = ledger.settle("alice")

    assert position.claimable == 25_000_000
    # 95_238_095 receipts * 0.01 rate increase
    assert position.unrealized == 952_380
    assert position.stake == 95_238_095
    assert ledger.total_stake == 95_238_095

    ledger.record_harvest(1_060_000, converted=1_000_000, payout=4_000_000, receipts_redeemed=898_473)
    position = ledger.settle("alice")
    assert position.unrealized == 0
    assert position.claimable == 25_000_000 + 952_380 * 4
    assert position.stake == 94_339_622


def test_harvest_before_any_action(ledger):
    """Positions catch up with several harvests in one settlement."""
    ledger.observe_rate(1_050_000)
    ledger.record_harvest(1_050_000, converted=5_000_000, payout=25_000_000, receipts_redeemed=4_761_905)
    ledger.observe_rate(1_100_000)
    ledger.record_harvest(1_100_000, converted=4_761_905, payout=9_523_810, receipts_redeemed=4_329_005)

    unrealized, claimable = ledger.pending("alice")
    assert unrealized == 0
    # First segment at ratio 5, second on the rebased stake at ratio 2
    assert claimable == 25_000_000 + 4_761_904 * 2


def test_late_joiner(ledger):
    ledger.observe_rate(1_050_000)
    ledger.record_harvest(1_050_000, converted=5_000_000, payout=25_000_000, receipts_redeemed=4_761_905)

    ledger.open("bob")
    ledger.credit("bob", 1_000_000, 1_050_000)
    assert ledger.pending("bob") == (0, 0)
    assert ledger.positions.get("bob").harvest_epoch == 1


def test_snapshot_never_ahead(ledger):
    ledger.observe_rate(1_020_000)
    ledger.open("bob")
    ledger.observe_rate(1_030_000)
    ledger.settle("alice")
    ledger.settle("bob")
    for _, position in ledger.positions:
        assert position.snapshot <= ledger.yield_per_unit


def test_rate_regression(ledger):
    ledger.observe_rate(1_060_000)

    # 0.1% drop is tolerated
    ledger.observe_rate(1_058_940)
    assert ledger.rate_snapshot == 1_058_940

    with pytest.raises(RateRegression):
        ledger.observe_rate(1_057_000)


def test_withdraw_all_principal_drops_stake(ledger):
    ledger.observe_rate(1_050_000)
    position = ledger.debit("alice", 100_000_000, 95_238_096)
    assert position.stake == 0
    assert position.principal == 0
    assert position.unrealized == 5_000_000
    assert ledger.total_stake == 0
    assert ledger.total_principal == 0


def test_close_forfeits_unrealized(ledger):
    ledger.observe_rate(1_050_000)
    position = ledger.close("alice")
    assert position.unrealized == 5_000_000
    assert position.claimable == 0
    assert ledger.total_stake == 0
    assert not ledger.positions.is_opted_in("alice")


def test_record_harvest_needs_stake():
    ledger = TwoStageHarvestLedger("empty")
    with pytest.raises(InsufficientStake):
        ledger.record_harvest(1_000_000, 1, 1, 1)


def test_missing_rate_resets_snapshot(ledger):
    ledger.observe_rate(1_050_000)

    assert ledger.observe_rate(None) == 0
    assert ledger.rate_snapshot == 1_000_000
    assert ledger.yield_per_unit == 50_000

    # The reset snapshot is the new baseline
    ledger.observe_rate(1_000_000)
    assert ledger.pending("alice") == (5_000_000, 0)


def test_payout_ratio_covers_accrued_yield(ledger):
    """Converting less than positions accrued scales the ratio down."""
    ledger.observe_rate(1_050_000)
    assert ledger.accrued_unrealized == 5_000_000

    record = ledger.record_harvest(1_050_000, converted=4_000_000, payout=20_000_000, receipts_redeemed=3_809_524)
    # 20M paid for the 5M positions accrued, not for the 4M sold
    assert record.payout_ratio == 4 * 10**12
    assert ledger.pending("alice") == (0, 20_000_000)

    assert ledger.accrued_unrealized == 0
    assert ledger.accruing_stake == 95_238_095


def test_harvest_after_full_withdraw(ledger):
    ledger.observe_rate(1_050_000)
    ledger.debit("alice", 100_000_000, 95_238_096)
    assert ledger.total_stake == 0

    ledger.record_harvest(1_050_000, converted=4_999_999, payout=24_999_995, receipts_redeemed=4_761_904)
    assert ledger.pending("alice") == (0, 24_999_995)


def test_close_removes_accrued_yield(ledger):
    ledger.observe_rate(1_050_000)
    ledger.close("alice")
    assert ledger.accruing_stake == 0
    assert ledger.accrued_unrealized == 0

    with pytest.raises(InsufficientStake):
        ledger.record_harvest(1_050_000, 4_999_999, 24_999_995, 4_761_904)
