"""Farm bonus pools."""

import pytest

from yield_vault.errors import InvalidParameter, ZeroAmount
from yield_vault.farm import DynamicFarmBonusPool, FarmBonusPool


def test_bonus_at_fixed_rate():
    farm = FarmBonusPool(emission_rate_bps=2_000)
    farm.contribute(1_000_000)
    assert farm.take_bonus(100_000) == 20_000
    assert farm.balance == 980_000
    assert farm.total_paid == 20_000


def test_bonus_capped_by_balance():
    farm = FarmBonusPool(emission_rate_bps=50_000)
    farm.contribute(300)
    assert farm.take_bonus(100) == 300
    assert farm.balance == 0
    assert farm.take_bonus(100) == 0


def test_empty_or_disabled_farm():
    assert FarmBonusPool(emission_rate_bps=5_000).take_bonus(100) == 0

    farm = FarmBonusPool()
    farm.contribute(1000)
    assert farm.take_bonus(100) == 0


def test_rate_bounds():
    farm = FarmBonusPool()
    with pytest.raises(InvalidParameter):
        farm.set_emission_rate(50_001)

    # No floor while empty
    farm.set_emission_rate(500)

    farm.contribute(1)
    with pytest.raises(InvalidParameter):
        farm.set_emission_rate(999)
    farm.set_emission_rate(1_000)
    assert farm.emission_rate_bps == 1_000


def test_contribute_zero():
    with pytest.raises(ZeroAmount):
        FarmBonusPool().contribute(0)


def test_dynamic_rate():
    farm = DynamicFarmBonusPool(emission_ratio=4)
    farm.contribute(10_000_000)

    # 10M * 4 / 10M = 4 bps, floored to 1000 bps
    assert farm.get_current_rate(10_000_000) == 1_000

    # 10M * 4 / 10_000 = 4000 bps
    assert farm.get_current_rate(10_000) == 4_000
    assert farm.take_bonus(1_000, total_stake=10_000) == 400

    assert farm.get_current_rate(0) == 0


def test_dynamic_farm_disabled_by_zero_ratio():
    farm = DynamicFarmBonusPool()
    farm.contribute(1_000)
    assert farm.take_bonus(1_000, total_stake=1) == 0

    with pytest.raises(InvalidParameter):
        farm.set_emission_ratio(-1)


def test_emission_setting():
    assert FarmBonusPool(emission_rate_bps=2_000).emission_setting == 2_000
    assert DynamicFarmBonusPool(emission_ratio=4).emission_setting == 4
