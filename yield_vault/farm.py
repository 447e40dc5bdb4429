"""Farm bonus pools.

Sponsors park payout asset in the farm. Each distribution tops the swap
output up by an emission rate, paid from the farm until it runs dry.

.. code-block:: text

    bonus = min(base_output * emission_rate_bps / 10_000, farm_balance)

"""

import logging

from yield_vault.constants import BPS_BASE, MAX_FARM_EMISSION_BPS, MIN_FARM_EMISSION_BPS
from yield_vault.errors import InvalidParameter, ZeroAmount
from yield_vault.fixed_point import mul_div_floor

logger = logging.getLogger(__name__)


class FarmBonusPool:
    """Fixed emission rate farm.

    - The rate may not exceed :py:data:`MAX_FARM_EMISSION_BPS`
    - Once the farm holds funds, the rate may not be set below
      :py:data:`MIN_FARM_EMISSION_BPS`, so contributions cannot be locked in
    """

    def __init__(self, emission_rate_bps: int = 0):
        self.balance = 0
        self.emission_rate_bps = 0
        self.total_paid = 0
        self.set_emission_rate(emission_rate_bps)

    def contribute(self, amount: int):
        if amount <= 0:
            raise ZeroAmount("Contribution must be positive")
        self.balance += amount
        logger.info("Farm received %d, balance %d", amount, self.balance)

    def set_emission_rate(self, emission_rate_bps: int):
        if emission_rate_bps < 0 or emission_rate_bps > MAX_FARM_EMISSION_BPS:
            raise InvalidParameter(f"Emission rate {emission_rate_bps} bps out of range, max {MAX_FARM_EMISSION_BPS}")
        if self.balance > 0 and emission_rate_bps < MIN_FARM_EMISSION_BPS:
            raise InvalidParameter(f"Emission rate {emission_rate_bps} bps below {MIN_FARM_EMISSION_BPS} while the farm has balance")
        self.emission_rate_bps = emission_rate_bps

    @property
    def emission_setting(self) -> int:
        """Configured emission rate in BPS."""
        return self.emission_rate_bps

    def get_current_rate(self, total_stake: int = 0) -> int:
        return self.emission_rate_bps

    def take_bonus(self, base_output: int, total_stake: int = 0) -> int:
        """Pay the bonus for one distribution out of the farm.

        :param base_output:
            Realised swap output the bonus is proportional to

        :param total_stake:
            Vault stake, for farms whose rate depends on it

        :return:
            Bonus amount, already deducted from the farm balance
        """
        if self.balance == 0:
            return 0
        rate = self.get_current_rate(total_stake)
        if rate == 0:
            return 0
        bonus = min(mul_div_floor(base_output, rate, BPS_BASE), self.balance)
        self.balance -= bonus
        self.total_paid += bonus
        logger.info("Farm bonus %d at %d bps, %d left", bonus, rate, self.balance)
        return bonus


class DynamicFarmBonusPool(FarmBonusPool):
    """Farm whose rate scales with its balance relative to the vault size.

    .. code-block:: text

        rate = max(farm_balance * emission_ratio / total_stake, MIN_FARM_EMISSION_BPS)

    A zero ratio disables the farm. The fixed emission rate of the base class is not used.
    """

    def __init__(self, emission_ratio: int = 0):
        super().__init__()
        self.emission_ratio = 0
        self.set_emission_ratio(emission_ratio)

    def set_emission_ratio(self, emission_ratio: int):
        if emission_ratio < 0:
            raise InvalidParameter(f"Bad emission ratio: {emission_ratio}")
        self.emission_ratio = emission_ratio

    @property
    def emission_setting(self) -> int:
        """Configured emission ratio."""
        return self.emission_ratio

    def get_current_rate(self, total_stake: int = 0) -> int:
        if self.emission_ratio == 0 or total_stake == 0 or self.balance == 0:
            return 0
        rate = mul_div_floor(self.balance, self.emission_ratio, total_stake)
        return max(rate, MIN_FARM_EMISSION_BPS)
