"""Flash-deposit protection.

Proceeds waiting to be converted belong to the depositors who were in the
vault while they accrued. A deposit landing right before the distribution
would otherwise take a cut of them.
"""

import enum
import logging
from typing import Callable

from yield_vault.errors import DepositBlocked

logger = logging.getLogger(__name__)


class GatePolicy(enum.Enum):
    """What to do with a deposit while proceeds are waiting."""

    #: Refuse the deposit until somebody runs the distribution
    reject = "reject"

    #: Run the distribution as part of the deposit, then accept it
    distribute_first = "distribute_first"


class DepositGate:
    """Check run before any deposit is credited."""

    def __init__(self, threshold: int, policy: GatePolicy = GatePolicy.reject):
        self.threshold = threshold
        self.policy = policy

    def is_blocking(self, pending_balance: int, total_stake: int) -> bool:
        """Would a deposit right now dilute existing depositors?"""
        return pending_balance >= self.threshold and total_stake > 0

    def check(self, pending_balance: int, total_stake: int, distribute: Callable[[], object]) -> bool:
        """Gate a deposit.

        :param pending_balance:
            Proceeds waiting for conversion

        :param total_stake:
            Current vault stake

        :param distribute:
            Runs the distribution under the ``distribute_first`` policy

        :return:
            True if a distribution was run

        :raise DepositBlocked:
            Under the ``reject`` policy while proceeds are waiting
        """
        if not self.is_blocking(pending_balance, total_stake):
            return False

        if self.policy == GatePolicy.reject:
            raise DepositBlocked(f"{pending_balance} waiting for distribution, threshold {self.threshold}")

        logger.info("Distributing %d pending before accepting a deposit", pending_balance)
        distribute()
        return True
