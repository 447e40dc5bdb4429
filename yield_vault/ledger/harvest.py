"""Two-stage harvest ledger.

Deposits sit in an external lending protocol as receipt tokens whose
exchange rate grows with interest. Yield is tracked in two stages:

1. Every action reads the exchange rate. The rate increase is added to a
   yield-per-unit accumulator and settled into each position as
   *unrealized* base asset yield.

2. A harvest redeems the receipts backing all unrealized yield, swaps the
   base asset into the payout asset and stores the conversion ratio.
   Unrealized yield that predates the harvest is converted lazily, at
   that harvest's ratio, the next time the position is settled.

Yield accrued after the latest harvest stays unrealized until the next one.

Harvests redeem receipts, so after a harvest each position holds fewer
receipts than before. Positions keep track of the harvests they have been
settled against and are rebased to
``principal * RATE_PRECISION / harvest_rate`` receipts when they catch up.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional

from yield_vault.balances import Account
from yield_vault.constants import BPS_BASE, DEFAULT_RATE_TOLERANCE_BPS, PAYOUT_SCALE, RATE_PRECISION
from yield_vault.errors import InsufficientFunds, InsufficientStake, RateRegression, ZeroAmount
from yield_vault.fixed_point import mul_div_ceil, mul_div_floor
from yield_vault.positions import PositionStore, UserPosition

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class HarvestRecord:
    """One completed harvest."""

    #: Yield-per-unit accumulator at the harvest
    yield_per_unit: int

    #: Exchange rate the receipts were redeemed at
    rate: int

    #: Payout asset per converted base asset unit, times :py:data:`PAYOUT_SCALE`
    payout_ratio: int

    #: Base asset redeemed and sold
    converted: int

    #: Payout asset received
    payout: int

    #: Receipt tokens redeemed
    receipts_redeemed: int


class TwoStageHarvestLedger:
    """Receipts, principal and staged yield of a harvest vault."""

    def __init__(self, vault_id: str, rate_tolerance_bps: int = DEFAULT_RATE_TOLERANCE_BPS):
        assert 0 <= rate_tolerance_bps < BPS_BASE, f"Bad tolerance: {rate_tolerance_bps}"
        self.positions = PositionStore(vault_id)
        self.rate_tolerance_bps = rate_tolerance_bps

        #: Exchange rate at the last read, 0 before the first read
        self.rate_snapshot = 0

        #: Sum of exchange rate increases, divide by RATE_PRECISION to get yield per receipt
        self.yield_per_unit = 0

        #: Sum of position receipts
        self.total_stake = 0

        #: Base asset deposited and not withdrawn
        self.total_principal = 0

        #: Upper bound of the receipts earning yield, positions rebase lazily
        self.accruing_stake = 0

        #: Upper bound of the unrealized yield positions accrued since the last harvest
        self.accrued_unrealized = 0

        #: All harvests, oldest first
        self.harvests: list[HarvestRecord] = []

    @property
    def last_harvest(self) -> HarvestRecord | None:
        return self.harvests[-1] if self.harvests else None

    @property
    def last_harvest_yield_per_unit(self) -> int:
        return self.harvests[-1].yield_per_unit if self.harvests else 0

    @property
    def last_harvest_payout_ratio(self) -> int:
        return self.harvests[-1].payout_ratio if self.harvests else 0

    def observe_rate(self, rate: Optional[int]) -> int:
        """Stage 1: fold a fresh exchange rate read into the accumulator.

        :param rate:
            Exchange rate, or ``None`` if the lending protocol has no rate,
            e.g. no receipts circulate. The snapshot is then reset to 1.0
            without a regression check or any yield.

        :return:
            Accumulator increase

        :raise RateRegression:
            Rate dropped by more than the tolerance since the last read
        """
        if rate is None:
            self.rate_snapshot = RATE_PRECISION
            return 0

        increase = 0
        if self.rate_snapshot > 0:
            floor_rate = mul_div_floor(self.rate_snapshot, BPS_BASE - self.rate_tolerance_bps, BPS_BASE)
            if rate < floor_rate:
                raise RateRegression(f"Exchange rate fell from {self.rate_snapshot} to {rate}, floor {floor_rate}")
            if rate > self.rate_snapshot:
                increase = rate - self.rate_snapshot
                self.yield_per_unit += increase
                self.accrued_unrealized += mul_div_ceil(self.accruing_stake, increase, RATE_PRECISION)
        self.rate_snapshot = rate
        return increase

    def open(self, account: Account) -> UserPosition:
        return self.positions.open(account, snapshot=self.yield_per_unit, harvest_epoch=len(self.harvests))

    def _accrue(self, position: UserPosition, yield_per_unit: int):
        if position.stake > 0 and yield_per_unit > position.snapshot:
            position.unrealized += mul_div_floor(position.stake, yield_per_unit - position.snapshot, RATE_PRECISION)
        if yield_per_unit > position.snapshot:
            position.snapshot = yield_per_unit

    def _catch_up(self, position: UserPosition) -> int:
        """Settle a position against unseen harvests and the live accumulator.

        :return:
            Change in the position stake from rebasing
        """
        stake_delta = 0
        for harvest in self.harvests[position.harvest_epoch :]:
            self._accrue(position, harvest.yield_per_unit)

            # Stage 3, dust that converts to nothing is gone with the harvest
            if position.unrealized > 0:
                position.claimable += mul_div_floor(position.unrealized, harvest.payout_ratio, PAYOUT_SCALE)
                position.unrealized = 0

            rebased = mul_div_floor(position.principal, RATE_PRECISION, harvest.rate)
            if rebased < position.stake:
                stake_delta -= position.stake - rebased
                position.stake = rebased

        position.harvest_epoch = len(self.harvests)
        self._accrue(position, self.yield_per_unit)
        return stake_delta

    def settle(self, account: Account) -> UserPosition:
        """Bring a position up to date with harvests and the accumulator."""
        position = self.positions.get(account)
        self.total_stake += self._catch_up(position)
        logger.debug("Settled %s: unrealized %d, claimable %d", account, position.unrealized, position.claimable)
        return position

    def preview(self, account: Account) -> UserPosition | None:
        """Settled copy of a position, ledger state is not touched."""
        position = self.positions.find(account)
        if position is None:
            return None
        preview = dataclasses.replace(position)
        self._catch_up(preview)
        return preview

    def pending(self, account: Account) -> tuple[int, int]:
        """
        :return:
            Tuple (unrealized base asset yield, claimable payout)
        """
        preview = self.preview(account)
        if preview is None:
            return 0, 0
        return preview.unrealized, preview.claimable

    def credit(self, account: Account, receipts: int, principal: int) -> UserPosition:
        position = self.settle(account)
        position.stake += receipts
        position.principal += principal
        self.total_stake += receipts
        self.total_principal += principal
        self.accruing_stake += receipts
        return position

    def debit(self, account: Account, principal: int, receipts: int) -> UserPosition:
        """Take principal and the receipts backing it out of a position.

        Withdrawing the whole principal drops the whole stake. Receipts left
        over after the redemption stay in the vault and are picked up by the
        next harvest.
        """
        position = self.settle(account)
        if principal <= 0:
            raise ZeroAmount("Nothing to withdraw")
        if principal > position.principal:
            raise InsufficientFunds(f"{account} has {position.principal} principal, tried to withdraw {principal}")
        assert receipts <= position.stake, f"Redeeming {receipts}, stake {position.stake}"

        if principal == position.principal:
            receipts = position.stake

        position.principal -= principal
        position.stake -= receipts
        self.total_principal -= principal
        self.total_stake -= receipts
        self.accruing_stake -= min(receipts, self.accruing_stake)
        return position

    def take_claimable(self, account: Account) -> int:
        position = self.settle(account)
        claimable = position.claimable
        position.claimable = 0
        return claimable

    def record_harvest(self, rate: int, converted: int, payout: int, receipts_redeemed: int) -> HarvestRecord:
        """Stage 2: store the outcome of a harvest.

        :param rate:
            Exchange rate at the harvest

        :param converted:
            Base asset sold

        :param payout:
            Payout asset received for it

        :raise InsufficientStake:
            No position has unrealized yield to convert
        """
        if self.accrued_unrealized == 0:
            raise InsufficientStake("No depositor yield to convert")
        assert converted > 0, "Nothing was converted"

        # Positions convert at most accrued_unrealized, claims never exceed the payout
        record = HarvestRecord(
            yield_per_unit=self.yield_per_unit,
            rate=rate,
            payout_ratio=mul_div_floor(payout, PAYOUT_SCALE, max(converted, self.accrued_unrealized)),
            converted=converted,
            payout=payout,
            receipts_redeemed=receipts_redeemed,
        )
        self.harvests.append(record)
        self.accruing_stake = min(self.total_stake, mul_div_floor(self.total_principal, RATE_PRECISION, rate))
        self.accrued_unrealized = 0
        logger.info("Harvest #%d: %d base -> %d payout, ratio %d", len(self.harvests), converted, payout, record.payout_ratio)
        return record

    def close(self, account: Account) -> UserPosition:
        """Settle and drop the position.

        Unrealized yield is forfeited.

        :return:
            The final settled position
        """
        position = self.settle(account)
        self.total_stake -= position.stake
        self.total_principal -= position.principal
        self.accruing_stake -= min(position.stake, self.accruing_stake)
        self.accrued_unrealized -= min(position.unrealized, self.accrued_unrealized)
        self.positions.close(account)
        if position.unrealized:
            logger.info("%s forfeits %d unrealized yield on close", account, position.unrealized)
        return position
