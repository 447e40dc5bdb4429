"""Lending protocol interface and an in-memory lending market.

The lending protocol issues receipt tokens against base asset deposits.
Its exchange rate ``total_deposits / circulating_receipts`` only grows as
interest accrues, which is where the harvest vault's yield comes from.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from yield_vault.balances import Account, AssetId, AssetLedger
from yield_vault.constants import RATE_PRECISION
from yield_vault.errors import InsufficientFunds, ZeroAmount
from yield_vault.fixed_point import mul_div_floor

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class LendingState:
    """Raw lending protocol state.

    Fields are missing if the protocol has not initialised them
    or the read failed.
    """

    #: Base asset held by the protocol, including accrued interest
    total_deposits: Optional[int] = None

    #: Receipt tokens in circulation
    circulating_receipts: Optional[int] = None


class LendingStateReader(ABC):
    """Anything we can read the lending exchange rate inputs from."""

    @abstractmethod
    def read_lending_state(self) -> LendingState:
        """Read current deposits and receipt supply."""


class ExternalLendingProtocol(LendingStateReader):
    """A lending protocol we can deposit to and redeem from."""

    #: Account assets are sent to before :py:meth:`deposit` and :py:meth:`redeem`
    account: Account

    #: Asset lent out
    base_asset: AssetId

    #: Asset issued to lenders
    receipt_asset: AssetId

    @abstractmethod
    def deposit(self, assets: AssetLedger, depositor: Account, amount: int) -> int:
        """Lend base asset already sent to :py:attr:`account`.

        :return:
            Receipts issued to the depositor
        """

    @abstractmethod
    def redeem(self, assets: AssetLedger, redeemer: Account, receipts: int) -> int:
        """Redeem receipts already sent to :py:attr:`account`.

        :return:
            Base asset paid to the redeemer
        """


def fetch_exchange_rate(reader: LendingStateReader) -> Optional[int]:
    """Get the receipt to base asset exchange rate.

    - Scaled by :py:data:`yield_vault.constants.RATE_PRECISION`
    - ``None`` when the protocol state is not there yet
      or no receipts circulate, so there is no rate to compare against

    :return:
        Base asset units per receipt, times ``RATE_PRECISION``, or ``None``
    """
    state = reader.read_lending_state()
    if state.total_deposits is None or state.circulating_receipts is None:
        logger.warning("Lending state not available from %s", reader)
        return None

    if state.circulating_receipts == 0:
        return None

    return mul_div_floor(state.total_deposits, RATE_PRECISION, state.circulating_receipts)


class SimulatedLendingMarket(ExternalLendingProtocol):
    """Single-asset lending market with a manually accrued rate.

    Receipts are minted on deposit and burnt on redeem.
    """

    def __init__(self, account: Account, base_asset: AssetId, receipt_asset: AssetId):
        self.account = account
        self.base_asset = base_asset
        self.receipt_asset = receipt_asset
        self.total_deposits = 0
        self.circulating_receipts = 0

    def __repr__(self):
        return f"<SimulatedLendingMarket deposits:{self.total_deposits} receipts:{self.circulating_receipts}>"

    def read_lending_state(self) -> LendingState:
        return LendingState(
            total_deposits=self.total_deposits,
            circulating_receipts=self.circulating_receipts,
        )

    def get_current_rate(self) -> int:
        """Rate new deposits and redemptions use, 1.0 for an empty market."""
        rate = fetch_exchange_rate(self)
        return RATE_PRECISION if rate is None else rate

    def deposit(self, assets: AssetLedger, depositor: Account, amount: int) -> int:
        if amount <= 0:
            raise ZeroAmount("Deposit amount must be positive")

        receipts = mul_div_floor(amount, RATE_PRECISION, self.get_current_rate())
        if receipts == 0:
            raise ZeroAmount(f"Deposit of {amount} mints zero receipts")

        self.total_deposits += amount
        self.circulating_receipts += receipts
        assets.mint(depositor, self.receipt_asset, receipts)
        return receipts

    def redeem(self, assets: AssetLedger, redeemer: Account, receipts: int) -> int:
        if receipts <= 0:
            raise ZeroAmount("Redeem amount must be positive")
        if receipts > self.circulating_receipts:
            raise InsufficientFunds(f"Redeeming {receipts}, only {self.circulating_receipts} circulating")

        amount = mul_div_floor(receipts, self.get_current_rate(), RATE_PRECISION)
        if amount == 0:
            raise ZeroAmount(f"Redeeming {receipts} receipts returns nothing")
        if amount > self.total_deposits:
            raise InsufficientFunds(f"Insufficient protocol reserves for {amount}")

        self.total_deposits -= amount
        self.circulating_receipts -= receipts
        assets.burn(self.account, self.receipt_asset, receipts)
        assets.transfer(self.account, redeemer, self.base_asset, amount)
        return amount

    def accrue_interest(self, assets: AssetLedger, amount: int):
        """Simulate borrowers paying interest.

        The rate goes up because deposits grow while receipts stay put.
        """
        assets.mint(self.account, self.base_asset, amount)
        self.total_deposits += amount
        logger.info("Accrued %d interest, rate now %d", amount, self.get_current_rate())

    def realize_loss(self, assets: AssetLedger, amount: int):
        """Simulate bad debt, pushing the rate down."""
        assets.burn(self.account, self.base_asset, amount)
        self.total_deposits -= amount
