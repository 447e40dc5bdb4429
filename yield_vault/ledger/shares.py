"""Share ledger.

Depositors hold shares of a pool of the base asset. Yield converted back
into the base asset is added to the pool without minting shares, so the
value of every share goes up and yield compounds automatically.
"""

import logging

from yield_vault.balances import Account
from yield_vault.constants import PERCENT_BASE, SCALE
from yield_vault.errors import InsufficientFunds, ZeroAmount
from yield_vault.fixed_point import mul_div_floor
from yield_vault.positions import PositionStore, UserPosition

logger = logging.getLogger(__name__)


class ShareLedger:
    """Shares and pooled value of a compounding vault."""

    def __init__(self, vault_id: str):
        self.positions = PositionStore(vault_id)
        self.total_shares = 0
        self.total_value = 0

    def to_shares(self, amount: int) -> int:
        """How many shares ``amount`` of base asset buys at the current price.

        The first deposit gets shares one-to-one.
        """
        if self.total_shares == 0:
            return amount
        return mul_div_floor(amount, self.total_shares, self.total_value)

    def to_value(self, shares: int) -> int:
        """What ``shares`` redeem for at the current price."""
        if self.total_shares == 0:
            return 0
        return mul_div_floor(shares, self.total_value, self.total_shares)

    def share_price(self) -> int:
        """Base asset per share, times :py:data:`yield_vault.constants.SCALE`."""
        if self.total_shares == 0:
            return SCALE
        return mul_div_floor(self.total_value, SCALE, self.total_shares)

    def open(self, account: Account) -> UserPosition:
        return self.positions.open(account)

    def shares_of(self, account: Account) -> int:
        position = self.positions.find(account)
        return position.stake if position else 0

    def mint(self, account: Account, amount: int) -> int:
        """Deposit ``amount`` and issue shares for it.

        :return:
            Shares minted

        :raise ZeroAmount:
            Deposit too small to buy a single share
        """
        position = self.positions.get(account)
        shares = self.to_shares(amount)
        if shares == 0:
            raise ZeroAmount(f"Deposit of {amount} mints zero shares")
        position.stake += shares
        self.total_shares += shares
        self.total_value += amount
        return shares

    def burn(self, account: Account, shares: int) -> int:
        """Redeem shares for their current value.

        :return:
            Base asset amount to pay out
        """
        position = self.positions.get(account)
        if shares <= 0:
            raise ZeroAmount("Nothing to withdraw")
        if shares > position.stake:
            raise InsufficientFunds(f"{account} has {position.stake} shares, tried to redeem {shares}")
        value = self.to_value(shares)
        if value == 0:
            raise ZeroAmount(f"{shares} shares are worth nothing")
        position.stake -= shares
        self.total_shares -= shares
        self.total_value -= value
        return value

    def compound(self, proceeds: int, operator_fee_percent: int) -> tuple[int, int]:
        """Add converted yield to the pool.

        :param proceeds:
            Base asset gained

        :param operator_fee_percent:
            Operator cut in whole percents

        :return:
            Tuple (operator cut, vault cut)
        """
        operator_cut = mul_div_floor(proceeds, operator_fee_percent, PERCENT_BASE)
        vault_cut = proceeds - operator_cut
        self.total_value += vault_cut
        logger.info("Compounded %d, operator cut %d, share price now %d", vault_cut, operator_cut, self.share_price())
        return operator_cut, vault_cut

    def close(self, account: Account) -> int:
        """Burn all shares and drop the position.

        :return:
            Base asset amount to pay out
        """
        position = self.positions.get(account)
        value = 0
        if position.stake > 0:
            value = self.to_value(position.stake)
            self.total_shares -= position.stake
            self.total_value -= value
        self.positions.close(account)
        return value
