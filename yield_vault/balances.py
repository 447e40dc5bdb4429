"""In-memory asset holdings.

:py:class:`AssetLedger` stands for the host chain: vaults, pools, lending
markets and users all hold assets here, and vaults measure swap and
redemption results as before/after deltas of their own balances.
"""

import logging
from collections import Counter
from typing import Hashable

from yield_vault.errors import InsufficientFunds, ZeroAmount

logger = logging.getLogger(__name__)


#: Account identifier, e.g. a hex address or any hashable name
Account = Hashable

#: Asset identifier, e.g. a token address or an ASA id
AssetId = Hashable


class AssetLedger:
    """Balances of every ``(holder, asset)`` pair.

    - Missing entries read as zero
    - Transfers never create negative balances
    """

    def __init__(self):
        self.balances: Counter = Counter()

    def balance_of(self, holder: Account, asset: AssetId) -> int:
        return self.balances[(holder, asset)]

    def mint(self, holder: Account, asset: AssetId, amount: int):
        """Create new units out of thin air.

        Used for airdrops, interest accrual and test setup.
        """
        assert type(amount) == int and amount >= 0, f"Bad amount: {amount}"
        self.balances[(holder, asset)] += amount

    def burn(self, holder: Account, asset: AssetId, amount: int):
        assert type(amount) == int and amount >= 0, f"Bad amount: {amount}"
        available = self.balance_of(holder, asset)
        if amount > available:
            raise InsufficientFunds(f"{holder} cannot burn {amount} of {asset}, has {available}")
        self.balances[(holder, asset)] = available - amount

    def transfer(self, sender: Account, receiver: Account, asset: AssetId, amount: int):
        """Move units between holders.

        :raise ZeroAmount:
            Zero transfers are refused

        :raise InsufficientFunds:
            Sender does not have enough
        """
        assert type(amount) == int, f"Bad amount: {amount}"
        if amount <= 0:
            raise ZeroAmount(f"Transfer of {amount} {asset} from {sender} to {receiver}")

        available = self.balance_of(sender, asset)
        if amount > available:
            raise InsufficientFunds(f"{sender} has {available} {asset}, tried to send {amount}")

        self.balances[(sender, asset)] = available - amount
        self.balances[(receiver, asset)] += amount
        logger.debug("Transfer %d %s %s -> %s", amount, asset, sender, receiver)

    def __repr__(self):
        held = {k: v for k, v in self.balances.items() if v}
        return f"<AssetLedger {held}>"
