"""Per-account vault positions."""

import logging
from dataclasses import dataclass

from yield_vault.balances import Account
from yield_vault.errors import PositionNotFound

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UserPosition:
    """One account's standing in one vault.

    Not every ledger uses every field.
    """

    #: Units of stake: deposited amount, shares or lending receipts
    stake: int = 0

    #: Global yield-per-unit accumulator value at the last settlement
    snapshot: int = 0

    #: Yield accrued in the base asset, waiting for a harvest to convert it
    unrealized: int = 0

    #: Yield owed to the account in the payout asset
    claimable: int = 0

    #: Base asset deposited and not yet withdrawn
    principal: int = 0

    #: How many harvests this position has been settled against
    harvest_epoch: int = 0


class PositionStore:
    """Positions keyed by ``(vault_id, account)``.

    Accounts opt in explicitly; closing out deletes the record.
    """

    def __init__(self, vault_id: str):
        self.vault_id = vault_id
        self.positions: dict[tuple[str, Account], UserPosition] = {}

    def is_opted_in(self, account: Account) -> bool:
        return (self.vault_id, account) in self.positions

    def open(self, account: Account, snapshot: int = 0, harvest_epoch: int = 0) -> UserPosition:
        """Create an empty position, or return the existing one."""
        key = (self.vault_id, account)
        if key not in self.positions:
            self.positions[key] = UserPosition(snapshot=snapshot, harvest_epoch=harvest_epoch)
            logger.debug("Opened position %s in %s", account, self.vault_id)
        return self.positions[key]

    def get(self, account: Account) -> UserPosition:
        try:
            return self.positions[(self.vault_id, account)]
        except KeyError as e:
            raise PositionNotFound(f"{account} has not opted in to {self.vault_id}") from e

    def find(self, account: Account) -> UserPosition | None:
        return self.positions.get((self.vault_id, account))

    def close(self, account: Account) -> UserPosition:
        position = self.get(account)
        del self.positions[(self.vault_id, account)]
        logger.debug("Closed position %s in %s", account, self.vault_id)
        return position

    def __iter__(self):
        for (_, account), position in self.positions.items():
            yield account, position

    def __len__(self):
        return len(self.positions)
