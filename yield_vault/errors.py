"""Vault error kinds.

Every vault action is all-or-nothing: any of these escaping an action
rolls the action back, see :py:func:`yield_vault.atomic.atomic`.
"""


class VaultError(Exception):
    """Base class for all vault failures."""


class ArithmeticOverflow(VaultError):
    """Fixed-point result does not fit the native word, or a division by zero."""


class ZeroOutput(VaultError):
    """AMM quote would give nothing out."""


class ExternalStateUnreadable(VaultError):
    """A pool or lending protocol state field could not be read."""


class RateRegression(VaultError):
    """External exchange rate dropped more than the tolerated amount since the last read."""


class SlippageExceeded(VaultError):
    """Requested slippage is above the ceiling, or the realised swap output came in below the minimum."""


class BelowMinimumThreshold(VaultError):
    """Not enough accumulated value to convert or harvest, or a deposit below the minimum."""


class InsufficientStake(VaultError):
    """Distribution attempted while nobody holds stake."""


class Unauthorized(VaultError):
    """Caller is not allowed to run an admin action."""


class ZeroAmount(VaultError):
    """Operation would move zero units."""


class DepositBlocked(VaultError):
    """Deposit refused while undistributed proceeds sit above the threshold.

    Run the distribution first.
    """


class InvalidParameter(VaultError, ValueError):
    """A configuration value or admin parameter is out of its allowed range."""


class InsufficientFunds(VaultError):
    """Holder does not own enough of an asset, or asks for more than their position."""


class PositionNotFound(VaultError):
    """Account has not opted in to the vault."""


class VaultPaused(VaultError):
    """Vault is paused by its creator."""
