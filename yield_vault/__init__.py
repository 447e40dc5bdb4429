"""yield_vault package root.

Accounting core for yield-bearing vaults: depositors stake a base asset,
idle balances earn yield externally and the yield is converted through an AMM
and settled back to depositors pro rata.

- :py:mod:`yield_vault.vault` for the three vault front-ends
- :py:mod:`yield_vault.ledger` for the accounting models
- :py:mod:`yield_vault.amm` for quoting and swapping

"""

import sys


#: Minimum required Python version to run this package
MIN_PYTHON_VERSION = (3, 10)


def _check_python_version():
    """Try early abort if the Python version is too old."""

    if sys.version_info < MIN_PYTHON_VERSION:
        raise RuntimeError(f"yield-vault needs Python {MIN_PYTHON_VERSION[0]}.{MIN_PYTHON_VERSION[1]} or later")


_check_python_version()
