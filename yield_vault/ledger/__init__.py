"""Yield accounting models.

- :py:mod:`yield_vault.ledger.accumulator`: yield-per-unit accumulator, payout in a separate asset
- :py:mod:`yield_vault.ledger.shares`: share price, yield compounds into the base asset
- :py:mod:`yield_vault.ledger.harvest`: lending exchange rate yield, converted in discrete harvests
"""
