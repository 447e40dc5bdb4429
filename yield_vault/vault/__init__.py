"""Vault front-ends.

- :py:class:`yield_vault.vault.accumulator_vault.AccumulatorVault`
- :py:class:`yield_vault.vault.compounding_vault.CompoundingVault`
- :py:class:`yield_vault.vault.harvest_vault.HarvestVault`
"""
