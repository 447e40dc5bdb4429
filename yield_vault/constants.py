"""Fixed-point scales and parameter bounds shared by the vaults.

All amounts are integer base units of the respective asset.
"""

#: Largest value a native unsigned 64-bit word can hold
UINT64_MAX = 2**64 - 1

#: Basis point denominator, 10_000 = 100%
BPS_BASE = 10_000

#: Denominator for fees expressed in whole percents
PERCENT_BASE = 100

#: Scale of the accumulator ledger yield-per-unit and share price displays
SCALE = 10**12

#: Precision of the lending protocol exchange rate, 1_000_000 = 1.0
RATE_PRECISION = 10**6

#: Scale of the harvest payout ratio (payout asset units per converted base unit)
PAYOUT_SCALE = 10**12

#: Slippage used for read-only quote previews, 50 bps = 0.5%
QUOTE_PREVIEW_SLIPPAGE_BPS = 50

#: How much the external exchange rate may drop between reads before
#: we consider the lending protocol state broken, 10 bps = 0.1%
DEFAULT_RATE_TOLERANCE_BPS = 10

#
# Accumulator and compounding vault bounds
#

#: Max creator fee in whole percents
MAX_CREATOR_FEE_PERCENT = 6

#: Smallest deposit accepted, 1.0 in 6-decimal units
MIN_DEPOSIT_AMOUNT = 1_000_000

#: Lowest allowed conversion threshold, 0.20 in 6-decimal units
MIN_SWAP_THRESHOLD = 200_000

#: Highest allowed conversion threshold, 50.0 in 6-decimal units
MAX_SWAP_THRESHOLD = 50_000_000

#: Absolute slippage ceiling
MAX_SLIPPAGE_BPS = 10_000

#: A vault's own slippage ceiling must not be set below this
MIN_MAX_SLIPPAGE_BPS = 500

#: Farm emission floor once the farm holds funds, 10%
MIN_FARM_EMISSION_BPS = 1_000

#: Farm emission ceiling, 500%
MAX_FARM_EMISSION_BPS = 50_000

#
# Harvest vault bounds
#

#: Max deposit and withdraw fee
MAX_HARVEST_FEE_BPS = 500

#: Harvest slippage ceiling, 10%
MAX_HARVEST_SLIPPAGE_BPS = 1_000

#: Lowest allowed harvest threshold, 1.0 in 6-decimal units
MIN_HARVEST_THRESHOLD = 1_000_000
