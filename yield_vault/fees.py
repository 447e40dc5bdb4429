"""Fee splits."""

from yield_vault.constants import BPS_BASE, PERCENT_BASE
from yield_vault.fixed_point import mul_div_floor


def split_creator_fee(total: int, fee_percent: int) -> tuple[int, int]:
    """Split converted yield between the creator and depositors.

    Rounding favours depositors.

    :return:
        Tuple (creator cut, depositor cut)
    """
    creator_cut = mul_div_floor(total, fee_percent, PERCENT_BASE)
    return creator_cut, total - creator_cut


def deduct_bps_fee(amount: int, fee_bps: int) -> tuple[int, int]:
    """Take a basis point fee off an amount.

    :return:
        Tuple (amount after fee, fee)
    """
    if fee_bps == 0:
        return amount, 0
    fee = mul_div_floor(amount, fee_bps, BPS_BASE)
    return amount - fee, fee
