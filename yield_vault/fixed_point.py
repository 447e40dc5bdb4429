"""Overflow-checked multiply-then-divide.

Every money-affecting multiplication and division in the vaults goes through
:py:func:`mul_div_floor` or :py:func:`mul_div_ceil`.

The native word is an unsigned 64-bit integer. The intermediate product is
computed at full width (Python integers are unbounded), so ``a * b`` never
overflows, but the quotient must fit back into 64 bits.

Example:

.. code-block:: python

    from yield_vault.fixed_point import mul_div_floor, mul_div_ceil

    # 1.5% of 1000 units
    assert mul_div_floor(1000, 150, 10_000) == 15

    # Redeem enough receipts to cover 10 units at rate 1.3
    assert mul_div_ceil(10, 1_000_000, 1_300_000) == 8

"""

from yield_vault.constants import UINT64_MAX
from yield_vault.errors import ArithmeticOverflow


def _check_operands(a: int, b: int, d: int):
    assert type(a) == int, f"Expected int, got {a.__class__}: {a}"
    assert type(b) == int, f"Expected int, got {b.__class__}: {b}"
    assert type(d) == int, f"Expected int, got {d.__class__}: {d}"

    for value in (a, b, d):
        if value < 0 or value > UINT64_MAX:
            raise ArithmeticOverflow(f"Operand out of uint64 range: {value}")

    if d == 0:
        raise ArithmeticOverflow(f"Division by zero: {a} * {b} / 0")


def mul_div_floor(a: int, b: int, d: int) -> int:
    """Compute ``floor(a * b / d)``.

    :param a:
        Multiplicand

    :param b:
        Multiplier

    :param d:
        Divisor

    :return:
        The floored quotient

    :raise ArithmeticOverflow:
        If any operand is outside uint64, ``d`` is zero
        or the quotient does not fit uint64
    """
    _check_operands(a, b, d)
    q = (a * b) // d
    if q > UINT64_MAX:
        raise ArithmeticOverflow(f"Result does not fit uint64: {a} * {b} / {d}")
    return q


def mul_div_ceil(a: int, b: int, d: int) -> int:
    """Compute ``ceil(a * b / d)``.

    Same contract as :py:func:`mul_div_floor`.
    """
    _check_operands(a, b, d)
    q, r = divmod(a * b, d)
    if r:
        q += 1
    if q > UINT64_MAX:
        raise ArithmeticOverflow(f"Result does not fit uint64: {a} * {b} / {d}")
    return q
