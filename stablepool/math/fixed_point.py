"""Fixed-point helpers for 6-decimal token amounts.

All amounts are integers in the asset's minor unit (UNIT = 10^6). Every
helper computes with unbounded intermediates and narrows the final result
to uint128, so products of two reserves never overflow mid-calculation.

Rounding is explicit in every name: ``_down`` floors, ``_up`` ceils. The
engine floors amounts paid out of the pool and ceils amounts charged to
the caller.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from stablepool.safe_int import S

__all__ = [
    "DECIMALS",
    "UNIT",
    "BPS",
    "mul_div_down",
    "mul_div_up",
    "floor_div",
    "ceil_div",
    "bps_of_down",
    "bps_of_up",
    "to_decimal",
    "from_decimal",
]

DECIMALS = 6
UNIT = 10**DECIMALS

# Basis-point denominator for all fee rates
BPS = 10_000


def mul_div_down(a: int, b: int, c: int) -> int:
    """Compute floor(a * b / c).

    Raises:
        DivisionByZero: If c is zero
        ArithmeticOverflow: If the result does not fit in uint128
    """
    return ((S(a) * S(b)) // S(c)).to_uint128()


def mul_div_up(a: int, b: int, c: int) -> int:
    """Compute ceil(a * b / c).

    Raises:
        DivisionByZero: If c is zero
        ArithmeticOverflow: If the result does not fit in uint128
    """
    return (S(a) * S(b)).ceiling_div(S(c)).to_uint128()


def floor_div(a: int, b: int) -> int:
    """Compute floor(a / b), narrowed to uint128."""
    return (S(a) // S(b)).to_uint128()


def ceil_div(a: int, b: int) -> int:
    """Compute ceil(a / b), narrowed to uint128."""
    return S(a).ceiling_div(S(b)).to_uint128()


def bps_of_down(amount: int, bps: int) -> int:
    """Basis-point share of amount, rounded down."""
    return mul_div_down(amount, bps, BPS)


def bps_of_up(amount: int, bps: int) -> int:
    """Basis-point share of amount, rounded up.

    Used for fees: the pool never undercharges by a rounding unit.
    """
    return mul_div_up(amount, bps, BPS)


def to_decimal(amount: int) -> Decimal:
    """Convert a minor-unit amount to Decimal token units for display."""
    return Decimal(amount) / Decimal(UNIT)


def from_decimal(d: Decimal) -> int:
    """Convert Decimal token units to minor units.

    Uses ROUND_HALF_UP for consistent rounding behavior.
    Requires non-negative input (unsigned semantics).
    """
    if d < 0:
        raise ValueError(f"from_decimal requires non-negative input, got {d}")
    scaled = (d * UNIT).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(scaled)
