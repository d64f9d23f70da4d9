"""Pricing analytics over a pool snapshot.

Everything here is read-only and works in Decimal with a high-precision
context, so ratios of large raw amounts are exact enough to compare.
"""

from __future__ import annotations

import decimal
from decimal import Decimal

from stablepool.math.fixed_point import UNIT, to_decimal
from stablepool.midpoint import Midpoint
from stablepool.state import PoolState
from stablepool.swap import calc_swap
from stablepool.types import Asset, SwapDirection

# 78 digits of precision, enough for any uint128 ratio
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)

# Reference USD prices used to value positions
DEFAULT_PRICE_X_USD = Decimal("1.00")
DEFAULT_PRICE_Y_USD = Decimal("1.10")


def midpoint_rate(midpoint: Midpoint) -> Decimal:
    """X per Y at the configured midpoint."""
    multiplier, divisor = midpoint.rate
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return Decimal(multiplier) / Decimal(divisor)


def fair_output(midpoint: Midpoint, direction: SwapDirection, amount_in: int) -> Decimal:
    """Output amount for amount_in if it traded exactly at the midpoint."""
    rate = midpoint_rate(midpoint)
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        if direction.asset_in is Asset.Y:
            return Decimal(amount_in) * rate
        return Decimal(amount_in) / rate


def price_impact(state: PoolState, direction: SwapDirection, amount_in: int) -> Decimal:
    """Shortfall of the gross output against the midpoint, as a fraction.

    Fees are excluded, so this measures the curve alone: 0 means the trade
    executed at the midpoint, 0.01 means 1% worse.

    Raises:
        Whatever calc_swap raises for this trade
    """
    quote = calc_swap(state, direction, amount_in)
    ideal = fair_output(state.midpoint, direction, amount_in)
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return Decimal(1) - Decimal(quote.gross_out) / ideal


def spot_rate(state: PoolState, probe: int = UNIT) -> Decimal:
    """Effective X per Y for selling a small probe of Y, before fees."""
    quote = calc_swap(state, SwapDirection.Y_FOR_X, probe)
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return Decimal(quote.gross_out) / Decimal(probe)


def usd_value(
    amount_x: int,
    amount_y: int,
    price_x: Decimal = DEFAULT_PRICE_X_USD,
    price_y: Decimal = DEFAULT_PRICE_Y_USD,
) -> Decimal:
    """USD value of raw (amount_x, amount_y) at the given prices."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return to_decimal(amount_x) * price_x + to_decimal(amount_y) * price_y


def value_change(value_in: Decimal, value_out: Decimal) -> Decimal:
    """Relative change from value_in to value_out (negative is a loss)."""
    if value_in == 0:
        raise ValueError("value_in must be non-zero")
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return (value_out - value_in) / value_in
