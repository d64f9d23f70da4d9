"""Mathematical utilities for the stableswap engine.

This package provides the fixed-point primitives used by every pricing
component:
- mul_div_down / mul_div_up: widened multiply-then-divide with explicit rounding
- bps_of_down / bps_of_up: basis-point shares
"""

from stablepool.math.fixed_point import (
    BPS,
    DECIMALS,
    UNIT,
    bps_of_down,
    bps_of_up,
    ceil_div,
    floor_div,
    from_decimal,
    mul_div_down,
    mul_div_up,
    to_decimal,
)

__all__ = [
    "BPS",
    "DECIMALS",
    "UNIT",
    "bps_of_down",
    "bps_of_up",
    "ceil_div",
    "floor_div",
    "from_decimal",
    "mul_div_down",
    "mul_div_up",
    "to_decimal",
]
