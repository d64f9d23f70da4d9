"""Midpoint rate model.

Maps raw Y balances into "rate-adjusted" space, where one unit of X and one
rate-adjusted unit of Y are worth the same. The invariant solver only ever
sees rate-adjusted balances; the underlying reserves are never touched.

X is the unit of account and is never adjusted. For Y:

    reversed=False: adjusted = y * numerator / denominator
    reversed=True:  adjusted = y * denominator / numerator

So numerator=1_100_000, denominator=1_000_000, reversed=False prices
1 Y at 1.1 X.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from stablepool.errors import InvalidMidpoint
from stablepool.math.fixed_point import mul_div_down, mul_div_up


class Rounding(Enum):
    """Rounding direction for a rate conversion."""

    DOWN = "down"
    UP = "up"


@dataclass(frozen=True)
class Midpoint:
    """Target exchange rate between X and Y.

    Attributes:
        numerator: Midpoint value (the "midpoint" in pool configuration)
        denominator: Midpoint factor
        reversed: Swap the roles of numerator and denominator
    """

    numerator: int
    denominator: int
    reversed: bool = False

    def __post_init__(self) -> None:
        validate_midpoint(self.numerator, self.denominator)

    @property
    def rate(self) -> tuple[int, int]:
        """(multiplier, divisor) applied to raw Y to reach X-space."""
        if self.reversed:
            return self.denominator, self.numerator
        return self.numerator, self.denominator


def validate_midpoint(numerator: int, denominator: int) -> None:
    """Reject midpoint pairs that would divide by zero at quote time.

    Raises:
        InvalidMidpoint: If either side is not a positive integer
    """
    if numerator <= 0 or denominator <= 0:
        raise InvalidMidpoint(
            f"Midpoint numerator and denominator must be positive, got {numerator}/{denominator}"
        )


def to_rate_adjusted(amount_y: int, midpoint: Midpoint, rounding: Rounding = Rounding.DOWN) -> int:
    """Convert a raw Y amount into X-equivalent units."""
    multiplier, divisor = midpoint.rate
    if rounding is Rounding.UP:
        return mul_div_up(amount_y, multiplier, divisor)
    return mul_div_down(amount_y, multiplier, divisor)


def from_rate_adjusted(
    adjusted_y: int, midpoint: Midpoint, rounding: Rounding = Rounding.DOWN
) -> int:
    """Convert X-equivalent units back into raw Y (inverse of to_rate_adjusted)."""
    multiplier, divisor = midpoint.rate
    if rounding is Rounding.UP:
        return mul_div_up(adjusted_y, divisor, multiplier)
    return mul_div_down(adjusted_y, divisor, multiplier)
