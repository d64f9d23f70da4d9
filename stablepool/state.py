"""Pool state snapshot consumed by the pricing engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from stablepool.fees import FeeConfig, FeeTotals
from stablepool.midpoint import Midpoint, Rounding, to_rate_adjusted
from stablepool.stable_math import calculate_invariant
from stablepool.types import AmplificationConfig, LPSupply, ReserveState


@dataclass(frozen=True)
class PoolState:
    """Everything the swap and liquidity engines read.

    Engine functions take a PoolState and return quotes carrying the next
    PoolState; they never mutate their input.
    """

    reserves: ReserveState
    midpoint: Midpoint
    fees: FeeConfig
    amplification: AmplificationConfig
    lp_supply: LPSupply
    fee_totals: FeeTotals = field(default_factory=FeeTotals)

    @property
    def amp(self) -> int:
        return self.amplification.coefficient

    @property
    def threshold(self) -> int:
        return self.amplification.convergence_threshold

    def adjusted_balances(self) -> tuple[int, int]:
        """(x, y) with y converted into X-space, rounded down."""
        return (
            self.reserves.balance_x,
            to_rate_adjusted(self.reserves.balance_y, self.midpoint, Rounding.DOWN),
        )

    def invariant(self) -> int:
        """Current invariant D over rate-adjusted balances."""
        x, y = self.adjusted_balances()
        return calculate_invariant(self.amp, x, y, self.threshold)
