"""Repeated add-then-withdraw liquidity cycles against a pool.

Each cycle deposits an X-only position, immediately burns the minted
shares, and converts the Y received back into X on an external market at
a fixed rate. If the pool could be gamed this way, the X position would
grow from cycle to cycle.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass, field
from decimal import ROUND_FLOOR, Decimal

import structlog

from stablepool.pool import StableswapPool

logger = structlog.get_logger()

DEFAULT_EXTERNAL_RATE = Decimal("1.1")


@dataclass(frozen=True)
class CycleResult:
    """One add/withdraw/rebalance cycle."""

    cycle: int
    deposited_x: int
    lp_minted: int
    withdrawn_x: int
    withdrawn_y: int
    rebalanced_x: int

    @property
    def ending_x(self) -> int:
        return self.withdrawn_x + self.rebalanced_x


@dataclass
class CycleReport:
    """Outcome of a run of cycles."""

    initial_x: int
    cycles: list[CycleResult] = field(default_factory=list)

    @property
    def final_x(self) -> int:
        return self.cycles[-1].ending_x if self.cycles else self.initial_x

    @property
    def total_volume(self) -> int:
        return sum(result.deposited_x for result in self.cycles)

    @property
    def profit_fraction(self) -> Decimal:
        """(final - initial) / initial, in X terms."""
        return (Decimal(self.final_x) - Decimal(self.initial_x)) / Decimal(self.initial_x)


def run_liquidity_cycles(
    pool: StableswapPool,
    amount_x: int,
    cycles: int,
    external_rate: Decimal = DEFAULT_EXTERNAL_RATE,
) -> CycleReport:
    """Run add/withdraw/rebalance cycles, starting from amount_x X.

    Args:
        pool: An ACTIVE pool; it is mutated by every cycle
        amount_x: Starting X position
        cycles: Number of cycles to run
        external_rate: X received per Y on the external market

    Returns:
        CycleReport with one CycleResult per cycle

    Raises:
        ValueError: If amount_x or cycles is not positive
        StableswapError: If the pool rejects a deposit or withdrawal
    """
    if amount_x <= 0:
        raise ValueError(f"amount_x must be positive, got {amount_x}")
    if cycles <= 0:
        raise ValueError(f"cycles must be positive, got {cycles}")

    report = CycleReport(initial_x=amount_x)
    position = amount_x

    for cycle in range(1, cycles + 1):
        lp_minted = pool.add_liquidity(position, 0, min_lp=1)
        withdrawn_x, withdrawn_y = pool.withdraw_liquidity(lp_minted, min_x=0, min_y=0)
        with decimal.localcontext() as ctx:
            ctx.prec = 78
            rebalanced_x = int(
                (Decimal(withdrawn_y) * external_rate).to_integral_value(rounding=ROUND_FLOOR)
            )

        result = CycleResult(
            cycle=cycle,
            deposited_x=position,
            lp_minted=lp_minted,
            withdrawn_x=withdrawn_x,
            withdrawn_y=withdrawn_y,
            rebalanced_x=rebalanced_x,
        )
        report.cycles.append(result)
        logger.debug(
            "liquidity_cycle",
            cycle=cycle,
            deposited_x=position,
            ending_x=result.ending_x,
        )
        position = result.ending_x

    return report
