"""Swap engine.

Pure exact-input swap calculation over a PoolState:

    1. Rate-adjust both reserves and the input amount
    2. Hold D fixed, add the input, solve for the new output-side balance
    3. Convert the difference back to raw units (rounded down): gross output
    4. Cut protocol and provider fees from the gross output (rounded up)

The trader receives the net output. The protocol fee leaves the pool for
the fee address; the provider fee stays in the reserves.

Quotes and swaps both go through calc_swap, so a quote always equals the
swap executed against the same state.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import structlog

from stablepool.errors import InsufficientOutput, ZeroAmount
from stablepool.fees import FeeSplit, split_swap_fees
from stablepool.midpoint import Rounding, from_rate_adjusted, to_rate_adjusted
from stablepool.stable_math import calc_out_given_in
from stablepool.state import PoolState
from stablepool.types import Asset, ReserveState, SwapDirection

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapQuote:
    """Result of simulating an exact-input swap.

    Attributes:
        direction: Which asset was sold
        amount_in: Raw input amount
        fees: Gross output and its fee cuts
        reserves_after: Reserves once the swap is settled
    """

    direction: SwapDirection
    amount_in: int
    fees: FeeSplit
    reserves_after: ReserveState

    @property
    def amount_out(self) -> int:
        """Net output paid to the trader."""
        return self.fees.net

    @property
    def gross_out(self) -> int:
        return self.fees.gross


def calc_swap(state: PoolState, direction: SwapDirection, amount_in: int) -> SwapQuote:
    """Calculate the outcome of selling amount_in into the pool.

    Args:
        state: Pool snapshot
        direction: X_FOR_Y or Y_FOR_X
        amount_in: Raw input amount

    Returns:
        SwapQuote with net output, fee split and settled reserves

    Raises:
        ZeroAmount: If amount_in is zero
        InsufficientOutput: If the trade is too small to produce any output,
            or would empty the output reserve
        ConvergenceFailure: If the solver doesn't converge
    """
    if amount_in <= 0:
        raise ZeroAmount(f"Swap amount must be positive, got {amount_in}")

    asset_in = direction.asset_in
    asset_out = direction.asset_out
    x, y = state.adjusted_balances()

    if asset_in is Asset.X:
        balance_in, balance_out = x, y
        adjusted_in = amount_in
    else:
        balance_in, balance_out = y, x
        adjusted_in = to_rate_adjusted(amount_in, state.midpoint, Rounding.DOWN)

    if adjusted_in == 0:
        raise InsufficientOutput(f"Input {amount_in} is below one rate-adjusted unit")

    adjusted_out = calc_out_given_in(state.amp, state.threshold, balance_in, balance_out, adjusted_in)

    if asset_out is Asset.Y:
        gross_out = from_rate_adjusted(adjusted_out, state.midpoint, Rounding.DOWN)
    else:
        gross_out = adjusted_out

    reserve_out = state.reserves.get(asset_out)
    if gross_out >= reserve_out:
        raise InsufficientOutput(f"Output {gross_out} would drain reserve {reserve_out}")

    protocol_fee, provider_fee = state.fees.rates_for(asset_out)
    split = split_swap_fees(gross_out, protocol_fee, provider_fee)
    if split.net == 0:
        raise InsufficientOutput(f"Swap of {amount_in} produces no output after fees")

    reserves_after = state.reserves.with_balance(
        asset_in, state.reserves.get(asset_in) + amount_in
    ).with_balance(asset_out, reserve_out - split.net - split.protocol_fee)

    logger.debug(
        "swap_calculated",
        direction=direction.value,
        amount_in=amount_in,
        gross_out=split.gross,
        amount_out=split.net,
        protocol_fee=split.protocol_fee,
        provider_fee=split.provider_fee,
    )

    return SwapQuote(
        direction=direction,
        amount_in=amount_in,
        fees=split,
        reserves_after=reserves_after,
    )


def apply_swap(state: PoolState, quote: SwapQuote) -> PoolState:
    """Return the state after settling quote."""
    return replace(
        state,
        reserves=quote.reserves_after,
        fee_totals=state.fee_totals.add_swap(quote.direction.asset_out, quote.fees),
    )
