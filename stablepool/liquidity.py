"""Liquidity engine.

Minting is invariant-weighted: a deposit earns shares in proportion to how
much it grows D. Deposits that move the pool away from its current
rate-adjusted ratio pay an imbalance fee on the deviating part, which is
what makes deposit-then-withdraw cycles lossy instead of profitable.

Proportional withdrawals are fee-free. Imbalanced withdrawals name the
amounts to take out and burn shares in proportion to how much they shrink
D, after the same imbalance fee a deposit pays.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import structlog

from stablepool.errors import (
    BelowMinimumShares,
    InsufficientLiquidityMinted,
    ZeroAmount,
    ZeroBalanceError,
)
from stablepool.math.fixed_point import bps_of_up, mul_div_down
from stablepool.midpoint import Rounding, from_rate_adjusted, to_rate_adjusted
from stablepool.stable_math import calculate_invariant
from stablepool.state import PoolState
from stablepool.types import LPSupply, ReserveState

logger = structlog.get_logger()


@dataclass(frozen=True)
class AddLiquidityQuote:
    """Result of simulating a deposit.

    Attributes:
        amount_x: Raw X deposited
        amount_y: Raw Y deposited
        lp_minted: Shares the depositor receives
        fee_x: Imbalance fee on the X side, raw units
        fee_y: Imbalance fee on the Y side, raw units
        invariant_before: D before the deposit
        invariant_after: D after the deposit, net of imbalance fees
        reserves_after: Reserves once the deposit is settled
    """

    amount_x: int
    amount_y: int
    lp_minted: int
    fee_x: int
    fee_y: int
    invariant_before: int
    invariant_after: int
    reserves_after: ReserveState


@dataclass(frozen=True)
class WithdrawQuote:
    """Result of simulating a withdrawal.

    fee_x and fee_y are the imbalance fees left in the pool, raw units;
    both are zero for a proportional withdrawal.
    """

    lp_burned: int
    amount_x: int
    amount_y: int
    reserves_after: ReserveState
    fee_x: int = 0
    fee_y: int = 0


def _imbalance_fees(
    state: PoolState, d0: int, d1: int, new_x: int, new_y: int
) -> tuple[int, int]:
    """Rate-adjusted imbalance fee on each side of a balance change.

    Each side pays liquidity_fee on its distance from the balance it would
    hold had the change kept the pool's current ratio: D1 * old / D0.
    """
    old_x, old_y = state.adjusted_balances()
    fee_rate = state.fees.liquidity_fee
    fee_x = bps_of_up(abs(mul_div_down(d1, old_x, d0) - new_x), fee_rate)
    fee_y = bps_of_up(abs(mul_div_down(d1, old_y, d0) - new_y), fee_rate)
    return fee_x, fee_y


def calc_add_liquidity(state: PoolState, amount_x: int, amount_y: int) -> AddLiquidityQuote:
    """Calculate shares minted for a deposit of (amount_x, amount_y).

    Either amount may be zero (single-sided deposit).

    Algorithm (rate-adjusted space):
        1. D0 = D(old), D1 = D(old + deposit)
        2. For each side: ideal = D1 * old / D0, fee = liquidity_fee * |ideal - new|
        3. D2 = D(new - fees)
        4. lp = total_shares * (D2 - D0) / D0

    The first deposit into an empty pool mints D1 shares and pays no fee.

    Raises:
        ZeroAmount: If both amounts are zero
        InsufficientLiquidityMinted: If the deposit mints no shares, or its
            imbalance fee would consume one side of the pool
        ZeroBalanceError: If the deposit leaves one side empty
        ConvergenceFailure: If the solver doesn't converge
    """
    if amount_x < 0 or amount_y < 0 or amount_x + amount_y == 0:
        raise ZeroAmount(f"Deposit must be positive, got ({amount_x}, {amount_y})")

    amp, threshold = state.amp, state.threshold
    total_shares = state.lp_supply.total_shares

    old_x, old_y = state.adjusted_balances()
    reserves_after = ReserveState(
        balance_x=state.reserves.balance_x + amount_x,
        balance_y=state.reserves.balance_y + amount_y,
    )
    new_x = reserves_after.balance_x
    new_y = to_rate_adjusted(reserves_after.balance_y, state.midpoint, Rounding.DOWN)

    d0 = calculate_invariant(amp, old_x, old_y, threshold)
    d1 = calculate_invariant(amp, new_x, new_y, threshold)

    if total_shares == 0 or d0 == 0:
        return AddLiquidityQuote(
            amount_x=amount_x,
            amount_y=amount_y,
            lp_minted=d1,
            fee_x=0,
            fee_y=0,
            invariant_before=d0,
            invariant_after=d1,
            reserves_after=reserves_after,
        )

    fee_x_adjusted, fee_y_adjusted = _imbalance_fees(state, d0, d1, new_x, new_y)
    if fee_x_adjusted >= new_x or fee_y_adjusted >= new_y:
        raise InsufficientLiquidityMinted(
            f"Imbalance fee on a deposit of ({amount_x}, {amount_y}) exceeds the pool's balance"
        )

    d2 = calculate_invariant(amp, new_x - fee_x_adjusted, new_y - fee_y_adjusted, threshold)

    lp_minted = mul_div_down(total_shares, d2 - d0, d0) if d2 > d0 else 0
    if lp_minted == 0:
        raise InsufficientLiquidityMinted(
            f"Deposit of ({amount_x}, {amount_y}) mints no shares after imbalance fees"
        )

    fee_x = fee_x_adjusted
    fee_y = from_rate_adjusted(fee_y_adjusted, state.midpoint, Rounding.DOWN)

    logger.debug(
        "add_liquidity_calculated",
        amount_x=amount_x,
        amount_y=amount_y,
        lp_minted=lp_minted,
        fee_x=fee_x,
        fee_y=fee_y,
        d0=d0,
        d2=d2,
    )

    return AddLiquidityQuote(
        amount_x=amount_x,
        amount_y=amount_y,
        lp_minted=lp_minted,
        fee_x=fee_x,
        fee_y=fee_y,
        invariant_before=d0,
        invariant_after=d2,
        reserves_after=reserves_after,
    )


def apply_add_liquidity(state: PoolState, quote: AddLiquidityQuote) -> PoolState:
    """Return the state after settling a deposit."""
    return replace(
        state,
        reserves=quote.reserves_after,
        lp_supply=replace(
            state.lp_supply, total_shares=state.lp_supply.total_shares + quote.lp_minted
        ),
        fee_totals=state.fee_totals.add_liquidity(quote.fee_x, quote.fee_y),
    )


def _check_burn(supply: LPSupply, lp_amount: int, minimum_total_shares: int) -> None:
    if lp_amount > supply.withdrawable_shares:
        raise BelowMinimumShares(
            f"Cannot burn {lp_amount} shares, only {supply.withdrawable_shares} are withdrawable"
        )
    if supply.total_shares - lp_amount < minimum_total_shares:
        raise BelowMinimumShares(
            f"Burning {lp_amount} shares leaves {supply.total_shares - lp_amount}, "
            f"minimum is {minimum_total_shares}"
        )


def calc_withdraw_liquidity(
    state: PoolState, lp_amount: int, minimum_total_shares: int
) -> WithdrawQuote:
    """Calculate a proportional withdrawal of lp_amount shares.

    Each side returns reserve * lp_amount / total_shares, rounded down.

    Raises:
        ZeroAmount: If lp_amount is zero
        BelowMinimumShares: If the burn would dip into the locked shares or
            leave fewer than minimum_total_shares outstanding
    """
    if lp_amount <= 0:
        raise ZeroAmount(f"Withdrawal must be positive, got {lp_amount}")

    supply = state.lp_supply
    _check_burn(supply, lp_amount, minimum_total_shares)

    amount_x = mul_div_down(state.reserves.balance_x, lp_amount, supply.total_shares)
    amount_y = mul_div_down(state.reserves.balance_y, lp_amount, supply.total_shares)

    return WithdrawQuote(
        lp_burned=lp_amount,
        amount_x=amount_x,
        amount_y=amount_y,
        reserves_after=ReserveState(
            balance_x=state.reserves.balance_x - amount_x,
            balance_y=state.reserves.balance_y - amount_y,
        ),
    )


def calc_withdraw_imbalanced(
    state: PoolState, amount_x: int, amount_y: int, minimum_total_shares: int
) -> WithdrawQuote:
    """Calculate the shares burned to withdraw exactly (amount_x, amount_y).

    Either amount may be zero (single-sided withdrawal).

    Algorithm (rate-adjusted space):
        1. D0 = D(old), D1 = D(old - withdrawal)
        2. For each side: ideal = D1 * old / D0, fee = liquidity_fee * |ideal - new|
        3. D2 = D(new - fees)
        4. lp = total_shares * (D0 - D2) / D0, rounded down, plus one

    The fees stay in the pool. The extra share keeps rounding on the pool's
    side, so no withdrawal burns fewer shares than its proportional
    equivalent.

    Raises:
        ZeroAmount: If both amounts are zero
        ZeroBalanceError: If the withdrawal, or its imbalance fee, would
            empty one side of the pool
        BelowMinimumShares: If the burn would dip into the locked shares or
            leave fewer than minimum_total_shares outstanding
        ConvergenceFailure: If the solver doesn't converge
    """
    if amount_x < 0 or amount_y < 0 or amount_x + amount_y == 0:
        raise ZeroAmount(f"Withdrawal must be positive, got ({amount_x}, {amount_y})")

    reserves = state.reserves
    if amount_x >= reserves.balance_x or amount_y >= reserves.balance_y:
        raise ZeroBalanceError(
            f"Withdrawal of ({amount_x}, {amount_y}) would empty the pool's "
            f"({reserves.balance_x}, {reserves.balance_y}) reserves"
        )

    amp, threshold = state.amp, state.threshold
    supply = state.lp_supply

    old_x, old_y = state.adjusted_balances()
    reserves_after = ReserveState(
        balance_x=reserves.balance_x - amount_x,
        balance_y=reserves.balance_y - amount_y,
    )
    new_x = reserves_after.balance_x
    new_y = to_rate_adjusted(reserves_after.balance_y, state.midpoint, Rounding.DOWN)

    d0 = calculate_invariant(amp, old_x, old_y, threshold)
    d1 = calculate_invariant(amp, new_x, new_y, threshold)

    fee_x_adjusted, fee_y_adjusted = _imbalance_fees(state, d0, d1, new_x, new_y)
    if fee_x_adjusted >= new_x or fee_y_adjusted >= new_y:
        raise ZeroBalanceError(
            f"Imbalance fee on a withdrawal of ({amount_x}, {amount_y}) exceeds the pool's balance"
        )

    d2 = calculate_invariant(amp, new_x - fee_x_adjusted, new_y - fee_y_adjusted, threshold)

    lp_burned = mul_div_down(supply.total_shares, d0 - d2, d0) + 1
    _check_burn(supply, lp_burned, minimum_total_shares)

    fee_x = fee_x_adjusted
    fee_y = from_rate_adjusted(fee_y_adjusted, state.midpoint, Rounding.DOWN)

    logger.debug(
        "withdraw_imbalanced_calculated",
        amount_x=amount_x,
        amount_y=amount_y,
        lp_burned=lp_burned,
        fee_x=fee_x,
        fee_y=fee_y,
        d0=d0,
        d2=d2,
    )

    return WithdrawQuote(
        lp_burned=lp_burned,
        amount_x=amount_x,
        amount_y=amount_y,
        reserves_after=reserves_after,
        fee_x=fee_x,
        fee_y=fee_y,
    )


def apply_withdraw_liquidity(state: PoolState, quote: WithdrawQuote) -> PoolState:
    """Return the state after settling a withdrawal."""
    return replace(
        state,
        reserves=quote.reserves_after,
        lp_supply=replace(
            state.lp_supply, total_shares=state.lp_supply.total_shares - quote.lp_burned
        ),
        fee_totals=state.fee_totals.add_liquidity(quote.fee_x, quote.fee_y),
    )


def initial_supply(
    state: PoolState, burn_amount: int, minimum_total_shares: int, minimum_burnt_shares: int
) -> LPSupply:
    """Shares minted when a pool is seeded with its initial reserves.

    Total supply is the initial invariant; burn_amount of it is locked.

    Raises:
        ZeroAmount: If either initial balance is zero
        BelowMinimumShares: If the supply or the burn is below its floor
    """
    if state.reserves.balance_x == 0 or state.reserves.balance_y == 0:
        raise ZeroAmount("Pool must be seeded with both assets")

    total_shares = state.invariant()
    if total_shares < minimum_total_shares:
        raise BelowMinimumShares(
            f"Initial shares {total_shares} below minimum {minimum_total_shares}"
        )
    if burn_amount < minimum_burnt_shares:
        raise BelowMinimumShares(
            f"Burn amount {burn_amount} below minimum {minimum_burnt_shares}"
        )
    if burn_amount >= total_shares:
        raise BelowMinimumShares(
            f"Burn amount {burn_amount} must be below initial shares {total_shares}"
        )
    return LPSupply(total_shares=total_shares, burnt_shares=burn_amount)
