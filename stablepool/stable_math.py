"""Two-coin StableSwap math.

Core solver functions for the stableswap invariant over rate-adjusted
balances. Uses Newton-Raphson iteration for both the invariant D and the
inverse problem (one balance given the other and D).

The invariant for n = 2 coins and amplification A:

    Ann * (x + y) + D = Ann * D + D^3 / (4 * x * y),   Ann = A * n^n

All calculations use SafeInt. The iteration stops once two successive
estimates differ by at most the pool's convergence threshold; if that does
not happen within _STABLE_MAX_ITERATIONS rounds the call fails rather than
settle on an imprecise value.
"""

from __future__ import annotations

from stablepool.errors import ConvergenceFailure, ZeroAmount, ZeroBalanceError
from stablepool.safe_int import S
from stablepool.types import validate_amplification, validate_convergence_threshold

N_COINS = 2

# Maximum iterations for Newton-Raphson convergence
_STABLE_MAX_ITERATIONS = 255


def _check_params(amp: int, threshold: int) -> None:
    validate_amplification(amp)
    validate_convergence_threshold(threshold)


def calculate_invariant(amp: int, x: int, y: int, threshold: int) -> int:
    """Calculate StableSwap invariant D using Newton-Raphson iteration.

    Algorithm:
        1. Initial guess: D = x + y
        2. D_p = D^3 / (4 * x * y), built up one balance at a time
        3. D = (Ann * S + 2 * D_p) * D / ((Ann - 1) * D + 3 * D_p)
        4. Stop when |D_new - D_old| <= threshold

    Args:
        amp: Amplification coefficient A (unscaled, >= 1)
        x: Rate-adjusted X balance
        y: Rate-adjusted Y balance
        threshold: Convergence threshold, in invariant units

    Returns:
        The invariant D

    Raises:
        ZeroBalanceError: If exactly one balance is zero, or either is negative
        ConvergenceFailure: If iteration doesn't converge
    """
    _check_params(amp, threshold)

    if x == 0 and y == 0:
        return 0
    if x <= 0 or y <= 0:
        raise ZeroBalanceError(f"Invariant undefined for balances ({x}, {y})")

    sum_balances = S(x) + S(y)
    ann = S(amp) * S(N_COINS**N_COINS)
    d_prev = sum_balances

    for _ in range(_STABLE_MAX_ITERATIONS):
        # d_p = D^(n+1) / (n^n * prod(balances))
        d_p = d_prev
        for bal in (x, y):
            d_p = (d_p * d_prev) // (S(N_COINS) * S(bal))

        numerator = (ann * sum_balances + d_p * S(N_COINS)) * d_prev
        denominator = (ann - S(1)) * d_prev + S(N_COINS + 1) * d_p
        d_new = numerator // denominator

        if d_new.abs_diff(d_prev) <= threshold:
            return d_new.to_uint128()

        d_prev = d_new

    raise ConvergenceFailure(
        f"Stable invariant did not converge after {_STABLE_MAX_ITERATIONS} iterations"
    )


def get_y(amp: int, x: int, invariant: int, threshold: int) -> int:
    """Solve for the counterpart balance given the other balance and D.

    Newton iteration on y^2 + (b - D) * y = c with

        c = D^3 / (4 * x * Ann)
        b = x + D / Ann

    starting from y = D. Every division rounds up so the returned balance
    is never below the exact solution: the pool keeps the rounding unit.

    Args:
        amp: Amplification coefficient A
        x: The known rate-adjusted balance
        invariant: The invariant D to preserve
        threshold: Convergence threshold

    Returns:
        The rate-adjusted counterpart balance

    Raises:
        ZeroBalanceError: If x is not positive
        ConvergenceFailure: If iteration doesn't converge or degenerates
    """
    _check_params(amp, threshold)

    if x <= 0:
        raise ZeroBalanceError("Known balance must be positive")

    d = S(invariant)
    ann = S(amp) * S(N_COINS**N_COINS)

    c = (d * d).ceiling_div(S(x) * S(N_COINS))
    c = (c * d).ceiling_div(ann * S(N_COINS))
    b = S(x) + d // ann

    y_prev = d
    for _ in range(_STABLE_MAX_ITERATIONS):
        numerator = y_prev * y_prev + c
        total = S(2) * y_prev + b
        if total <= d:
            raise ConvergenceFailure("Denominator became non-positive")
        y_new = numerator.ceiling_div(total - d)

        if y_new.abs_diff(y_prev) <= threshold:
            return y_new.to_uint128()

        y_prev = y_new

    raise ConvergenceFailure(
        f"Stable get_y did not converge after {_STABLE_MAX_ITERATIONS} iterations"
    )


def calc_out_given_in(
    amp: int,
    threshold: int,
    balance_in: int,
    balance_out: int,
    amount_in: int,
) -> int:
    """Calculate output for a given input, all in rate-adjusted units.

    Algorithm:
        1. Calculate current invariant D
        2. Add amount_in to balance_in
        3. Solve for new balance_out given D
        4. Return old_balance_out - new_balance_out (0 if the curve rounds past it)

    Fees are applied by the caller after this function.

    Raises:
        ZeroAmount: If amount_in is zero
        ZeroBalanceError: If either balance is zero
        ConvergenceFailure: If either solver doesn't converge
    """
    if amount_in == 0:
        raise ZeroAmount("Swap amount must be positive")
    if balance_in == 0 or balance_out == 0:
        raise ZeroBalanceError("Cannot swap against an empty reserve")

    invariant = calculate_invariant(amp, balance_in, balance_out, threshold)
    new_balance_out = get_y(amp, balance_in + amount_in, invariant, threshold)

    if new_balance_out >= balance_out:
        return 0
    return balance_out - new_balance_out
