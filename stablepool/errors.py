"""Stableswap engine error classes.

Every failure the engine can report is a subclass of StableswapError.
Errors are raised synchronously and never leave partial state behind:
a pool that raises is exactly as it was before the call.
"""


class StableswapError(Exception):
    """Base error for stableswap engine operations."""

    pass


# =============================================================================
# Arithmetic
# =============================================================================


class ArithmeticFault(StableswapError, ArithmeticError):
    """Base class for fixed-point arithmetic errors."""

    pass


class ArithmeticOverflow(ArithmeticFault):
    """Result does not fit in the engine word, or went below zero."""

    pass


class DivisionByZero(ArithmeticFault):
    """Division by zero."""

    pass


# =============================================================================
# Configuration
# =============================================================================


class InvalidMidpoint(StableswapError):
    """Midpoint numerator and denominator must both be positive."""

    pass


class InvalidAmplification(StableswapError):
    """Amplification coefficient must be at least 1."""

    pass


class InvalidConvergenceThreshold(StableswapError):
    """Convergence threshold must be at least 1."""

    pass


class InvalidFee(StableswapError):
    """Fee must be in basis points, in range [0, 10000)."""

    pass


# =============================================================================
# Solver
# =============================================================================


class ConvergenceFailure(StableswapError):
    """Newton iteration did not reach the convergence threshold."""

    pass


class ZeroBalanceError(StableswapError):
    """Invariant is undefined when exactly one balance is zero."""

    pass


# =============================================================================
# Caller-supplied bounds
# =============================================================================


class ZeroAmount(StableswapError):
    """Operation amount must be positive."""

    pass


class InsufficientOutput(StableswapError):
    """Swap output is below the caller's minimum."""

    pass


class InsufficientLiquidityMinted(StableswapError):
    """Minted LP shares are below the caller's minimum."""

    pass


class InsufficientWithdrawal(StableswapError):
    """Withdrawn amount is below the caller's minimum."""

    pass


class ExcessiveSharesBurned(StableswapError):
    """Shares burned by an imbalanced withdrawal exceed the caller's maximum."""

    pass


class BelowMinimumShares(StableswapError):
    """Operation would leave total shares below the configured floor."""

    pass


# =============================================================================
# Access control
# =============================================================================


class Unauthorized(StableswapError):
    """Caller is not allowed to perform this operation."""

    pass


class DuplicateAdmin(StableswapError):
    """Principal is already an admin."""

    pass


class NotAnAdmin(StableswapError):
    """Principal is not an admin."""

    pass


class AdminLimitReached(StableswapError):
    """Admin set is full."""

    pass


class CannotRemoveDeployer(StableswapError):
    """The deployer is a permanent admin."""

    pass


# =============================================================================
# Pool lifecycle
# =============================================================================


class PoolNotActive(StableswapError):
    """Pool is paused or has not been created."""

    pass


class PoolAlreadyCreated(StableswapError):
    """Pool can only be created once."""

    pass


class ImbalancedWithdrawsDisabled(StableswapError):
    """Pool only accepts proportional withdrawals."""

    pass
