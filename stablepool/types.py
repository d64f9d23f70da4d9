"""Core state dataclasses for a stableswap pool.

These are immutable snapshots: engine functions read them and return new
instances, and a pool commits by swapping its snapshot for the new one.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from stablepool.errors import InvalidAmplification, InvalidConvergenceThreshold


class Asset(str, Enum):
    """One of the two pool assets."""

    X = "x"
    Y = "y"

    @property
    def other(self) -> Asset:
        return Asset.Y if self is Asset.X else Asset.X


class SwapDirection(str, Enum):
    """Which asset is sold into the pool."""

    X_FOR_Y = "x_for_y"
    Y_FOR_X = "y_for_x"

    @property
    def asset_in(self) -> Asset:
        return Asset.X if self is SwapDirection.X_FOR_Y else Asset.Y

    @property
    def asset_out(self) -> Asset:
        return self.asset_in.other


class PoolStatus(str, Enum):
    """Pool lifecycle state."""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    PAUSED = "paused"


@dataclass(frozen=True)
class ReserveState:
    """Raw pool balances, in each asset's minor unit."""

    balance_x: int
    balance_y: int

    def __post_init__(self) -> None:
        if self.balance_x < 0 or self.balance_y < 0:
            raise ValueError(f"Reserves cannot be negative: ({self.balance_x}, {self.balance_y})")

    def get(self, asset: Asset) -> int:
        return self.balance_x if asset is Asset.X else self.balance_y

    def with_balance(self, asset: Asset, balance: int) -> ReserveState:
        if asset is Asset.X:
            return replace(self, balance_x=balance)
        return replace(self, balance_y=balance)


@dataclass(frozen=True)
class AmplificationConfig:
    """Curve shape parameters.

    Attributes:
        coefficient: Amplification A; higher is flatter near the midpoint
        convergence_threshold: Largest step between Newton iterations
            accepted as converged, in invariant units
    """

    coefficient: int
    convergence_threshold: int

    def __post_init__(self) -> None:
        validate_amplification(self.coefficient)
        validate_convergence_threshold(self.convergence_threshold)


@dataclass(frozen=True)
class LPSupply:
    """LP share supply.

    burnt_shares were minted at creation to nobody and can never be
    withdrawn; they keep the pool from being drained to zero.
    """

    total_shares: int
    burnt_shares: int

    @property
    def withdrawable_shares(self) -> int:
        return self.total_shares - self.burnt_shares


def validate_amplification(coefficient: int) -> None:
    """Raises InvalidAmplification if A < 1."""
    if coefficient < 1:
        raise InvalidAmplification(f"Amplification coefficient must be >= 1, got {coefficient}")


def validate_convergence_threshold(threshold: int) -> None:
    """Raises InvalidConvergenceThreshold if threshold < 1."""
    if threshold < 1:
        raise InvalidConvergenceThreshold(f"Convergence threshold must be >= 1, got {threshold}")
