"""Default pool and engine-wide configuration."""

from dataclasses import dataclass, field

from stablepool.fees import FeeConfig
from stablepool.math.fixed_point import UNIT
from stablepool.midpoint import Midpoint
from stablepool.types import AmplificationConfig

# Maximum number of principals in the admin set, deployer included
MAX_ADMINS = 5


@dataclass(frozen=True)
class PoolConfig:
    """Parameters a pool is created with.

    Attributes:
        initial_balance_x: Raw X seeded at creation
        initial_balance_y: Raw Y seeded at creation
        burn_amount: LP shares locked forever at creation
        midpoint: Target X/Y rate
        fees: Swap and liquidity fee rates
        amplification: Curve coefficient and convergence threshold
        fee_address: Recipient of protocol fees
        uri: Free-form pool metadata URI
        imbalanced_withdraws: If False, only proportional withdrawals are allowed
    """

    initial_balance_x: int = 10_000_000 * UNIT
    initial_balance_y: int = 10_000_000 * UNIT
    burn_amount: int = 1000
    midpoint: Midpoint = field(default_factory=lambda: Midpoint(1_100_000, 1_000_000))
    fees: FeeConfig = field(default_factory=FeeConfig)
    amplification: AmplificationConfig = field(
        default_factory=lambda: AmplificationConfig(coefficient=100, convergence_threshold=2)
    )
    fee_address: str = "protocol"
    uri: str = ""
    imbalanced_withdraws: bool = True


@dataclass(frozen=True)
class CoreConfig:
    """Engine-wide settings shared by every pool.

    Attributes:
        minimum_total_shares: Floor on a pool's outstanding LP supply
        minimum_burnt_shares: Floor on the shares locked at creation
        public_pool_creation: If True, any caller may create a pool
    """

    minimum_total_shares: int = 10_000
    minimum_burnt_shares: int = 1_000
    public_pool_creation: bool = False


# Default configuration instances
DEFAULT_POOL_CONFIG = PoolConfig()
DEFAULT_CORE_CONFIG = CoreConfig()
