"""Stableswap pool engine with a configurable midpoint."""

from stablepool.config import (
    DEFAULT_CORE_CONFIG,
    DEFAULT_POOL_CONFIG,
    CoreConfig,
    PoolConfig,
)
from stablepool.core import StableswapCore
from stablepool.errors import StableswapError
from stablepool.fees import FeeConfig
from stablepool.midpoint import Midpoint
from stablepool.pool import PoolSnapshot, StableswapPool
from stablepool.types import AmplificationConfig, Asset, PoolStatus, SwapDirection

__version__ = "0.1.0"
__all__ = [
    # Engine
    "StableswapCore",
    "StableswapPool",
    "PoolSnapshot",
    # Configuration
    "CoreConfig",
    "PoolConfig",
    "DEFAULT_CORE_CONFIG",
    "DEFAULT_POOL_CONFIG",
    "FeeConfig",
    "Midpoint",
    "AmplificationConfig",
    # Enums
    "Asset",
    "PoolStatus",
    "SwapDirection",
    # Errors
    "StableswapError",
    "__version__",
]
