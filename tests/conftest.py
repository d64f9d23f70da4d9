"""Pytest configuration and fixtures."""

import pytest

from stablepool.core import StableswapCore
from stablepool.pool import StableswapPool
from stablepool.state import PoolState
from tests.helpers import DEPLOYER, make_pool_config, make_state


@pytest.fixture
def core() -> StableswapCore:
    """Engine core with the default floors and only the deployer as admin."""
    return StableswapCore(DEPLOYER)


@pytest.fixture
def pool(core: StableswapCore) -> StableswapPool:
    """Default pool: 10M/10M, midpoint 1.1, amp 100, 30/30 bps swap fees, 40 bps liquidity fee."""
    return core.create_pool(DEPLOYER, "default", make_pool_config())


@pytest.fixture
def zero_fee_pool(core: StableswapCore) -> StableswapPool:
    """Midpoint 1.1 pool with amp 25 and no swap fees."""
    return core.create_pool(DEPLOYER, "zero-fee", make_pool_config(amp=25, swap_fees=0))


@pytest.fixture
def parity_pool(core: StableswapCore) -> StableswapPool:
    """Balanced pool with a 1:1 midpoint."""
    return core.create_pool(
        DEPLOYER, "parity", make_pool_config(midpoint=1_000_000, midpoint_factor=1_000_000)
    )


@pytest.fixture
def state() -> PoolState:
    """Default pool state for the pure engine functions."""
    return make_state()
