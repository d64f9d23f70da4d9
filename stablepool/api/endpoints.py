"""Quote and snapshot endpoints for a stableswap pool."""

from __future__ import annotations

from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends, Query

from stablepool.core import StableswapCore
from stablepool.models import LiquidityQuoteResponse, PoolResponse, SwapQuoteResponse
from stablepool.pool import StableswapPool
from stablepool.safe_int import UINT128_MAX
from stablepool.types import SwapDirection

logger = structlog.get_logger()

router = APIRouter()

DEFAULT_DEPLOYER = "deployer"
DEFAULT_POOL_NAME = "x-y"


@lru_cache(maxsize=1)
def get_default_pool() -> StableswapPool:
    """Pool served by a standalone process, created with default settings."""
    core = StableswapCore(DEFAULT_DEPLOYER)
    return core.create_pool(DEFAULT_DEPLOYER, DEFAULT_POOL_NAME)


def get_pool() -> StableswapPool:
    """Dependency provider for the pool instance.

    Override this in tests to inject a different pool:
        app.dependency_overrides[get_pool] = lambda: pool
    """
    return get_default_pool()


@router.get("/pool")
async def pool_snapshot(pool: StableswapPool = Depends(get_pool)) -> PoolResponse:
    return PoolResponse.from_snapshot(pool.get_pool())


@router.get("/quote/dy")
async def quote_dy(
    amount: int = Query(ge=0, le=UINT128_MAX),
    pool: StableswapPool = Depends(get_pool),
) -> SwapQuoteResponse:
    """Quote selling amount X for Y."""
    quote = pool.quote_swap(SwapDirection.X_FOR_Y, amount)
    logger.debug("quote_served", pool=pool.name, direction="x_for_y", amount_in=amount)
    return SwapQuoteResponse.from_quote(quote)


@router.get("/quote/dx")
async def quote_dx(
    amount: int = Query(ge=0, le=UINT128_MAX),
    pool: StableswapPool = Depends(get_pool),
) -> SwapQuoteResponse:
    """Quote selling amount Y for X."""
    quote = pool.quote_swap(SwapDirection.Y_FOR_X, amount)
    logger.debug("quote_served", pool=pool.name, direction="y_for_x", amount_in=amount)
    return SwapQuoteResponse.from_quote(quote)


@router.get("/quote/dlp")
async def quote_dlp(
    amount_x: int = Query(ge=0, le=UINT128_MAX),
    amount_y: int = Query(ge=0, le=UINT128_MAX),
    pool: StableswapPool = Depends(get_pool),
) -> LiquidityQuoteResponse:
    """Quote LP shares minted for a deposit."""
    quote = pool.quote_add_liquidity(amount_x, amount_y)
    return LiquidityQuoteResponse.from_quote(quote)
