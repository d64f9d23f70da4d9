"""FastAPI application serving quotes for a stableswap pool.

The surface is read-only: quotes and the pool snapshot. Mutating
operations belong to the embedding application, not to HTTP callers.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stablepool.api.endpoints import router
from stablepool.errors import PoolNotActive, StableswapError

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("STABLEPOOL_HOST", "0.0.0.0")
PORT = int(os.environ.get("STABLEPOOL_PORT", "8000"))
DEBUG = os.environ.get("STABLEPOOL_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="Stableswap Pool",
    description="Quotes for a two-asset stableswap pool with a configurable midpoint",
    version="0.1.0",
)


@app.exception_handler(StableswapError)
async def stableswap_error_handler(request: Request, exc: StableswapError) -> JSONResponse:
    """Map engine errors to 400, or 409 when the pool is not active."""
    status_code = 409 if isinstance(exc, PoolNotActive) else 400
    logger.warning(
        "request_rejected",
        path=request.url.path,
        error=type(exc).__name__,
        detail=str(exc),
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - STABLEPOOL_HOST: Host to bind to (default: 0.0.0.0)
    - STABLEPOOL_PORT: Port to bind to (default: 8000)
    - STABLEPOOL_DEBUG: Enable debug/reload mode (default: false)
    """
    uvicorn.run(
        "stablepool.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
