"""FastAPI application serving a single expiry pool."""

import uvicorn
from fastapi import FastAPI

from expiry_amm import __version__
from expiry_amm.api.endpoints import router
from expiry_amm.config import ServiceSettings

app = FastAPI(
    title="Expiry AMM",
    description="Quotes, swaps and liquidity for a time-decaying two-asset pool",
    version=__version__,
)

app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - EXPIRY_AMM_HOST: Host to bind to (default: 0.0.0.0)
    - EXPIRY_AMM_PORT: Port to bind to (default: 8000)
    - EXPIRY_AMM_DEBUG: Enable debug/reload mode (default: false)
    - EXPIRY_AMM_A, EXPIRY_AMM_K, EXPIRY_AMM_TTL_SECONDS: hosted pool parameters
    """
    settings = ServiceSettings.from_env()
    uvicorn.run(
        "expiry_amm.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
