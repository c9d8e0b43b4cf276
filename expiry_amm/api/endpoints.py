"""API endpoints for the hosted pool."""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from expiry_amm.errors import LifecycleError, PoolError
from expiry_amm.math.fixed_point import UINT256_MAX, FixedPointError
from expiry_amm.models.pool import (
    AddLiquidityRequest,
    LiquidityResponse,
    PoolStateResponse,
    QuoteResponse,
    RedeemRequest,
    RemoveLiquidityRequest,
    SwapRequest,
    SwapResponse,
)
from expiry_amm.pool.state import Pool
from expiry_amm.service import get_default_pool

logger = structlog.get_logger()

router = APIRouter()


def get_pool() -> Pool:
    """Dependency provider for the pool instance.

    Override this in tests to inject a pool with a manual clock:
        app.dependency_overrides[get_pool] = lambda: pool

    Returns:
        The pool served by this process.
    """
    return get_default_pool()


@contextmanager
def _pool_errors(operation: str) -> Iterator[None]:
    """Translate pool errors into HTTP errors.

    Lifecycle errors are conflicts with the pool's phase (409); every other
    rejection is a bad request (400).
    """
    try:
        yield
    except LifecycleError as err:
        raise HTTPException(status_code=409, detail=str(err)) from err
    except (PoolError, FixedPointError) as err:
        logger.info("request_rejected", operation=operation, error=type(err).__name__)
        raise HTTPException(status_code=400, detail=str(err)) from err


@router.get("/pool")
def pool_state(pool: Pool = Depends(get_pool)) -> PoolStateResponse:
    """Current reserves, supply, parameters and lifecycle phase."""
    return PoolStateResponse.from_snapshot(pool.snapshot())


@router.get("/quote/y-out")
def quote_y_out(
    x_in: int = Query(ge=0, le=UINT256_MAX, description="X sold, native units"),
    pool: Pool = Depends(get_pool),
) -> QuoteResponse:
    """Quote the Y received for selling x_in of X."""
    with _pool_errors("quote_y_out"):
        quote = pool.get_y_out_given_x_in(x_in)
    return QuoteResponse.from_quote(quote)


@router.get("/quote/x-out")
def quote_x_out(
    y_in: int = Query(ge=0, le=UINT256_MAX, description="Y sold, native units"),
    pool: Pool = Depends(get_pool),
) -> QuoteResponse:
    """Quote the X received for selling y_in of Y."""
    with _pool_errors("quote_x_out"):
        quote = pool.get_x_out_given_y_in(y_in)
    return QuoteResponse.from_quote(quote)


@router.post("/swap/y-given-x-in")
def swap_y_given_x_in(request: SwapRequest, pool: Pool = Depends(get_pool)) -> SwapResponse:
    """Sell X for Y."""
    with _pool_errors("swap_y_given_x_in"):
        amount_out = pool.swap_get_y_given_x_in(
            request.sender,
            request.to,
            int(request.amount_in),
            int(request.min_amount_out),
            request.deadline,
        )
    return SwapResponse(amount_out=amount_out)


@router.post("/swap/x-given-y-in")
def swap_x_given_y_in(request: SwapRequest, pool: Pool = Depends(get_pool)) -> SwapResponse:
    """Sell Y for X."""
    with _pool_errors("swap_x_given_y_in"):
        amount_out = pool.swap_get_x_given_y_in(
            request.sender,
            request.to,
            int(request.amount_in),
            int(request.min_amount_out),
            request.deadline,
        )
    return SwapResponse(amount_out=amount_out)


@router.post("/liquidity/add")
def add_liquidity(request: AddLiquidityRequest, pool: Pool = Depends(get_pool)) -> LiquidityResponse:
    """Deposit X and the price-preserving amount of Y."""
    with _pool_errors("add_liquidity"):
        change = pool.add_liquidity(
            request.sender,
            int(request.x_delta),
            request.recipient,
            max_y_in=int(request.max_y_in) if request.max_y_in is not None else None,
            deadline=request.deadline,
        )
    return LiquidityResponse.from_change(change)


@router.post("/liquidity/remove")
def remove_liquidity(
    request: RemoveLiquidityRequest, pool: Pool = Depends(get_pool)
) -> LiquidityResponse:
    """Burn shares for their proportional reserves while the pool is live."""
    with _pool_errors("remove_liquidity"):
        change = pool.remove_liquidity(request.sender, request.recipient, int(request.shares))
    return LiquidityResponse.from_change(change)


@router.post("/redeem")
def redeem(request: RedeemRequest, pool: Pool = Depends(get_pool)) -> LiquidityResponse:
    """Burn all of the sender's shares after expiry."""
    with _pool_errors("redeem"):
        change = pool.redeem(request.sender, request.recipient)
    return LiquidityResponse.from_change(change)
