"""Pydantic models for the pool HTTP API."""

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
from expiry_amm.models.types import Address, Uint256

__all__ = [
    # Types
    "Address",
    "Uint256",
    # Requests
    "SwapRequest",
    "AddLiquidityRequest",
    "RemoveLiquidityRequest",
    "RedeemRequest",
    # Responses
    "PoolStateResponse",
    "QuoteResponse",
    "SwapResponse",
    "LiquidityResponse",
]
