"""Request and response models for the pool HTTP API.

Amounts travel as decimal strings so that 256-bit values survive JSON.
"""

from pydantic import BaseModel, Field

from expiry_amm.models.types import Address, Uint256
from expiry_amm.pool.state import LiquidityChange, PoolSnapshot, PoolStatus, SwapQuote


class PoolStateResponse(BaseModel):
    """Current state of the hosted pool."""

    address: str
    symbol_x: str = Field(alias="symbolX")
    symbol_y: str = Field(alias="symbolY")
    x: Uint256 = Field(description="X reserve in native units")
    y: Uint256 = Field(description="Y reserve in native units")
    total_lp_supply: Uint256 = Field(alias="totalLpSupply")
    expiry: int = Field(description="Unix timestamp of expiry")
    a: Uint256
    k: Uint256 = Field(description="Invariant chosen at creation")
    t: int = Field(description="Seconds to expiry")
    status: PoolStatus

    model_config = {"populate_by_name": True}

    @classmethod
    def from_snapshot(cls, snapshot: PoolSnapshot) -> "PoolStateResponse":
        return cls(
            address=snapshot.address,
            symbol_x=snapshot.symbol_x,
            symbol_y=snapshot.symbol_y,
            x=snapshot.x,
            y=snapshot.y,
            total_lp_supply=snapshot.total_lp_supply,
            expiry=snapshot.expiry,
            a=snapshot.a,
            k=snapshot.k,
            t=snapshot.t,
            status=snapshot.status,
        )


class QuoteResponse(BaseModel):
    """Swap quote and the state it was computed from."""

    amount_out: Uint256 = Field(alias="amountOut")
    x0: Uint256
    y0: Uint256
    a: Uint256
    k: Uint256 = Field(description="Invariant recovered from (x0, y0)")
    t: int

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: SwapQuote) -> "QuoteResponse":
        return cls(
            amount_out=quote.amount_out,
            x0=quote.x0,
            y0=quote.y0,
            a=quote.a,
            k=quote.k,
            t=quote.t,
        )


class SwapRequest(BaseModel):
    """Exact-input swap.

    ``amount_in`` is in the input asset's units and ``min_amount_out`` in
    the output asset's units.
    """

    sender: Address
    to: Address
    amount_in: Uint256 = Field(alias="amountIn")
    min_amount_out: Uint256 = Field(alias="minAmountOut")
    deadline: int = Field(description="Unix timestamp after which the swap is rejected")

    model_config = {"populate_by_name": True}


class SwapResponse(BaseModel):
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class AddLiquidityRequest(BaseModel):
    sender: Address
    recipient: Address
    x_delta: Uint256 = Field(alias="xDelta")
    max_y_in: Uint256 | None = Field(default=None, alias="maxYIn")
    deadline: int | None = None

    model_config = {"populate_by_name": True}


class RemoveLiquidityRequest(BaseModel):
    sender: Address
    recipient: Address
    shares: Uint256

    model_config = {"populate_by_name": True}


class RedeemRequest(BaseModel):
    sender: Address
    recipient: Address


class LiquidityResponse(BaseModel):
    """Shares minted or burned and the reserve amounts moved."""

    shares: Uint256
    x_amount: Uint256 = Field(alias="xAmount")
    y_amount: Uint256 = Field(alias="yAmount")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_change(cls, change: LiquidityChange) -> "LiquidityResponse":
        return cls(shares=change.shares, x_amount=change.x_amount, y_amount=change.y_amount)
