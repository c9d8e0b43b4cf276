"""Pool state machine and its collaborators."""

from .assets import InMemoryReserveAsset, ReserveAsset
from .clock import Clock, ManualClock, SystemClock
from .state import LiquidityChange, Pool, PoolSnapshot, PoolStatus, SwapQuote

__all__ = [
    "Pool",
    "PoolStatus",
    "PoolSnapshot",
    "SwapQuote",
    "LiquidityChange",
    "ReserveAsset",
    "InMemoryReserveAsset",
    "Clock",
    "SystemClock",
    "ManualClock",
]
