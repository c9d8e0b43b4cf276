"""Expiry AMM - time-decaying two-asset pool."""

from expiry_amm.config import CurveParameters
from expiry_amm.pool.state import Pool, PoolStatus

__version__ = "0.1.0"
__all__ = ["CurveParameters", "Pool", "PoolStatus", "__version__"]
