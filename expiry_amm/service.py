"""Construction of the pool hosted by the HTTP service."""

from __future__ import annotations

import threading

import structlog

from expiry_amm.config import ServiceSettings
from expiry_amm.curve.invariant import calc_equilibrium_point
from expiry_amm.pool.assets import InMemoryReserveAsset
from expiry_amm.pool.clock import Clock, SystemClock
from expiry_amm.pool.state import Pool

logger = structlog.get_logger()

# Account that funds the seed and receives the initial LP shares
TREASURY = "0x" + "00" * 19 + "01"

_default_pool: Pool | None = None
_default_pool_lock = threading.Lock()


def build_pool(settings: ServiceSettings, clock: Clock | None = None) -> Pool:
    """Create in-memory X/Y assets and a seeded pool expiring after settings.ttl_seconds.

    The treasury is minted exactly the equilibrium amounts needed to seed.
    """
    clock = clock if clock is not None else SystemClock()
    expiry = clock.now() + settings.ttl_seconds
    asset_x = InMemoryReserveAsset("PT")
    asset_y = InMemoryReserveAsset("YT")

    seed_amount = calc_equilibrium_point(settings.curve.a, settings.curve.k, settings.ttl_seconds)
    asset_x.mint(TREASURY, seed_amount)
    asset_y.mint(TREASURY, seed_amount)

    pool = Pool.create(asset_x, asset_y, settings.curve, expiry, seeder=TREASURY, clock=clock)
    logger.info(
        "default_pool_created",
        pool=pool.address,
        a=settings.curve.a,
        k=settings.curve.k,
        expiry=expiry,
    )
    return pool


def get_default_pool() -> Pool:
    """Return the process-wide pool, creating it from the environment on first use."""
    global _default_pool
    with _default_pool_lock:
        if _default_pool is None:
            _default_pool = build_pool(ServiceSettings.from_env())
        return _default_pool
