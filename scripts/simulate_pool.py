"""Simulate a pool over its lifetime.

Seeds a pool at its equilibrium point, replays alternating swaps at a fixed
interval, and redeems everything after expiry, printing the reserves and
marginal price at each step.

Usage:
    python -m scripts.simulate_pool --ttl-days 365 --steps 12 --swap-size 0.5
"""

import argparse
import logging
from dataclasses import dataclass
from decimal import Decimal

import structlog

from expiry_amm.config import CurveParameters
from expiry_amm.curve.invariant import calc_equilibrium_point
from expiry_amm.errors import PoolError
from expiry_amm.math.fixed_point import ONE
from expiry_amm.pool import InMemoryReserveAsset, ManualClock, Pool

logger = structlog.get_logger()

SECONDS_PER_DAY = 86_400
START_TIME = 1_700_000_000

LP = "0x" + "11" * 20
TRADER = "0x" + "22" * 20


@dataclass
class SimulationStep:
    """Pool state after one simulated step."""

    day: int
    x: int
    y: int
    price: int
    amount_out: int


def to_wei(amount: Decimal) -> int:
    return int(amount * ONE)


def run_simulation(
    params: CurveParameters,
    ttl_days: int,
    steps: int,
    swap_size: int,
) -> tuple[list[SimulationStep], Pool]:
    """Run the simulation and return the recorded steps and the expired pool.

    Swaps alternate between selling X and selling Y; a swap the curve
    rejects is logged and skipped.
    """
    clock = ManualClock(START_TIME)
    ttl = ttl_days * SECONDS_PER_DAY
    asset_x = InMemoryReserveAsset("PT")
    asset_y = InMemoryReserveAsset("YT")

    seed = calc_equilibrium_point(params.a, params.k, ttl)
    asset_x.mint(LP, seed)
    asset_y.mint(LP, seed)
    asset_x.mint(TRADER, swap_size * steps)
    asset_y.mint(TRADER, swap_size * steps)

    pool = Pool.create(asset_x, asset_y, params, START_TIME + ttl, seeder=LP, clock=clock)
    interval = ttl // max(steps, 1)

    history: list[SimulationStep] = []
    for step in range(steps):
        clock.advance(interval)
        if clock.now() >= pool.expiry:
            break
        deadline = clock.now() + 60
        try:
            if step % 2 == 0:
                amount_out = pool.swap_get_y_given_x_in(TRADER, TRADER, swap_size, 0, deadline)
            else:
                amount_out = pool.swap_get_x_given_y_in(TRADER, TRADER, swap_size, 0, deadline)
        except PoolError as err:
            logger.warning("simulated_swap_skipped", step=step, error=str(err))
            amount_out = 0
        history.append(
            SimulationStep(
                day=(clock.now() - START_TIME) // SECONDS_PER_DAY,
                x=pool.x,
                y=pool.y,
                price=pool.spot_price(),
                amount_out=amount_out,
            )
        )

    clock.set(max(clock.now(), pool.expiry))
    pool.redeem(LP, LP)
    return history, pool


def main() -> None:
    """Entry point for the pool simulation script."""
    parser = argparse.ArgumentParser(description="Simulate swaps against an expiry pool")
    parser.add_argument("--a", type=Decimal, default=Decimal(1), help="Curve steepness")
    parser.add_argument("--k", type=Decimal, default=Decimal(10), help="Curve invariant")
    parser.add_argument("--ttl-days", type=int, default=365, help="Days until expiry")
    parser.add_argument("--steps", type=int, default=12, help="Number of swaps to replay")
    parser.add_argument(
        "--swap-size",
        type=Decimal,
        default=Decimal("0.5"),
        help="Size of each swap in whole tokens",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    params = CurveParameters(a=to_wei(args.a), k=to_wei(args.k))
    history, pool = run_simulation(params, args.ttl_days, args.steps, to_wei(args.swap_size))

    print(f"{'day':>5} {'x':>24} {'y':>24} {'price':>12} {'out':>24}")
    for step in history:
        print(
            f"{step.day:>5} {step.x:>24} {step.y:>24} "
            f"{Decimal(step.price) / ONE:>12.6f} {step.amount_out:>24}"
        )
    print(f"\nAfter redemption: x={pool.x} y={pool.y} lp_supply={pool.total_lp_supply}")


if __name__ == "__main__":
    main()
