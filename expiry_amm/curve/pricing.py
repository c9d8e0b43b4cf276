"""Marginal price and swap quotes on the curve."""

from __future__ import annotations

from expiry_amm.errors import DomainError
from expiry_amm.math.fixed_point import ONE, mul_div

from .invariant import calc_x, calc_x_max, calc_y, scaled_a


def calc_x_price_in_y(x: int, a: int, k: int, t: int) -> int:
    """Marginal price of X denominated in Y at reserve x, 18 decimals.

    Negative slope of the curve: ``1 + k * ag / x**2``. Strictly decreasing in
    x and equal to ONE (the terminal 1:1 ratio) at expiry.

    Raises:
        DomainError: If x is not positive
    """
    if x <= 0:
        raise DomainError(f"x must be positive, got {x}")
    return ONE + mul_div(k, scaled_a(a, t) * ONE, x * x)


def calc_y_out_given_x_in(x0: int, x_in: int, a: int, k: int, t: int) -> int:
    """Y paid out for moving the X reserve from x0 to x0 + x_in.

    Args:
        x0: Current X reserve, 18 decimals
        x_in: X added to the pool
        a: Curve steepness
        k: Invariant at the current point
        t: Seconds to expiry

    Returns:
        Y output, rounded down

    Raises:
        DomainError: If x_in is negative or x0 + x_in exceeds calc_x_max
    """
    if x_in < 0:
        raise DomainError(f"x_in must be non-negative, got {x_in}")
    x_max = calc_x_max(a, k, t)
    if x0 + x_in > x_max:
        raise DomainError(f"x0 + x_in = {x0 + x_in} exceeds curve domain (x_max={x_max})")
    return calc_y(x0, a, k, t) - calc_y(x0 + x_in, a, k, t)


def calc_x_out_given_y_in(
    y0: int,
    y_in: int,
    a: int,
    k: int,
    t: int,
    x0: int | None = None,
) -> int:
    """X paid out for moving the Y reserve from y0 to y0 + y_in.

    Y has no upper bound on the curve (it grows without limit as x goes to
    zero), so there is no cap analogous to calc_x_max on this side.

    Args:
        y0: Current Y reserve, 18 decimals
        y_in: Y added to the pool
        a: Curve steepness
        k: Invariant at the current point
        t: Seconds to expiry
        x0: Current X reserve. Defaults to calc_x(y0); pools pass their live
            reserve so that the payout is measured from what they hold.

    Returns:
        X output, rounded down and capped at ``y_in / price(x0)``

    Raises:
        DomainError: If y_in is negative or the output would be negative
    """
    if y_in < 0:
        raise DomainError(f"y_in must be non-negative, got {y_in}")
    if x0 is None:
        x0 = calc_x(y0, a, k, t)
    x_out = x0 - calc_x(y0 + y_in, a, k, t)
    if x_out < 0:
        raise DomainError(f"negative output {x_out} for y_in={y_in}")
    return min(x_out, mul_div(y_in, ONE, calc_x_price_in_y(x0, a, k, t)))
