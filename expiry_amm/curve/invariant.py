"""Invariant engine for the time-decaying bonding curve.

The curve relating the two reserves is

    y = k - x + k * ag / x        with  ag = a * g(t)

where ``g(t) = sqrt(t / YEAR)`` shrinks to zero at expiry. At ``t = 0`` the
curve degenerates to the line ``x + y = k`` and the marginal price is exactly
the terminal 1:1 ratio. For ``t > 0`` the ``k * ag / x`` term makes the curve
convex and bounds its domain at the root ``calc_x_max`` where ``y`` reaches
zero.

All functions take integer seconds to expiry ``t`` and 18-decimal ``a``, ``k``
and reserves, and return 18-decimal integers.
"""

from __future__ import annotations

from expiry_amm.constants import SECONDS_PER_YEAR
from expiry_amm.errors import DomainError
from expiry_amm.math.fixed_point import ONE, isqrt, mul_div, mul_down, sqrt

_SQRT_YEAR = isqrt(SECONDS_PER_YEAR)


def time_factor(t: int) -> int:
    """Square root of the remaining year fraction, 18 decimals.

    Evaluated as ``isqrt(t) * ONE // isqrt(YEAR)`` so the factor only moves
    when the integer root of the remaining seconds does.

    Raises:
        DomainError: If t is negative
    """
    if t < 0:
        raise DomainError(f"time to expiry must be non-negative, got {t}")
    return isqrt(t) * ONE // _SQRT_YEAR


def year_fraction(t: int) -> int:
    """Remaining time as an 18-decimal fraction of a year."""
    if t < 0:
        raise DomainError(f"time to expiry must be non-negative, got {t}")
    return t * ONE // SECONDS_PER_YEAR


def scaled_a(a: int, t: int) -> int:
    """Steepness scaled by the time factor (``ag`` in the curve equation)."""
    return mul_down(a, time_factor(t))


def _y_at(x: int, k: int, ag: int) -> int:
    # Signed: negative past the domain bound
    return k - x + mul_div(k, ag, x)


def calc_x_max(a: int, k: int, t: int) -> int:
    """Largest x for which the curve still has a non-negative y.

    Positive root of ``x**2 - k*x - k*ag = 0``:

        x_max = (k + sqrt(k) * sqrt(k + 4*ag)) / 2

    The domain shrinks as expiry approaches.
    """
    ag = scaled_a(a, t)
    return (k + mul_down(sqrt(k), sqrt(k + 4 * ag))) // 2


def calc_equilibrium_point(a: int, k: int, t: int) -> int:
    """The reserve level at which x == y on the curve.

    Positive root of ``2*x**2 - k*x - k*ag = 0``:

        x_eq = (k + sqrt(k) * sqrt(k + 8*ag)) / 4
    """
    ag = scaled_a(a, t)
    return (k + mul_down(sqrt(k), sqrt(k + 8 * ag))) // 4


def calc_y(x: int, a: int, k: int, t: int) -> int:
    """Y reserve on the curve for a given X reserve, rounded down.

    Args:
        x: X reserve, 18 decimals
        a: Curve steepness
        k: Invariant
        t: Seconds to expiry

    Returns:
        Y reserve, 18 decimals

    Raises:
        DomainError: If x is not positive or exceeds calc_x_max(a, k, t)
    """
    if x <= 0:
        raise DomainError(f"x must be positive, got {x}")
    x_max = calc_x_max(a, k, t)
    if x > x_max:
        raise DomainError(f"x {x} exceeds curve domain (x_max={x_max})")
    return _y_at(x, k, scaled_a(a, t))


def calc_x(y: int, a: int, k: int, t: int) -> int:
    """X reserve on the curve for a given Y reserve.

    Returns the smallest integer ``x >= 1`` with ``calc_y(x) <= y``. The
    curve's integer form drops by at least one per unit of x, so this is an
    exact inverse: ``calc_x(calc_y(x)) == x`` for every in-domain x.

    Bisection over ``[1, k + ag]``: the curve is negative at the upper end,
    and the loop runs at most ``(k + ag).bit_length()`` times.

    Raises:
        DomainError: If y is negative
    """
    if y < 0:
        raise DomainError(f"y must be non-negative, got {y}")
    ag = scaled_a(a, t)
    lo = 1
    hi = k + ag
    while lo < hi:
        mid = (lo + hi) // 2
        if _y_at(mid, k, ag) <= y:
            hi = mid
        else:
            lo = mid + 1
    return lo


def calc_k(x: int, y: int, a: int, t: int) -> int:
    """Recover the invariant from a point on the curve.

    Solving the curve equation for k gives ``k = x * (x + y) / (x + ag)``.
    For a point produced by :func:`calc_y` the result is within one unit of
    the original k.

    Raises:
        DomainError: If x is not positive or y is negative
    """
    if x <= 0:
        raise DomainError(f"x must be positive, got {x}")
    if y < 0:
        raise DomainError(f"y must be non-negative, got {y}")
    return mul_div(x, x + y, x + scaled_a(a, t))
