"""Price-preserving liquidity math.

Adding or removing X moves the pool to a new curve (a new k) chosen so that
the marginal price at the new point equals the marginal price before the
change. Depth changes, the quoted price does not.

Since the marginal price is ``1 + k * ag / x**2``, keeping it fixed while x
moves from ``x0`` to ``x_new`` means scaling the invariant by
``(x_new / x0)**2``.
"""

from __future__ import annotations

from expiry_amm.errors import DomainError
from expiry_amm.math.fixed_point import mul_div, mul_down

from .invariant import calc_k, calc_y
from .pricing import calc_x_price_in_y


def calc_invariant_y_new(is_add: bool, x_delta: int, x0: int, a: int, k: int, t: int) -> int:
    """Y reserve after a price-preserving change of x_delta in X.

    Args:
        is_add: True when X is deposited, False when it is withdrawn
        x_delta: Amount of X deposited or withdrawn, 18 decimals
        x0: X reserve before the change
        a: Curve steepness
        k: Invariant at (x0, calc_y(x0))
        t: Seconds to expiry

    Returns:
        New Y reserve on the rescaled curve

    Raises:
        DomainError: If x0 is not positive, x_delta is negative, or a
            withdrawal would empty the X reserve
    """
    if x0 <= 0:
        raise DomainError(f"x0 must be positive, got {x0}")
    if x_delta < 0:
        raise DomainError(f"x_delta must be non-negative, got {x_delta}")
    if is_add:
        x_new = x0 + x_delta
    else:
        if x_delta >= x0:
            raise DomainError(f"cannot withdraw {x_delta} from X reserve of {x0}")
        x_new = x0 - x_delta

    k_new = mul_div(k, x_new * x_new, x0 * x0)
    return calc_y(x_new, a, k_new, t)


def calc_lp_token_amount(
    is_add: bool,
    x_delta: int,
    x0: int,
    y0: int,
    a: int,
    t: int,
    total_supply: int,
) -> tuple[int, int, int]:
    """LP shares and Y amount for a price-preserving deposit or withdrawal.

    Pool depth is valued in Y at the current marginal price, and shares are
    minted or burned in proportion to the depth contributed or withdrawn:

        lp_delta = total_supply * (x_delta * price + y_delta) / (x0 * price + y0)

    With ``total_supply == 0`` this is the first provision: the pool must be
    seeded at its equilibrium point, so ``x0 == y0 == x_delta`` and the shares
    minted equal the seeded X.

    Args:
        is_add: True for a deposit, False for a withdrawal
        x_delta: X deposited or withdrawn, 18 decimals
        x0: Current X reserve
        y0: Current Y reserve
        a: Curve steepness
        t: Seconds to expiry
        total_supply: Outstanding LP shares

    Returns:
        Tuple of (lp_delta, y_delta, price) where price is the marginal price
        of X in Y, unchanged by the operation

    Raises:
        DomainError: If the point is off the curve domain, or a first
            provision is not a symmetric deposit
    """
    if total_supply < 0:
        raise DomainError(f"total_supply must be non-negative, got {total_supply}")

    k = calc_k(x0, y0, a, t)
    price = calc_x_price_in_y(x0, a, k, t)

    if total_supply == 0:
        if not is_add:
            raise DomainError("cannot withdraw from a pool without LP supply")
        if not x0 == y0 == x_delta:
            raise DomainError(
                f"first provision must be symmetric: x0={x0}, y0={y0}, x_delta={x_delta}"
            )
        return x_delta, y0, price

    y_new = calc_invariant_y_new(is_add, x_delta, x0, a, k, t)
    y_delta = abs(y_new - y0)
    lp_delta = mul_div(
        total_supply,
        mul_down(x_delta, price) + y_delta,
        mul_down(x0, price) + y0,
    )
    return lp_delta, y_delta, price


def calc_redemption_amounts(x: int, y: int, shares: int, total_supply: int) -> tuple[int, int]:
    """Pro-rata claim of ``shares`` on the reserves, rounded down.

    Redeeming the whole supply returns exactly ``(x, y)``.

    Raises:
        DomainError: If shares is negative or exceeds total_supply
    """
    if total_supply <= 0:
        raise DomainError(f"total_supply must be positive, got {total_supply}")
    if not 0 <= shares <= total_supply:
        raise DomainError(f"shares {shares} outside [0, {total_supply}]")
    return mul_div(x, shares, total_supply), mul_div(y, shares, total_supply)
