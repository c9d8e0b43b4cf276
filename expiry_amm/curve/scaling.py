"""Scaling between native token decimals and the internal 18-decimal scale."""

from expiry_amm.constants import INTERNAL_DECIMALS
from expiry_amm.errors import InvalidParameterError


def scaling_factor(decimals: int) -> int:
    """Factor converting an amount with ``decimals`` decimals to 18 decimals.

    Raises:
        InvalidParameterError: If decimals is negative or above 18
    """
    if not 0 <= decimals <= INTERNAL_DECIMALS:
        raise InvalidParameterError(f"decimals must be in [0, {INTERNAL_DECIMALS}], got {decimals}")
    return 10 ** (INTERNAL_DECIMALS - decimals)


def _check_factor(factor: int) -> None:
    if factor <= 0:
        raise InvalidParameterError(f"Scaling factor must be positive, got {factor}")


def scale_up(amount: int, factor: int) -> int:
    """Scale a native amount to 18 decimals (exact)."""
    _check_factor(factor)
    return amount * factor


def scale_down_down(amount: int, factor: int) -> int:
    """Scale an 18-decimal amount to native decimals, rounding down.

    Used for amounts the pool pays out.
    """
    _check_factor(factor)
    return amount // factor


def scale_down_up(amount: int, factor: int) -> int:
    """Scale an 18-decimal amount to native decimals, rounding up.

    Used for amounts the pool pulls in.
    """
    _check_factor(factor)
    if amount == 0:
        return 0
    return (amount - 1) // factor + 1
