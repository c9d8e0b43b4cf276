"""Mathematical utilities for the pool engine.

This package provides the deterministic integer primitives the curve is
built on:
- 18-decimal fixed-point multiply/divide with explicit rounding
- square root kept to 9 decimals
- fractional power (ln/exp digit extraction, bounded series)
"""

from expiry_amm.math.fixed_point import (
    MAX_POW_RELATIVE_ERROR,
    ONE,
    UINT256_MAX,
    FixedPointDivisionByZero,
    FixedPointError,
    FixedPointOverflow,
    InvalidBase,
    InvalidExponent,
    div_down,
    div_up,
    exp,
    isqrt,
    ln,
    mul_div,
    mul_div_up,
    mul_down,
    mul_up,
    pow_down,
    pow_raw,
    pow_up,
    sqrt,
)

__all__ = [
    "ONE",
    "UINT256_MAX",
    "MAX_POW_RELATIVE_ERROR",
    "FixedPointError",
    "FixedPointOverflow",
    "FixedPointDivisionByZero",
    "InvalidBase",
    "InvalidExponent",
    "mul_div",
    "mul_div_up",
    "mul_down",
    "mul_up",
    "div_down",
    "div_up",
    "isqrt",
    "sqrt",
    "ln",
    "exp",
    "pow_raw",
    "pow_down",
    "pow_up",
]
