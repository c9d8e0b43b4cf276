"""18-decimal fixed-point math for the curve engine.

Every quantity handled by the pool is an integer scaled by ``ONE = 10**18``.
Rounding is always explicit: the plain helpers round down so that quotes and
withdrawals never round in the caller's favour, and the ``_up`` variants are
used where the pool pulls funds in.

The fractional power is computed as ``exp(exponent * ln(base))`` using the
digit-extraction scheme of Balancer's LogExpMath: large powers of ``e`` are
factored out against precomputed constants and the remainder is evaluated
with a fixed number of series terms. No floating point is involved, so
results are identical on every platform.

The curve itself does not go through ``pow_raw``: its time factor is a
square root and is evaluated with ``isqrt`` (see ``curve.invariant``). The
log/exp family is the general fractional-power primitive for callers whose
exponent is not one half.
"""

from __future__ import annotations

import math

__all__ = [
    # Errors
    "FixedPointError",
    "FixedPointOverflow",
    "FixedPointDivisionByZero",
    "InvalidBase",
    "InvalidExponent",
    # Arithmetic
    "mul_div",
    "mul_div_up",
    "mul_down",
    "mul_up",
    "div_down",
    "div_up",
    "isqrt",
    "sqrt",
    # Logarithm / exponential
    "ln",
    "exp",
    "pow_raw",
    "pow_down",
    "pow_up",
    # Constants
    "ONE",
    "UINT256_MAX",
    "MAX_POW_RELATIVE_ERROR",
]

ONE = 10**18
UINT256_MAX = 2**256 - 1

# Error bound of pow_raw() relative to the exact result, in 18-decimal units (1e-14)
MAX_POW_RELATIVE_ERROR = 10_000

_SQRT_ONE = 10**9
_ONE_20 = 10**20
_ONE_36 = 10**36

# exp() accepts arguments in [-41, 130]; outside that range the result either
# underflows to zero or no longer fits 256 bits
_MAX_NATURAL_EXPONENT = 130 * ONE
_MIN_NATURAL_EXPONENT = -41 * ONE

# ln() switches to the 36-decimal series for bases in (0.9, 1.1)
_LN_36_LOWER = ONE - 10**17
_LN_36_UPPER = ONE + 10**17

_MILD_EXPONENT_BOUND = (1 << 254) // _ONE_20

# (exponent, e^exponent) pairs. The first two are stored with 18 decimals and
# e^x as a plain integer; the rest use 20 decimals for both.
_BIG_TERMS: tuple[tuple[int, int], ...] = (
    (128 * ONE, 38877084059945950922200000000000000000000000000000000000),
    (64 * ONE, 6235149080811616882910000000),
)
_SMALL_TERMS: tuple[tuple[int, int], ...] = (
    (32 * _ONE_20, 7896296018268069516100000000000000),
    (16 * _ONE_20, 888611052050787263676000000),
    (8 * _ONE_20, 298095798704172827474000),
    (4 * _ONE_20, 5459815003314423907810),
    (2 * _ONE_20, 738905609893065022723),
    (1 * _ONE_20, 271828182845904523536),
    (_ONE_20 // 2, 164872127070012814685),
    (_ONE_20 // 4, 128402541668774148407),
    (_ONE_20 // 8, 113314845306682631683),
    (_ONE_20 // 16, 106449445891785942956),
)


class FixedPointError(ArithmeticError):
    """Base error for fixed-point operations."""


class FixedPointOverflow(FixedPointError):
    """An operand or result does not fit in an unsigned 256-bit word."""


class FixedPointDivisionByZero(FixedPointError, ZeroDivisionError):
    """Division by a zero denominator."""


class InvalidBase(FixedPointError):
    """Base passed to ln() or pow_raw() is outside the supported range."""


class InvalidExponent(FixedPointError):
    """Exponent passed to exp() or pow_raw() is outside the supported range."""


def _check_uint(name: str, value: int) -> None:
    if value < 0:
        raise FixedPointOverflow(f"{name} must be non-negative, got {value}")
    if value > UINT256_MAX:
        raise FixedPointOverflow(f"{name} exceeds uint256: {value}")


def mul_div(a: int, b: int, denominator: int) -> int:
    """Compute ``a * b // denominator`` rounding down.

    The intermediate product is exact (Python integers do not wrap); only the
    operands and the final result are bounded to uint256.

    Raises:
        FixedPointDivisionByZero: If denominator is zero
        FixedPointOverflow: If an operand or the result is negative or above uint256
    """
    _check_uint("a", a)
    _check_uint("b", b)
    _check_uint("denominator", denominator)
    if denominator == 0:
        raise FixedPointDivisionByZero(f"mul_div({a}, {b}, 0)")
    result = a * b // denominator
    _check_uint("result", result)
    return result


def mul_div_up(a: int, b: int, denominator: int) -> int:
    """Compute ``a * b / denominator`` rounding up."""
    _check_uint("a", a)
    _check_uint("b", b)
    _check_uint("denominator", denominator)
    if denominator == 0:
        raise FixedPointDivisionByZero(f"mul_div_up({a}, {b}, 0)")
    product = a * b
    result = 0 if product == 0 else (product - 1) // denominator + 1
    _check_uint("result", result)
    return result


def mul_down(a: int, b: int) -> int:
    """Multiply two 18-decimal values, rounding down."""
    return mul_div(a, b, ONE)


def mul_up(a: int, b: int) -> int:
    """Multiply two 18-decimal values, rounding up."""
    return mul_div_up(a, b, ONE)


def div_down(a: int, b: int) -> int:
    """Divide two 18-decimal values, rounding down."""
    return mul_div(a, ONE, b)


def div_up(a: int, b: int) -> int:
    """Divide two 18-decimal values, rounding up."""
    return mul_div_up(a, ONE, b)


def isqrt(n: int) -> int:
    """Integer floor square root."""
    if n < 0:
        raise InvalidBase(f"isqrt of negative value {n}")
    return math.isqrt(n)


def sqrt(x: int) -> int:
    """Square root of an 18-decimal value, kept to 9 decimals.

    ``sqrt(x) = isqrt(x) * 10**9``. The last nine digits of the result are
    always zero and the value is floored, so it never exceeds the exact root.
    The curve's closed forms are defined in terms of this root.
    """
    _check_uint("x", x)
    return isqrt(x) * _SQRT_ONE


def _div_trunc(a: int, b: int) -> int:
    # Truncating division; the series below work with signed intermediates
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _ln_36(x: int) -> int:
    """ln(x) with 36 decimals for x close to ONE (18-decimal input)."""
    x *= ONE
    z = _div_trunc((x - _ONE_36) * _ONE_36, x + _ONE_36)
    z_squared = _div_trunc(z * z, _ONE_36)

    term = z
    total = z
    for divisor in (3, 5, 7, 9, 11, 13, 15):
        term = _div_trunc(term * z_squared, _ONE_36)
        total += _div_trunc(term, divisor)
    return total * 2


def ln(a: int) -> int:
    """Natural logarithm of a positive 18-decimal value.

    Raises:
        InvalidBase: If a is not positive
    """
    if a <= 0:
        raise InvalidBase(f"ln of non-positive value {a}")
    if a < ONE:
        return -ln(ONE * ONE // a)

    result = 0
    for exponent, power in _BIG_TERMS:
        if a >= power * ONE:
            a //= power
            result += exponent

    # Continue with 20 decimals
    result *= 100
    a *= 100
    for exponent, power in _SMALL_TERMS:
        if a >= power:
            a = a * _ONE_20 // power
            result += exponent

    # ln(a) = 2 * atanh(z) with z = (a - 1) / (a + 1), six series terms
    z = (a - _ONE_20) * _ONE_20 // (a + _ONE_20)
    z_squared = z * z // _ONE_20
    term = z
    series = z
    for divisor in (3, 5, 7, 9, 11):
        term = term * z_squared // _ONE_20
        series += term // divisor

    return (result + series * 2) // 100


def exp(x: int) -> int:
    """``e**x`` for an 18-decimal exponent in [-41, 130].

    Raises:
        InvalidExponent: If x is outside the supported range
    """
    if not _MIN_NATURAL_EXPONENT <= x <= _MAX_NATURAL_EXPONENT:
        raise InvalidExponent(f"exp argument {x} outside [-41, 130]")
    if x < 0:
        return ONE * ONE // exp(-x)

    big_factor = 1
    for exponent, power in _BIG_TERMS:
        if x >= exponent:
            x -= exponent
            big_factor = power
            break

    x *= 100
    product = _ONE_20
    # e^(1/8) and below are left to the series
    for exponent, power in _SMALL_TERMS[:8]:
        if x >= exponent:
            x -= exponent
            product = product * power // _ONE_20

    # Taylor series up to x^12 / 12!
    series = _ONE_20 + x
    term = x
    for n in range(2, 13):
        term = term * x // _ONE_20 // n
        series += term

    return product * series // _ONE_20 * big_factor // 100


def pow_raw(base: int, exponent: int) -> int:
    """Compute ``base ** exponent`` for non-negative 18-decimal operands.

    The result carries a relative error of at most
    ``MAX_POW_RELATIVE_ERROR / ONE``; use :func:`pow_down` or :func:`pow_up`
    when the rounding direction matters.

    Raises:
        InvalidBase: If base is negative or does not fit in 255 bits
        InvalidExponent: If exponent is negative, too large, or the result
            would overflow
    """
    if base < 0:
        raise InvalidBase(f"pow base must be non-negative, got {base}")
    if exponent < 0:
        raise InvalidExponent(f"pow exponent must be non-negative, got {exponent}")
    if exponent == 0:
        return ONE
    if base == 0:
        return 0
    if base >= 1 << 255:
        raise InvalidBase(f"pow base {base} too large")
    if exponent >= _MILD_EXPONENT_BOUND:
        raise InvalidExponent(f"pow exponent {exponent} too large")

    if _LN_36_LOWER < base < _LN_36_UPPER:
        ln_36 = _ln_36(base)
        whole = _div_trunc(ln_36, ONE)
        frac = ln_36 - whole * ONE
        log_times_exp = whole * exponent + _div_trunc(frac * exponent, ONE)
    else:
        log_times_exp = ln(base) * exponent
    log_times_exp = _div_trunc(log_times_exp, ONE)

    if not _MIN_NATURAL_EXPONENT <= log_times_exp <= _MAX_NATURAL_EXPONENT:
        raise FixedPointOverflow(f"pow({base}, {exponent}) out of range")
    return exp(log_times_exp)


def _pow_error_margin(raw: int) -> int:
    return mul_up(raw, MAX_POW_RELATIVE_ERROR) + 1


def pow_down(base: int, exponent: int) -> int:
    """``pow_raw`` rounded down by its error bound (never above the exact result)."""
    raw = pow_raw(base, exponent)
    margin = _pow_error_margin(raw)
    return 0 if raw < margin else raw - margin


def pow_up(base: int, exponent: int) -> int:
    """``pow_raw`` rounded up by its error bound (never below the exact result)."""
    raw = pow_raw(base, exponent)
    return raw + _pow_error_margin(raw)
