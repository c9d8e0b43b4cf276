"""Tests for the invariant engine: calc_y, calc_x, calc_x_max, calc_k, equilibrium."""

import pytest

from expiry_amm.curve.invariant import (
    calc_equilibrium_point,
    calc_k,
    calc_x,
    calc_x_max,
    calc_y,
    scaled_a,
    time_factor,
    year_fraction,
)
from expiry_amm.errors import DomainError
from tests.helpers.constants import (
    A,
    DAY,
    EQUILIBRIUM_ONE_YEAR,
    EQUILIBRIUM_SEED_TTL,
    K,
    ONE,
    X_MAX_ONE_YEAR,
    X_MAX_TWO_PERCENT_YEAR,
    YEAR,
)

TWO_PERCENT_YEAR = YEAR * 2 // 100

TIMES_TO_EXPIRY = [YEAR, TWO_PERCENT_YEAR, YEAR - DAY, 1, 0]


def tenth_steps(upper: int) -> range:
    """x = 0.1, 0.2, ... up to upper."""
    return range(ONE // 10, upper + 1, ONE // 10)


class TestTimeFactor:
    """Tests for the square-root time factor."""

    def test_one_year_is_one(self):
        assert time_factor(YEAR) == ONE

    def test_zero_at_expiry(self):
        assert time_factor(0) == 0

    def test_two_percent_of_year(self):
        assert time_factor(TWO_PERCENT_YEAR) == 141406945681211041

    def test_quarter_year_is_about_half(self):
        assert abs(time_factor(YEAR // 4) - ONE // 2) < ONE // 1000

    def test_negative_rejected(self):
        with pytest.raises(DomainError):
            time_factor(-1)

    def test_year_fraction(self):
        assert year_fraction(YEAR // 2) == ONE // 2
        assert year_fraction(0) == 0

    def test_scaled_a_at_one_year(self):
        assert scaled_a(3 * ONE, YEAR) == 3 * ONE


class TestReferenceValues:
    """Curve values for a = 1, k = 10."""

    def test_x_max_one_year(self):
        assert calc_x_max(A, K, YEAR) == X_MAX_ONE_YEAR

    def test_x_max_two_percent_year(self):
        assert calc_x_max(A, K, TWO_PERCENT_YEAR) == X_MAX_TWO_PERCENT_YEAR

    def test_domain_shrinks_toward_expiry(self):
        assert calc_x_max(A, K, TWO_PERCENT_YEAR) < calc_x_max(A, K, YEAR)

    def test_equilibrium_point_one_year(self):
        assert calc_equilibrium_point(A, K, YEAR) == EQUILIBRIUM_ONE_YEAR

    def test_equilibrium_point_one_day_in(self):
        assert calc_equilibrium_point(A, K, YEAR - DAY) == EQUILIBRIUM_SEED_TTL

    def test_equilibrium_is_on_the_diagonal(self):
        eq = calc_equilibrium_point(A, K, YEAR)
        assert abs(calc_y(eq, A, K, YEAR) - eq) <= 2 * 10**9

    def test_calc_y_closed_form(self):
        # y = k - x + k * a / x at one year
        assert calc_y(ONE, A, K, YEAR) == 19 * ONE
        assert calc_y(2 * ONE, A, K, YEAR) == 13 * ONE

    def test_at_expiry_curve_is_linear(self):
        assert calc_y(4 * ONE, A, K, 0) == 6 * ONE
        assert calc_k(4 * ONE, 6 * ONE, A, 0) == K


class TestCalcY:
    """Tests for the direct evaluation."""

    def test_non_positive_x_rejected(self):
        with pytest.raises(DomainError):
            calc_y(0, A, K, YEAR)

    def test_beyond_x_max_rejected(self):
        with pytest.raises(DomainError):
            calc_y(X_MAX_ONE_YEAR + 1, A, K, YEAR)

    def test_at_x_max_is_non_negative(self):
        assert calc_y(X_MAX_ONE_YEAR, A, K, YEAR) >= 0

    def test_strictly_decreasing(self):
        ys = [calc_y(x, A, K, YEAR) for x in tenth_steps(X_MAX_ONE_YEAR)]
        assert all(later < earlier for earlier, later in zip(ys, ys[1:]))


class TestCalcX:
    """Tests for the inverse solve."""

    @pytest.mark.parametrize("t", TIMES_TO_EXPIRY)
    def test_round_trip_exact(self, t):
        """calc_x(calc_y(x)) == x for every x in 0.1 steps up to x_max."""
        for x in tenth_steps(calc_x_max(A, K, t)):
            assert calc_x(calc_y(x, A, K, t), A, K, t) == x

    def test_round_trip_at_domain_edges(self):
        for x in (1, X_MAX_ONE_YEAR):
            assert calc_x(calc_y(x, A, K, YEAR), A, K, YEAR) == x

    def test_negative_y_rejected(self):
        with pytest.raises(DomainError):
            calc_x(-1, A, K, YEAR)

    def test_huge_y_maps_to_smallest_x(self):
        assert calc_x(10**40, A, K, YEAR) == 1


class TestCalcK:
    """Tests for invariant recovery."""

    @pytest.mark.parametrize("t", TIMES_TO_EXPIRY)
    def test_recovers_k_within_one_unit(self, t):
        for x in tenth_steps(calc_x_max(A, K, t)):
            assert abs(calc_k(x, calc_y(x, A, K, t), A, t) - K) <= 1

    def test_recovery_at_equilibrium(self):
        eq = EQUILIBRIUM_ONE_YEAR
        assert calc_k(eq, eq, A, YEAR) == 9999999999465824996

    def test_invalid_point_rejected(self):
        with pytest.raises(DomainError):
            calc_k(0, ONE, A, YEAR)
        with pytest.raises(DomainError):
            calc_k(ONE, -1, A, YEAR)
