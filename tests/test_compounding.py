import math

import pytest

from zero_rate_engine.compounding import (
    EFFECTIVE_ZERO,
    check_periods_per_year,
    continuous_to_periodic,
    d_discount_factor_with_periodic_spread,
    d_periodic_rate_d_continuous_rate,
    discount_factor_from_continuous_rate,
    discount_factor_from_periodic_rate,
    discount_factor_with_periodic_spread,
    is_zero_length,
    periodic_rate_from_discount_factor,
    periodic_to_continuous,
)
from zero_rate_engine.errors import DomainArgumentError


def test_continuous_and_periodic_describe_same_discount_factor():
    z, n, t = 0.035, 2, 3.25
    r = continuous_to_periodic(z, n)
    assert discount_factor_from_periodic_rate(r, t, n) == pytest.approx(discount_factor_from_continuous_rate(z, t), abs=1e-14)
    assert periodic_to_continuous(r, n) == pytest.approx(z, abs=1e-15)


def test_periodic_rate_from_discount_factor_matches_rate_conversion():
    z, n, t = 0.042, 4, 1.7
    df = math.exp(-z * t)
    assert periodic_rate_from_discount_factor(df, t, n) == pytest.approx(continuous_to_periodic(z, n), abs=1e-13)


def test_periodic_rate_exceeds_continuous_for_positive_rates():
    assert continuous_to_periodic(0.05, 1) > 0.05
    assert continuous_to_periodic(0.05, 12) > 0.05
    assert continuous_to_periodic(0.05, 12) < continuous_to_periodic(0.05, 1)


def test_periodic_rate_undefined_for_zero_length():
    with pytest.raises(DomainArgumentError):
        periodic_rate_from_discount_factor(1.0, 0.0, 2)


def test_periodic_rate_requires_positive_discount_factor():
    with pytest.raises(DomainArgumentError):
        periodic_rate_from_discount_factor(0.0, 1.0, 2)


def test_discount_factor_from_periodic_rate_rejects_non_positive_base():
    with pytest.raises(DomainArgumentError):
        discount_factor_from_periodic_rate(-2.0, 1.0, 2)
    with pytest.raises(DomainArgumentError):
        periodic_to_continuous(-2.0, 2)


@pytest.mark.parametrize("n", [0, -4, 1.5, True, float("nan"), float("inf"), "4", None])
def test_check_periods_per_year_rejects(n):
    with pytest.raises(DomainArgumentError):
        check_periods_per_year(n)


def test_check_periods_per_year_accepts_integral_values():
    assert check_periods_per_year(4) == 4
    assert check_periods_per_year(12.0) == 12


def test_is_zero_length():
    assert is_zero_length(0.0)
    assert is_zero_length(-0.5 * EFFECTIVE_ZERO)
    assert not is_zero_length(1.0 / 365.0)
    assert not is_zero_length(-1.0 / 365.0)


def test_d_periodic_rate_d_continuous_rate_matches_finite_difference():
    z, n, eps = 0.03, 4, 1e-6
    fd = (continuous_to_periodic(z + eps, n) - continuous_to_periodic(z - eps, n)) / (2 * eps)
    assert d_periodic_rate_d_continuous_rate(z, n) == pytest.approx(fd, abs=1e-8)


def test_periodic_spread_with_zero_spread_is_plain_discount_factor():
    z, t = 0.025, 7.5
    for n in (1, 2, 4, 12):
        assert discount_factor_with_periodic_spread(z, 0.0, t, n) == pytest.approx(math.exp(-z * t), abs=1e-12)


def test_d_discount_factor_with_periodic_spread_matches_finite_difference():
    z, s, t, n, eps = 0.031, 0.012, 4.2, 2, 1e-6
    fd = (
        discount_factor_with_periodic_spread(z + eps, s, t, n)
        - discount_factor_with_periodic_spread(z - eps, s, t, n)
    ) / (2 * eps)
    assert d_discount_factor_with_periodic_spread(z, s, t, n) == pytest.approx(fd, abs=1e-8)


def test_d_discount_factor_with_periodic_spread_negative_time():
    """The closed form holds on either side of the valuation date."""
    z, s, t, n, eps = 0.02, 0.01, -0.5, 4, 1e-6
    fd = (
        discount_factor_with_periodic_spread(z + eps, s, t, n)
        - discount_factor_with_periodic_spread(z - eps, s, t, n)
    ) / (2 * eps)
    assert d_discount_factor_with_periodic_spread(z, s, t, n) == pytest.approx(fd, abs=1e-8)
    assert d_discount_factor_with_periodic_spread(z, s, t, n) > 0.0
