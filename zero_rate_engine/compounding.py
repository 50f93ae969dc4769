"""
Conversions between continuously and periodically compounded rates.

Continuous:  DF(t) = exp(-z * t)
Periodic:    DF(t) = (1 + r / n) ** (-n * t)

so that 1 + r / n = exp(z / n) for the same discount factor.
"""
from __future__ import annotations

import math
import numbers
from enum import Enum

from .errors import DomainArgumentError

# Year fractions below this (in absolute value) are treated as a zero-length period.
EFFECTIVE_ZERO = 1.0e-10


class CompoundedRateType(Enum):
    CONTINUOUS = "Continuous"
    PERIODIC = "Periodic"


def check_periods_per_year(periods_per_year: int) -> int:
    if (
        isinstance(periods_per_year, bool)
        or not isinstance(periods_per_year, numbers.Real)
        or not math.isfinite(periods_per_year)
        or int(periods_per_year) != periods_per_year
    ):
        raise DomainArgumentError(f"periods_per_year must be an integer, got {periods_per_year!r}")
    if periods_per_year < 1:
        raise DomainArgumentError(f"periods_per_year must be >= 1, got {periods_per_year}")
    return int(periods_per_year)


def is_zero_length(year_fraction: float) -> bool:
    return abs(year_fraction) < EFFECTIVE_ZERO


def discount_factor_from_continuous_rate(rate: float, year_fraction: float) -> float:
    return math.exp(-rate * year_fraction)


def periodic_rate_from_discount_factor(discount_factor: float, year_fraction: float, periods_per_year: int) -> float:
    """r = n * (DF ** (-1 / (n t)) - 1). Undefined for a zero-length period."""
    n = check_periods_per_year(periods_per_year)
    if is_zero_length(year_fraction):
        raise DomainArgumentError("Periodic rate is undefined for a zero-length period")
    if discount_factor <= 0:
        raise DomainArgumentError(f"Discount factor must be positive, got {discount_factor}")
    return n * (math.pow(discount_factor, -1.0 / (n * year_fraction)) - 1.0)


def discount_factor_from_periodic_rate(rate: float, year_fraction: float, periods_per_year: int) -> float:
    """(1 + r / n) ** (-n t)."""
    n = check_periods_per_year(periods_per_year)
    base = 1.0 + rate / n
    if base <= 0:
        raise DomainArgumentError(f"1 + rate / n must be positive, got {base} (rate={rate}, n={n})")
    return math.pow(base, -n * year_fraction)


def continuous_to_periodic(rate: float, periods_per_year: int) -> float:
    n = check_periods_per_year(periods_per_year)
    return n * (math.exp(rate / n) - 1.0)


def periodic_to_continuous(rate: float, periods_per_year: int) -> float:
    n = check_periods_per_year(periods_per_year)
    base = 1.0 + rate / n
    if base <= 0:
        raise DomainArgumentError(f"1 + rate / n must be positive, got {base} (rate={rate}, n={n})")
    return n * math.log(base)


def d_periodic_rate_d_continuous_rate(rate: float, periods_per_year: int) -> float:
    """Derivative of the periodic equivalent rate with respect to the continuous rate."""
    n = check_periods_per_year(periods_per_year)
    return math.exp(rate / n)


def discount_factor_with_periodic_spread(rate: float, spread: float, year_fraction: float, periods_per_year: int) -> float:
    """
    Discount factor for a continuous zero rate with a spread added in
    periodic-rate space.

    The zero rate is converted to its periodic equivalent through the
    discount factor, the spread is added, and the result is converted back.
    """
    df = discount_factor_from_continuous_rate(rate, year_fraction)
    periodic = periodic_rate_from_discount_factor(df, year_fraction, periods_per_year)
    return discount_factor_from_periodic_rate(periodic + spread, year_fraction, periods_per_year)


def d_discount_factor_with_periodic_spread(rate: float, spread: float, year_fraction: float, periods_per_year: int) -> float:
    """
    Analytic d DF / d z of `discount_factor_with_periodic_spread`.

    With a = exp(z / n) + spread / n and DF = a ** (-n t):
    dDF/dz = -n t * a ** (-n t - 1) * exp(z / n) / n
           = -t * exp(z / n) * a ** (-n t - 1)
    """
    n = check_periods_per_year(periods_per_year)
    growth = math.exp(rate / n)
    base = growth + spread / n
    if base <= 0:
        raise DomainArgumentError(f"exp(z / n) + spread / n must be positive, got {base}")
    return -year_fraction * growth * math.pow(base, -n * year_fraction - 1.0)
