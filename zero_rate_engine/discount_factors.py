from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union

import numpy as np
import pandas as pd

from .compounding import (
    CompoundedRateType,
    check_periods_per_year,
    d_discount_factor_with_periodic_spread,
    discount_factor_with_periodic_spread,
    is_zero_length,
)
from .curves import Curve, ValueType
from .errors import ConfigurationError, DomainArgumentError
from .sensitivity import (
    CurveCurrencyParameterSensitivities,
    CurveCurrencyParameterSensitivity,
    CurveUnitParameterSensitivity,
    ZeroRateSensitivity,
    check_currency,
)
from .utils import DayCount

logger = logging.getLogger(__name__)


def _validate_curve(curve: Curve) -> DayCount:
    metadata = curve.metadata
    if metadata.x_value_type is not ValueType.YEAR_FRACTION:
        raise ConfigurationError(
            f"Curve {metadata.curve_name}: x-value type must be YEAR_FRACTION, got {metadata.x_value_type}"
        )
    if metadata.y_value_type is not ValueType.ZERO_RATE:
        raise ConfigurationError(
            f"Curve {metadata.curve_name}: y-value type must be ZERO_RATE, got {metadata.y_value_type}"
        )
    if metadata.day_count is None:
        raise ConfigurationError(f"Curve {metadata.curve_name}: metadata must define a day count")
    return metadata.day_count


@dataclass(frozen=True)
class ZeroRateDiscountFactors:
    """
    Discount factors for one currency, read off a continuously compounded
    zero-rate curve.

    DF(d) = exp(-z(t) * t) with t the day count's relative year fraction
    from the valuation date to d. The curve must map year fractions to zero
    rates and carry a day count; this is checked on construction and on every
    curve replacement.
    """
    currency: str
    valuation_date: pd.Timestamp
    curve: Curve

    def __post_init__(self) -> None:
        object.__setattr__(self, "currency", check_currency(self.currency))
        object.__setattr__(self, "valuation_date", pd.Timestamp(self.valuation_date))
        _validate_curve(self.curve)
        logger.debug(
            "Created discount factors %s/%s on curve %s (%d nodes)",
            self.currency, self.valuation_date.date(), self.curve_name, self.parameter_count,
        )

    @classmethod
    def of(cls, currency: str, valuation_date: pd.Timestamp, curve: Curve) -> "ZeroRateDiscountFactors":
        return cls(currency, valuation_date, curve)

    # ---- accessors ----

    @property
    def curve_name(self) -> str:
        return self.curve.metadata.curve_name

    @property
    def parameter_count(self) -> int:
        return self.curve.parameter_count

    @property
    def day_count(self) -> DayCount:
        return self.curve.metadata.day_count

    def relative_year_fraction(self, date: pd.Timestamp) -> float:
        return self.day_count.relative_year_fraction(self.valuation_date, pd.Timestamp(date))

    def zero_rate(self, date: pd.Timestamp) -> float:
        return self.curve.y_value(self.relative_year_fraction(date))

    # ---- discount factors ----

    def discount_factor(self, date: pd.Timestamp) -> float:
        t = self.relative_year_fraction(date)
        return math.exp(-self.curve.y_value(t) * t)

    def discount_factor_with_spread(
        self,
        date: pd.Timestamp,
        spread: float,
        compounded_rate_type: CompoundedRateType,
        periods_per_year: int,
    ) -> float:
        """
        Discount factor with a constant spread over the zero rate.

        CONTINUOUS: exp(-(z + spread) * t); periods_per_year is ignored.
        PERIODIC: z is converted to its periodic equivalent, the spread is
        added in periodic space and the result converted back to a discount
        factor. A zero-length period always discounts to 1.
        """
        if compounded_rate_type is CompoundedRateType.PERIODIC:
            check_periods_per_year(periods_per_year)

        t = self.relative_year_fraction(date)
        if is_zero_length(t):
            return 1.0

        z = self.curve.y_value(t)
        if compounded_rate_type is CompoundedRateType.CONTINUOUS:
            return math.exp(-(z + spread) * t)
        if compounded_rate_type is CompoundedRateType.PERIODIC:
            return discount_factor_with_periodic_spread(z, spread, t, periods_per_year)
        raise DomainArgumentError(f"Unsupported compounded rate type: {compounded_rate_type}")

    def discount_factor_frame(self, dates: Iterable[pd.Timestamp]) -> pd.DataFrame:
        dates = [pd.Timestamp(d) for d in dates]
        taus = np.array([self.relative_year_fraction(d) for d in dates], dtype=float)
        zeros = np.array([self.curve.y_value(t) for t in taus], dtype=float)

        return pd.DataFrame(
            {
                "date": dates,
                "tau": taus,
                "zero_cc": zeros,
                "df": np.exp(-zeros * taus),
            }
        )

    # ---- point sensitivities ----

    def zero_rate_point_sensitivity(
        self,
        date: pd.Timestamp,
        sensitivity_currency: Optional[str] = None,
    ) -> ZeroRateSensitivity:
        """d DF / d z = -DF * t. At t == 0 this is -0.0."""
        t = self.relative_year_fraction(date)
        df = math.exp(-self.curve.y_value(t) * t)
        return ZeroRateSensitivity.of(self.currency, date, -df * t, sensitivity_currency)

    def zero_rate_point_sensitivity_with_spread(
        self,
        date: pd.Timestamp,
        spread: float,
        compounded_rate_type: CompoundedRateType,
        periods_per_year: int,
        sensitivity_currency: Optional[str] = None,
    ) -> ZeroRateSensitivity:
        """Analytic d/dz of `discount_factor_with_spread`; the spread does not depend on z."""
        if compounded_rate_type is CompoundedRateType.PERIODIC:
            check_periods_per_year(periods_per_year)

        t = self.relative_year_fraction(date)
        if is_zero_length(t):
            return ZeroRateSensitivity.of(self.currency, date, -0.0, sensitivity_currency)

        z = self.curve.y_value(t)
        if compounded_rate_type is CompoundedRateType.CONTINUOUS:
            df = math.exp(-(z + spread) * t)
            value = -df * t
        elif compounded_rate_type is CompoundedRateType.PERIODIC:
            value = d_discount_factor_with_periodic_spread(z, spread, t, periods_per_year)
        else:
            raise DomainArgumentError(f"Unsupported compounded rate type: {compounded_rate_type}")
        return ZeroRateSensitivity.of(self.currency, date, value, sensitivity_currency)

    # ---- parameter sensitivities ----

    def unit_parameter_sensitivity(self, date: pd.Timestamp) -> CurveUnitParameterSensitivity:
        t = self.relative_year_fraction(date)
        return CurveUnitParameterSensitivity(self.curve_name, self.curve.y_value_parameter_sensitivity(t))

    def parameter_sensitivity(
        self,
        point_sensitivities: Union[ZeroRateSensitivity, Iterable[ZeroRateSensitivity]],
    ) -> CurveCurrencyParameterSensitivities:
        """
        Chain rule from point to node sensitivities.

        Each point sensitivity scales the curve's unit sensitivity at its
        date; results for the same (curve name, currency) accumulate.
        """
        if isinstance(point_sensitivities, ZeroRateSensitivity):
            point_sensitivities = (point_sensitivities,)

        entries = []
        for point in point_sensitivities:
            if point.curve_currency != self.currency:
                raise DomainArgumentError(
                    f"Point sensitivity for a {point.curve_currency} curve passed to "
                    f"{self.currency} discount factors ({self.curve_name})"
                )
            unit = self.unit_parameter_sensitivity(point.date)
            entries.append(
                CurveCurrencyParameterSensitivity(self.curve_name, point.currency, unit.sensitivity * point.sensitivity)
            )
        return CurveCurrencyParameterSensitivities(tuple(entries))

    # ---- curve replacement ----

    def with_curve(self, curve: Curve) -> "ZeroRateDiscountFactors":
        logger.debug("Replacing curve %s with %s", self.curve_name, curve.metadata.curve_name)
        return ZeroRateDiscountFactors(self.currency, self.valuation_date, curve)

    def apply_perturbation(self, perturbation: Callable[[Curve], Curve]) -> "ZeroRateDiscountFactors":
        return self.with_curve(perturbation(self.curve))
