from __future__ import annotations

import numpy as np
import pandas as pd
from typing import Iterable, Tuple, Union

from .cashflows import present_value, present_value_point_sensitivities
from .compounding import (
    CompoundedRateType,
    discount_factor_with_periodic_spread,
    is_zero_length,
)
from .discount_factors import ZeroRateDiscountFactors
from .scenarios import node_shift, node_shift_bp, parallel_shift
from .sensitivity import (
    CurveCurrencyParameterSensitivities,
    CurveCurrencyParameterSensitivity,
    ZeroRateSensitivity,
)


def _df_at_rate(z: float, t: float, spread: float, compounded_rate_type: CompoundedRateType, periods_per_year: int) -> float:
    if compounded_rate_type is CompoundedRateType.PERIODIC:
        return discount_factor_with_periodic_spread(z, spread, t, periods_per_year)
    return float(np.exp(-(z + spread) * t))


def finite_difference_point_sensitivity(
    discount_factors: ZeroRateDiscountFactors,
    date: pd.Timestamp,
    spread: float = 0.0,
    compounded_rate_type: CompoundedRateType = CompoundedRateType.CONTINUOUS,
    periods_per_year: int = 0,
    eps: float = 1e-6,
) -> float:
    """Central difference [DF(z+eps) - DF(z-eps)] / (2 eps) of the spread-adjusted DF."""
    t = discount_factors.relative_year_fraction(date)
    if is_zero_length(t):
        return 0.0
    z = discount_factors.curve.y_value(t)
    up = _df_at_rate(z + eps, t, spread, compounded_rate_type, periods_per_year)
    dw = _df_at_rate(z - eps, t, spread, compounded_rate_type, periods_per_year)
    return (up - dw) / (2.0 * eps)


def finite_difference_parameter_sensitivity(
    discount_factors: ZeroRateDiscountFactors,
    point_sensitivities: Union[ZeroRateSensitivity, Iterable[ZeroRateSensitivity]],
    eps: float = 1e-6,
) -> CurveCurrencyParameterSensitivities:
    """
    Bump-and-revalue counterpart of `ZeroRateDiscountFactors.parameter_sensitivity`.

    Each node is shifted up and down by eps; the zero rate at every point's
    date is re-read and the central difference scaled by the point value.
    """
    if isinstance(point_sensitivities, ZeroRateSensitivity):
        point_sensitivities = (point_sensitivities,)
    points = list(point_sensitivities)

    n = discount_factors.parameter_count
    bumped = [
        (discount_factors.apply_perturbation(node_shift(k, +eps)), discount_factors.apply_perturbation(node_shift(k, -eps)))
        for k in range(n)
    ]

    entries = []
    for point in points:
        vec = np.empty(n, dtype=float)
        for k, (up, dw) in enumerate(bumped):
            vec[k] = (up.zero_rate(point.date) - dw.zero_rate(point.date)) / (2.0 * eps)
        entries.append(CurveCurrencyParameterSensitivity(discount_factors.curve_name, point.currency, vec * point.sensitivity))
    return CurveCurrencyParameterSensitivities(tuple(entries))


def bucketed_pv01(
    discount_factors: ZeroRateDiscountFactors,
    cashflows: pd.DataFrame,
    bp: float = 1.0,
) -> Tuple[np.ndarray, float]:
    """
    PV change for a bp move of each node alone, and for a parallel bp move.

    For a linear zero curve the node weights sum to one at every date, so the
    bucket sum reconciles to the parallel figure up to convexity.
    """
    base = present_value(discount_factors, cashflows)

    bucket_pnl = []
    for k in range(discount_factors.parameter_count):
        shocked = discount_factors.apply_perturbation(node_shift_bp(k, bp))
        bucket_pnl.append(present_value(shocked, cashflows) - base)

    par = discount_factors.apply_perturbation(parallel_shift(bp))
    par_pv01 = present_value(par, cashflows) - base

    return np.array(bucket_pnl, dtype=float), par_pv01


def analytic_pv01(
    discount_factors: ZeroRateDiscountFactors,
    cashflows: pd.DataFrame,
    bp: float = 1.0,
) -> np.ndarray:
    """First-order bucketed PV01 from point -> parameter sensitivities."""
    points = present_value_point_sensitivities(discount_factors, cashflows)
    sens = discount_factors.parameter_sensitivity(points)
    if len(sens) == 0:
        return np.zeros(discount_factors.parameter_count, dtype=float)
    return sens.get(discount_factors.curve_name, discount_factors.currency).sensitivity * (bp / 10000.0)
