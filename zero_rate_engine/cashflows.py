"""
Present value of dated cashflows on a ZeroRateDiscountFactors.

A cashflow table is a DataFrame with a `date` column and an `amount` column
(in the curve currency). Amounts dated on or before the valuation date are
discounted like any other; filtering them is the caller's job.
"""
from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from scipy.optimize import brentq

from .compounding import CompoundedRateType
from .discount_factors import ZeroRateDiscountFactors
from .errors import DomainArgumentError
from .sensitivity import PointSensitivities

logger = logging.getLogger(__name__)


def _check_cashflows(cashflows: pd.DataFrame) -> pd.DataFrame:
    missing = {"date", "amount"} - set(cashflows.columns)
    if missing:
        raise DomainArgumentError(f"Cashflow table missing columns: {sorted(missing)}")
    if cashflows.empty:
        raise DomainArgumentError("Cashflow table is empty.")
    out = cashflows[["date", "amount"]].copy()
    out["date"] = pd.to_datetime(out["date"])
    out["amount"] = out["amount"].astype(float)
    return out


def discount_cashflows(
    discount_factors: ZeroRateDiscountFactors,
    cashflows: pd.DataFrame,
    spread: float = 0.0,
    compounded_rate_type: CompoundedRateType = CompoundedRateType.CONTINUOUS,
    periods_per_year: int = 0,
) -> pd.DataFrame:
    """Cashflow table with `df` and `pv` columns added."""
    cf = _check_cashflows(cashflows)

    unique_dates = sorted(cf["date"].unique())
    df_map = {
        pd.Timestamp(d): discount_factors.discount_factor_with_spread(d, spread, compounded_rate_type, periods_per_year)
        for d in unique_dates
    }

    cf["df"] = cf["date"].map(df_map).astype(float)
    cf["pv"] = cf["amount"] * cf["df"]
    return cf


def present_value(
    discount_factors: ZeroRateDiscountFactors,
    cashflows: pd.DataFrame,
    spread: float = 0.0,
    compounded_rate_type: CompoundedRateType = CompoundedRateType.CONTINUOUS,
    periods_per_year: int = 0,
) -> float:
    cf = discount_cashflows(discount_factors, cashflows, spread, compounded_rate_type, periods_per_year)
    return float(cf["pv"].sum())


def present_value_point_sensitivities(
    discount_factors: ZeroRateDiscountFactors,
    cashflows: pd.DataFrame,
    spread: float = 0.0,
    compounded_rate_type: CompoundedRateType = CompoundedRateType.CONTINUOUS,
    periods_per_year: int = 0,
    sensitivity_currency=None,
) -> PointSensitivities:
    """One zero-rate point sensitivity per cashflow, scaled by its amount."""
    cf = _check_cashflows(cashflows)

    points = []
    for d, amount in zip(cf["date"], cf["amount"]):
        point = discount_factors.zero_rate_point_sensitivity_with_spread(
            d, spread, compounded_rate_type, periods_per_year, sensitivity_currency
        )
        points.append(point.multiplied_by(amount))
    return PointSensitivities(tuple(points))


def implied_spread(
    discount_factors: ZeroRateDiscountFactors,
    cashflows: pd.DataFrame,
    target_pv: float,
    compounded_rate_type: CompoundedRateType = CompoundedRateType.CONTINUOUS,
    periods_per_year: int = 0,
    lower: float = -0.5,
    upper: float = 1.0,
    xtol: float = 1e-14,
) -> float:
    """
    Constant spread over the curve that reprices the cashflows to target_pv.

    Solved with brentq on [lower, upper].
    """
    cf = _check_cashflows(cashflows)

    def residual(s: float) -> float:
        return present_value(discount_factors, cf, s, compounded_rate_type, periods_per_year) - target_pv

    fa, fb = residual(lower), residual(upper)
    if np.sign(fa) == np.sign(fb) and fa != 0.0:
        raise DomainArgumentError(
            f"Root not bracketed on [{lower}, {upper}] for target PV {target_pv} (residuals {fa}, {fb})."
        )

    spread, result = brentq(residual, lower, upper, maxiter=300, xtol=xtol, full_output=True)
    logger.debug(
        "Implied spread %.10f after %d iterations (converged=%s)",
        spread, result.iterations, result.converged,
    )
    return float(spread)
