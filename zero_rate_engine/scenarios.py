from __future__ import annotations

import numpy as np
import pandas as pd
from typing import Callable, Dict, Iterable, Optional

from .curves import InterpolatedNodalCurve
from .discount_factors import ZeroRateDiscountFactors

Perturbation = Callable[[InterpolatedNodalCurve], InterpolatedNodalCurve]


def parallel_shift_bp(bp: float):
    s = bp / 10000.0
    return lambda tau: s


def steepener_shift_bp(bp: float, pivot: float = 2.0, long: float = 10.0):
    A = bp / 10000.0

    def f(tau: float) -> float:
        if tau <= pivot:
            return +A
        if tau >= long:
            return -A
        w = (tau - pivot) / (long - pivot)
        return (1 - w) * (+A) + w * (-A)

    return f


def flattener_shift_bp(bp: float, pivot: float = 2.0, long: float = 10.0):
    A = bp / 10000.0

    def f(tau: float) -> float:
        if tau <= pivot:
            return -A
        if tau >= long:
            return +A
        w = (tau - pivot) / (long - pivot)
        return (1 - w) * (-A) + w * (+A)

    return f


def shifted_zeros(shift_func: Callable[[float], float]) -> Perturbation:
    """Perturbation shifting each node zero rate z(x_i) by shift_func(x_i) (decimal)."""

    def perturb(curve: InterpolatedNodalCurve) -> InterpolatedNodalCurve:
        shifts = np.array([shift_func(x) for x in curve.x_values], dtype=float)
        return curve.shifted_by(shifts)

    return perturb


def parallel_shift(bp: float) -> Perturbation:
    return shifted_zeros(parallel_shift_bp(bp))


def node_shift(k: int, shift: float) -> Perturbation:
    """Perturbation moving node k alone by `shift` (decimal)."""

    def perturb(curve: InterpolatedNodalCurve) -> InterpolatedNodalCurve:
        if not (0 <= k < curve.parameter_count):
            raise ValueError(f"node index {k} out of range for {curve.parameter_count} nodes")
        shifts = np.zeros(curve.parameter_count, dtype=float)
        shifts[k] = shift
        return curve.shifted_by(shifts)

    return perturb


def node_shift_bp(k: int, bp: float) -> Perturbation:
    return node_shift(k, bp / 10000.0)


def default_rate_scenarios() -> Dict[str, Perturbation]:
    return {
        "PAR_-50bp": parallel_shift(-50),
        "PAR_-25bp": parallel_shift(-25),
        "PAR_+25bp": parallel_shift(+25),
        "PAR_+50bp": parallel_shift(+50),
        "STEEPENER_25bp": shifted_zeros(steepener_shift_bp(25)),
        "FLATTENER_25bp": shifted_zeros(flattener_shift_bp(25)),
    }


def run_discount_factor_scenarios(
    discount_factors: ZeroRateDiscountFactors,
    dates: Iterable[pd.Timestamp],
    scenarios: Optional[Dict[str, Perturbation]] = None,
) -> pd.DataFrame:
    """
    Discount factors per date under each scenario, plus the change from base.

    Columns: date, base, then `<name>` and `<name>_chg` per scenario.
    """
    if scenarios is None:
        scenarios = default_rate_scenarios()

    dates = [pd.Timestamp(d) for d in dates]
    out = pd.DataFrame({"date": dates, "base": [discount_factors.discount_factor(d) for d in dates]})

    for name, perturbation in scenarios.items():
        shocked = discount_factors.apply_perturbation(perturbation)
        out[name] = [shocked.discount_factor(d) for d in dates]
        out[name + "_chg"] = out[name] - out["base"]

    return out
