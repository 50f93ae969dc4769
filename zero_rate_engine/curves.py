from __future__ import annotations

import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Protocol, runtime_checkable

from .errors import ConfigurationError
from .utils import DayCount, get_day_count


class ValueType(Enum):
    """Semantic type of a curve's x or y values."""
    YEAR_FRACTION = "YearFraction"
    ZERO_RATE = "ZeroRate"
    DISCOUNT_FACTOR = "DiscountFactor"
    PRICE = "Price"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class CurveMetadata:
    curve_name: str
    x_value_type: ValueType = ValueType.UNKNOWN
    y_value_type: ValueType = ValueType.UNKNOWN
    day_count: Optional[DayCount] = None

    def __post_init__(self) -> None:
        if not self.curve_name:
            raise ConfigurationError("curve_name must not be empty")
        if self.day_count is not None and not isinstance(self.day_count, DayCount):
            object.__setattr__(self, "day_count", get_day_count(self.day_count))


def zero_rates_metadata(curve_name: str, day_count) -> CurveMetadata:
    """Year fraction -> continuously compounded zero rate."""
    return CurveMetadata(curve_name, ValueType.YEAR_FRACTION, ValueType.ZERO_RATE, get_day_count(day_count))


def discount_factors_metadata(curve_name: str, day_count) -> CurveMetadata:
    """Year fraction -> discount factor."""
    return CurveMetadata(curve_name, ValueType.YEAR_FRACTION, ValueType.DISCOUNT_FACTOR, get_day_count(day_count))


def prices_metadata(curve_name: str) -> CurveMetadata:
    """Unknown x -> price, no day count."""
    return CurveMetadata(curve_name, ValueType.UNKNOWN, ValueType.PRICE)


@runtime_checkable
class Curve(Protocol):
    """
    What the discount factor engine needs from a curve.

    Any object exposing these members can be wrapped by the engine; the
    interpolation scheme behind `y_value` is the curve's own business.
    """

    metadata: CurveMetadata

    @property
    def name(self) -> str:
        ...

    @property
    def parameter_count(self) -> int:
        ...

    def y_value(self, x: float) -> float:
        ...

    def y_value_parameter_sensitivity(self, x: float) -> np.ndarray:
        """d y(x) / d node_i for every node parameter, in node order."""
        ...


@dataclass(frozen=True, eq=False)
class InterpolatedNodalCurve:
    """
    Curve defined by nodes, linearly interpolated in y.

    - Within node range: linear interpolation on y.
    - Outside node range: flat extrapolation of the end node values.
    - Node sensitivity at x: the linear weights of the two bracketing nodes
      (a single 1.0 on the end node when extrapolating).
    """
    metadata: CurveMetadata
    x_values: np.ndarray = field(repr=False)
    y_values: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        x = np.array(self.x_values, dtype=float)
        y = np.array(self.y_values, dtype=float)
        if x.ndim != 1 or y.ndim != 1:
            raise ConfigurationError("x_values and y_values must be one-dimensional")
        if len(x) != len(y):
            raise ConfigurationError("x_values and y_values must have the same length")
        if len(x) < 2:
            raise ConfigurationError("Need at least 2 nodes for interpolation")
        if np.any(np.diff(x) <= 0):
            raise ConfigurationError("x_values must be strictly increasing")
        x.setflags(write=False)
        y.setflags(write=False)
        object.__setattr__(self, "x_values", x)
        object.__setattr__(self, "y_values", y)

    @classmethod
    def of(cls, metadata: CurveMetadata, x_values: Iterable[float], y_values: Iterable[float]) -> "InterpolatedNodalCurve":
        return cls(metadata, np.array(list(x_values), dtype=float), np.array(list(y_values), dtype=float))

    @property
    def name(self) -> str:
        return self.metadata.curve_name

    @property
    def parameter_count(self) -> int:
        return len(self.x_values)

    def y_value(self, x: float) -> float:
        # np.interp extrapolates flat by default
        return float(np.interp(x, self.x_values, self.y_values))

    def y_value_parameter_sensitivity(self, x: float) -> np.ndarray:
        kx = self.x_values
        out = np.zeros(len(kx), dtype=float)

        if x <= kx[0]:
            out[0] = 1.0
            return out
        if x >= kx[-1]:
            out[-1] = 1.0
            return out

        i = int(np.searchsorted(kx, x, side="right")) - 1
        w = (x - kx[i]) / (kx[i + 1] - kx[i])
        out[i] = 1.0 - w
        out[i + 1] = w
        return out

    def with_y_values(self, y_values: Iterable[float]) -> "InterpolatedNodalCurve":
        return InterpolatedNodalCurve(self.metadata, self.x_values.copy(), np.array(list(y_values), dtype=float))

    def with_metadata(self, metadata: CurveMetadata) -> "InterpolatedNodalCurve":
        return InterpolatedNodalCurve(metadata, self.x_values.copy(), self.y_values.copy())

    def shifted_by(self, shifts: Iterable[float]) -> "InterpolatedNodalCurve":
        """Add a per-node shift to the y values."""
        shifts = np.array(list(shifts), dtype=float)
        if len(shifts) != self.parameter_count:
            raise ConfigurationError(
                f"Expected {self.parameter_count} node shifts, got {len(shifts)}"
            )
        return self.with_y_values(self.y_values + shifts)

    def __eq__(self, other) -> bool:
        if not isinstance(other, InterpolatedNodalCurve):
            return NotImplemented
        return (
            self.metadata == other.metadata
            and np.array_equal(self.x_values, other.x_values)
            and np.array_equal(self.y_values, other.y_values)
        )

    def __hash__(self) -> int:
        return hash((self.metadata, tuple(self.x_values), tuple(self.y_values)))

    def __repr__(self) -> str:
        return (
            f"InterpolatedNodalCurve({self.name!r}, x={self.x_values.tolist()}, "
            f"y={self.y_values.tolist()})"
        )


def curve_node_report(curve: InterpolatedNodalCurve) -> pd.DataFrame:
    """Per-node QC table for a zero-rate curve: x, zero rate, implied DF."""
    if curve.metadata.y_value_type is not ValueType.ZERO_RATE:
        raise ConfigurationError(f"Curve {curve.name} does not hold zero rates")

    taus = np.asarray(curve.x_values, dtype=float)
    zeros = np.asarray(curve.y_values, dtype=float)
    dfs = np.exp(-zeros * taus)

    return pd.DataFrame(
        {
            "node": np.arange(len(taus)),
            "tau": taus,
            "zero_cc": zeros,
            "df": dfs,
            "df_positive": dfs > 0,
            "df_monotone": np.r_[True, np.diff(dfs) <= 1e-10],
        }
    )
