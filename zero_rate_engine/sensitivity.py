"""
Point and parameter sensitivity value objects.

- ZeroRateSensitivity: d(value) / d(zero rate at one date), tagged with the
  currency it is expressed in and the currency of the curve it belongs to.
- CurveUnitParameterSensitivity: a curve's own node sensitivities, unscaled.
- CurveCurrencyParameterSensitivities: scaled node sensitivities keyed by
  (curve name, currency); entries sharing a key add element-wise.
"""
from __future__ import annotations

import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import DomainArgumentError


def check_currency(ccy: str) -> str:
    ccy = str(ccy).upper()
    if len(ccy) != 3 or not ccy.isalpha():
        raise DomainArgumentError(f"Invalid currency code: {ccy!r}")
    return ccy


def _frozen_array(values) -> np.ndarray:
    arr = np.array(values, dtype=float)
    if arr.ndim != 1:
        raise DomainArgumentError("Sensitivity must be a one-dimensional array")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class ZeroRateSensitivity:
    curve_currency: str
    date: pd.Timestamp
    currency: str
    sensitivity: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "curve_currency", check_currency(self.curve_currency))
        object.__setattr__(self, "currency", check_currency(self.currency))
        object.__setattr__(self, "date", pd.Timestamp(self.date))
        object.__setattr__(self, "sensitivity", float(self.sensitivity))

    @classmethod
    def of(
        cls,
        curve_currency: str,
        date: pd.Timestamp,
        sensitivity: float,
        currency: Optional[str] = None,
    ) -> "ZeroRateSensitivity":
        """Sensitivity currency defaults to the curve currency."""
        return cls(curve_currency, date, curve_currency if currency is None else currency, sensitivity)

    def with_currency(self, currency: str) -> "ZeroRateSensitivity":
        return ZeroRateSensitivity(self.curve_currency, self.date, currency, self.sensitivity)

    def with_sensitivity(self, sensitivity: float) -> "ZeroRateSensitivity":
        return ZeroRateSensitivity(self.curve_currency, self.date, self.currency, sensitivity)

    def multiplied_by(self, factor: float) -> "ZeroRateSensitivity":
        return self.with_sensitivity(self.sensitivity * factor)

    def _key(self) -> Tuple[str, pd.Timestamp, str]:
        return self.curve_currency, self.date, self.currency


@dataclass(frozen=True)
class PointSensitivities:
    """Immutable list of point sensitivities."""
    sensitivities: Tuple[ZeroRateSensitivity, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "sensitivities", tuple(self.sensitivities))

    @classmethod
    def of(cls, *sensitivities: ZeroRateSensitivity) -> "PointSensitivities":
        return cls(tuple(sensitivities))

    def __len__(self) -> int:
        return len(self.sensitivities)

    def __iter__(self) -> Iterator[ZeroRateSensitivity]:
        return iter(self.sensitivities)

    def combined_with(self, other: Iterable[ZeroRateSensitivity]) -> "PointSensitivities":
        return PointSensitivities(self.sensitivities + tuple(other))

    def multiplied_by(self, factor: float) -> "PointSensitivities":
        return PointSensitivities(tuple(s.multiplied_by(factor) for s in self.sensitivities))

    def normalized(self) -> "PointSensitivities":
        """Merge entries with the same curve currency, date and currency, sorted by key."""
        merged: Dict[Tuple[str, pd.Timestamp, str], float] = {}
        for s in self.sensitivities:
            merged[s._key()] = merged.get(s._key(), 0.0) + s.sensitivity
        return PointSensitivities(
            tuple(ZeroRateSensitivity(k[0], k[1], k[2], v) for k, v in sorted(merged.items()))
        )


@dataclass(frozen=True, eq=False)
class CurveUnitParameterSensitivity:
    curve_name: str
    sensitivity: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "sensitivity", _frozen_array(self.sensitivity))

    @property
    def parameter_count(self) -> int:
        return len(self.sensitivity)

    def multiplied_by(self, currency: str, amount: float) -> "CurveCurrencyParameterSensitivity":
        return CurveCurrencyParameterSensitivity(self.curve_name, currency, self.sensitivity * amount)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CurveUnitParameterSensitivity):
            return NotImplemented
        return self.curve_name == other.curve_name and np.array_equal(self.sensitivity, other.sensitivity)

    def __hash__(self) -> int:
        return hash((self.curve_name, tuple(self.sensitivity)))


@dataclass(frozen=True, eq=False)
class CurveCurrencyParameterSensitivity:
    curve_name: str
    currency: str
    sensitivity: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "currency", check_currency(self.currency))
        object.__setattr__(self, "sensitivity", _frozen_array(self.sensitivity))

    @property
    def key(self) -> Tuple[str, str]:
        return self.curve_name, self.currency

    @property
    def parameter_count(self) -> int:
        return len(self.sensitivity)

    def plus(self, other: "CurveCurrencyParameterSensitivity") -> "CurveCurrencyParameterSensitivity":
        if other.key != self.key:
            raise DomainArgumentError(f"Cannot add sensitivities for {other.key} to {self.key}")
        if other.parameter_count != self.parameter_count:
            raise DomainArgumentError(
                f"Sensitivity length mismatch for {self.key}: "
                f"{self.parameter_count} vs {other.parameter_count}"
            )
        return CurveCurrencyParameterSensitivity(self.curve_name, self.currency, self.sensitivity + other.sensitivity)

    def multiplied_by(self, factor: float) -> "CurveCurrencyParameterSensitivity":
        return CurveCurrencyParameterSensitivity(self.curve_name, self.currency, self.sensitivity * factor)

    def total(self) -> float:
        return float(self.sensitivity.sum())

    def __eq__(self, other) -> bool:
        if not isinstance(other, CurveCurrencyParameterSensitivity):
            return NotImplemented
        return self.key == other.key and np.array_equal(self.sensitivity, other.sensitivity)

    def __hash__(self) -> int:
        return hash((self.key, tuple(self.sensitivity)))


@dataclass(frozen=True)
class CurveCurrencyParameterSensitivities:
    """
    Node sensitivities aggregated by (curve name, currency).

    Construction and `combined_with` both merge entries sharing a key by
    element-wise addition, so each key appears at most once.
    """
    sensitivities: Tuple[CurveCurrencyParameterSensitivity, ...] = ()

    def __post_init__(self) -> None:
        merged: Dict[Tuple[str, str], CurveCurrencyParameterSensitivity] = {}
        for s in self.sensitivities:
            merged[s.key] = merged[s.key].plus(s) if s.key in merged else s
        object.__setattr__(self, "sensitivities", tuple(merged[k] for k in sorted(merged)))

    @classmethod
    def empty(cls) -> "CurveCurrencyParameterSensitivities":
        return cls(())

    @classmethod
    def of(cls, *sensitivities: CurveCurrencyParameterSensitivity) -> "CurveCurrencyParameterSensitivities":
        return cls(tuple(sensitivities))

    def __len__(self) -> int:
        return len(self.sensitivities)

    def size(self) -> int:
        return len(self)

    def __iter__(self) -> Iterator[CurveCurrencyParameterSensitivity]:
        return iter(self.sensitivities)

    def keys(self) -> List[Tuple[str, str]]:
        return [s.key for s in self.sensitivities]

    def get(self, curve_name: str, currency: str) -> CurveCurrencyParameterSensitivity:
        key = (curve_name, check_currency(currency))
        for s in self.sensitivities:
            if s.key == key:
                return s
        raise KeyError(f"No sensitivity for curve {curve_name!r} in {currency}")

    def combined_with(self, other) -> "CurveCurrencyParameterSensitivities":
        """Accepts another collection or a single entry."""
        if isinstance(other, CurveCurrencyParameterSensitivity):
            other = (other,)
        return CurveCurrencyParameterSensitivities(self.sensitivities + tuple(other))

    def multiplied_by(self, factor: float) -> "CurveCurrencyParameterSensitivities":
        return CurveCurrencyParameterSensitivities(tuple(s.multiplied_by(factor) for s in self.sensitivities))

    def total(self) -> Dict[str, float]:
        """Sum of all node sensitivities per currency."""
        out: Dict[str, float] = {}
        for s in self.sensitivities:
            out[s.currency] = out.get(s.currency, 0.0) + s.total()
        return out

    def equal_with_tolerance(self, other: "CurveCurrencyParameterSensitivities", tolerance: float) -> bool:
        if self.keys() != other.keys():
            return False
        for a, b in zip(self.sensitivities, other.sensitivities):
            if a.parameter_count != b.parameter_count:
                return False
            if not np.allclose(a.sensitivity, b.sensitivity, rtol=0.0, atol=tolerance):
                return False
        return True

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for s in self.sensitivities:
            for i, v in enumerate(s.sensitivity):
                rows.append((s.curve_name, s.currency, i, float(v)))
        return pd.DataFrame(rows, columns=["curve_name", "currency", "node", "sensitivity"])
