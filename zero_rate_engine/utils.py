from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

import pandas as pd

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def _normalize(convention: str) -> str:
    return convention.upper().replace(" ", "")


def _act_act_isda(start: pd.Timestamp, end: pd.Timestamp) -> float:
    if start.year == end.year:
        days_in_year = 366.0 if start.is_leap_year else 365.0
        return (end - start).days / days_in_year

    first_year_end = pd.Timestamp(year=start.year + 1, month=1, day=1)
    last_year_start = pd.Timestamp(year=end.year, month=1, day=1)

    yf = (first_year_end - start).days / (366.0 if start.is_leap_year else 365.0)
    yf += end.year - start.year - 1
    yf += (end - last_year_start).days / (366.0 if end.is_leap_year else 365.0)
    return yf


def yearfrac(start: pd.Timestamp, end: pd.Timestamp, convention: str) -> float:
    """
    Year fraction between two dates under a day count convention.

    Supported:
    - ACT/365, ACT/365F
    - ACT/360
    - 30/360, 30/360US (US bond basis)
    - ACT/ACT (ISDA)
    """
    start = pd.Timestamp(start)
    end = pd.Timestamp(end)

    convention = _normalize(convention)
    if end < start:
        raise ValueError(f"end < start: {start=} {end=}")

    if convention in ("ACT/365", "ACT/365F"):
        return (end - start).days / 365.0

    if convention == "ACT/360":
        return (end - start).days / 360.0

    if convention in ("30/360", "30/360US"):
        y1, m1, d1 = start.year, start.month, start.day
        y2, m2, d2 = end.year, end.month, end.day

        # 30/360 US convention
        if d1 == 31:
            d1 = 30
        if d2 == 31 and d1 == 30:
            d2 = 30

        return ((y2 - y1) * 360 + (m2 - m1) * 30 + (d2 - d1)) / 360.0

    if convention in ("ACT/ACT", "ACT/ACTISDA"):
        return _act_act_isda(start, end)

    raise ConfigurationError(f"Unsupported day count convention: {convention}")


@dataclass(frozen=True)
class DayCount:
    """
    Named day count convention.

    `relative_year_fraction` is signed: a target date before the base date
    gives the negated forward year fraction.
    """
    name: str

    def __post_init__(self) -> None:
        if _normalize(self.name) not in _SUPPORTED:
            raise ConfigurationError(f"Unsupported day count convention: {self.name}")

    def year_fraction(self, start: pd.Timestamp, end: pd.Timestamp) -> float:
        return yearfrac(start, end, self.name)

    def relative_year_fraction(self, start: pd.Timestamp, end: pd.Timestamp) -> float:
        start = pd.Timestamp(start)
        end = pd.Timestamp(end)
        if end < start:
            # 30/360 can give a zero fraction for distinct dates; keep it +0.0
            yf = yearfrac(end, start, self.name)
            return -yf if yf else 0.0
        return yearfrac(start, end, self.name)

    def __str__(self) -> str:
        return self.name


_SUPPORTED = ("ACT/365", "ACT/365F", "ACT/360", "30/360", "30/360US", "ACT/ACT", "ACT/ACTISDA")

ACT_365F = DayCount("ACT/365F")
ACT_360 = DayCount("ACT/360")
THIRTY_360 = DayCount("30/360")
ACT_ACT = DayCount("ACT/ACT")

DAY_COUNTS: Dict[str, DayCount] = {
    "ACT/365F": ACT_365F,
    "ACT/365": DayCount("ACT/365"),
    "ACT/360": ACT_360,
    "30/360": THIRTY_360,
    "30/360US": DayCount("30/360US"),
    "ACT/ACT": ACT_ACT,
    "ACT/ACTISDA": ACT_ACT,
}


def get_day_count(name) -> DayCount:
    """Look up a day count by name; DayCount instances pass through."""
    if isinstance(name, DayCount):
        return name
    key = _normalize(str(name))
    if key not in DAY_COUNTS:
        raise ConfigurationError(
            f"Unknown day count convention: {name}. Available: {sorted(DAY_COUNTS)}"
        )
    logger.debug("Resolved day count %s -> %s", name, DAY_COUNTS[key])
    return DAY_COUNTS[key]
