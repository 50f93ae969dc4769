import dataclasses

import numpy as np
import pandas as pd
import pytest

from zero_rate_engine.errors import DomainArgumentError
from zero_rate_engine.sensitivity import (
    CurveCurrencyParameterSensitivities,
    CurveCurrencyParameterSensitivity,
    CurveUnitParameterSensitivity,
    PointSensitivities,
    ZeroRateSensitivity,
)


@pytest.fixture(scope="module")
def date1():
    return pd.Timestamp("2026-08-14")


@pytest.fixture(scope="module")
def date2():
    return pd.Timestamp("2031-02-15")


def test_zero_rate_sensitivity_defaults_currency_to_curve_currency(date1):
    s = ZeroRateSensitivity.of("GBP", date1, -0.5)
    assert s.curve_currency == "GBP"
    assert s.currency == "GBP"
    assert s.date == date1


def test_zero_rate_sensitivity_normalizes_inputs():
    s = ZeroRateSensitivity("gbp", "2026-08-14", "usd", 1)
    assert (s.curve_currency, s.currency) == ("GBP", "USD")
    assert s.date == pd.Timestamp("2026-08-14")
    assert isinstance(s.sensitivity, float)


def test_zero_rate_sensitivity_rejects_bad_currency(date1):
    with pytest.raises(DomainArgumentError):
        ZeroRateSensitivity.of("POUND", date1, 1.0)


def test_zero_rate_sensitivity_transforms(date1):
    s = ZeroRateSensitivity.of("GBP", date1, 2.0)
    assert s.with_currency("USD") == ZeroRateSensitivity.of("GBP", date1, 2.0, "USD")
    assert s.multiplied_by(-3.0).sensitivity == -6.0
    assert s.with_sensitivity(0.25).sensitivity == 0.25
    assert s.sensitivity == 2.0


def test_zero_rate_sensitivity_is_frozen(date1):
    s = ZeroRateSensitivity.of("GBP", date1, 2.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        s.sensitivity = 3.0


def test_point_sensitivities_normalized(date1, date2):
    points = PointSensitivities.of(
        ZeroRateSensitivity.of("GBP", date2, 1.0),
        ZeroRateSensitivity.of("GBP", date1, 2.0),
        ZeroRateSensitivity.of("GBP", date1, 0.5),
        ZeroRateSensitivity.of("GBP", date1, 1.0, "USD"),
    )
    norm = points.normalized()
    assert len(norm) == 3
    assert list(norm) == [
        ZeroRateSensitivity.of("GBP", date1, 2.5),
        ZeroRateSensitivity.of("GBP", date1, 1.0, "USD"),
        ZeroRateSensitivity.of("GBP", date2, 1.0),
    ]


def test_point_sensitivities_combine_and_scale(date1, date2):
    a = PointSensitivities.of(ZeroRateSensitivity.of("GBP", date1, 1.0))
    b = PointSensitivities.of(ZeroRateSensitivity.of("GBP", date2, 2.0))
    both = a.combined_with(b).multiplied_by(10.0)
    assert [s.sensitivity for s in both] == [10.0, 20.0]
    assert len(a) == 1


def test_unit_sensitivity_multiplied_by():
    unit = CurveUnitParameterSensitivity("GBP-DSC", [0.25, 0.75])
    scaled = unit.multiplied_by("GBP", -2.0)
    assert scaled == CurveCurrencyParameterSensitivity("GBP-DSC", "GBP", [-0.5, -1.5])
    assert unit.parameter_count == 2


def test_sensitivity_arrays_are_read_only():
    unit = CurveUnitParameterSensitivity("GBP-DSC", [0.25, 0.75])
    with pytest.raises(ValueError):
        unit.sensitivity[0] = 1.0


def test_parameter_sensitivities_merge_same_key():
    a = CurveCurrencyParameterSensitivity("GBP-DSC", "GBP", [1.0, 2.0])
    b = CurveCurrencyParameterSensitivity("GBP-DSC", "GBP", [0.5, -1.0])
    c = CurveCurrencyParameterSensitivity("GBP-DSC", "USD", [3.0, 3.0])

    sens = CurveCurrencyParameterSensitivities.of(a, b, c)
    assert len(sens) == 2
    assert sens.size() == 2
    assert sens.get("GBP-DSC", "GBP").sensitivity.tolist() == [1.5, 1.0]
    assert sens.get("GBP-DSC", "USD").sensitivity.tolist() == [3.0, 3.0]


def test_parameter_sensitivities_combined_with():
    base = CurveCurrencyParameterSensitivities.empty()
    assert len(base) == 0

    a = CurveCurrencyParameterSensitivity("GBP-DSC", "GBP", [1.0, 2.0])
    b = CurveCurrencyParameterSensitivity("USD-DSC", "USD", [4.0])

    combined = base.combined_with(a).combined_with(CurveCurrencyParameterSensitivities.of(a, b))
    assert combined.keys() == [("GBP-DSC", "GBP"), ("USD-DSC", "USD")]
    assert combined.get("GBP-DSC", "GBP").sensitivity.tolist() == [2.0, 4.0]
    assert combined.total() == {"GBP": 6.0, "USD": 4.0}


def test_parameter_sensitivities_length_mismatch():
    a = CurveCurrencyParameterSensitivity("GBP-DSC", "GBP", [1.0, 2.0])
    b = CurveCurrencyParameterSensitivity("GBP-DSC", "GBP", [1.0, 2.0, 3.0])
    with pytest.raises(DomainArgumentError):
        CurveCurrencyParameterSensitivities.of(a, b)


def test_parameter_sensitivities_get_missing():
    sens = CurveCurrencyParameterSensitivities.of(CurveCurrencyParameterSensitivity("GBP-DSC", "GBP", [1.0]))
    with pytest.raises(KeyError):
        sens.get("GBP-DSC", "EUR")


def test_parameter_sensitivities_multiplied_by_and_tolerance():
    sens = CurveCurrencyParameterSensitivities.of(CurveCurrencyParameterSensitivity("GBP-DSC", "GBP", [1.0, -2.0]))
    scaled = sens.multiplied_by(0.5)
    assert scaled.get("GBP-DSC", "GBP").sensitivity.tolist() == [0.5, -1.0]

    nudged = CurveCurrencyParameterSensitivities.of(
        CurveCurrencyParameterSensitivity("GBP-DSC", "GBP", [0.5 + 1e-9, -1.0])
    )
    assert scaled.equal_with_tolerance(nudged, 1e-8)
    assert not scaled.equal_with_tolerance(nudged, 1e-10)
    assert not scaled.equal_with_tolerance(CurveCurrencyParameterSensitivities.empty(), 1.0)


def test_parameter_sensitivities_equality():
    a = CurveCurrencyParameterSensitivities.of(CurveCurrencyParameterSensitivity("GBP-DSC", "GBP", [1.0, 2.0]))
    b = CurveCurrencyParameterSensitivities.of(CurveCurrencyParameterSensitivity("GBP-DSC", "GBP", [1.0, 2.0]))
    assert a == b
    assert hash(a) == hash(b)


def test_parameter_sensitivities_to_frame():
    sens = CurveCurrencyParameterSensitivities.of(
        CurveCurrencyParameterSensitivity("GBP-DSC", "GBP", [1.0, 2.0]),
        CurveCurrencyParameterSensitivity("USD-DSC", "USD", [3.0]),
    )
    frame = sens.to_frame()
    assert list(frame.columns) == ["curve_name", "currency", "node", "sensitivity"]
    assert len(frame) == 3
    assert frame.groupby("currency")["sensitivity"].sum().to_dict() == {"GBP": 3.0, "USD": 3.0}
    np.testing.assert_array_equal(frame["node"], [0, 1, 0])
