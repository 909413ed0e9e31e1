"""Tests for critical_limits — inclusive range checks, value parsing, legacy limit shapes.

Covers:
    - evaluate_limit: min-only, max-only, two-sided, inclusive bounds (Scenario A)
    - CriticalLimit construction rejects empty and inverted ranges
    - parse_measurement_value: numbers, numeric strings, Decimal, and rejections
    - normalize_limits: singular/plural shapes collapse to one tuple of limits
"""

import math
from decimal import Decimal

import pytest

from haccp_compliance.core.critical_limits import (
    CriticalLimit,
    evaluate_limit,
    limit_from_dict,
    limit_to_dict,
    normalize_limits,
    parse_measurement_value,
)
from haccp_compliance.core.errors import InvalidLimitError, InvalidMeasurementError


def _limit(min=None, max=None, code="T"):
    return CriticalLimit(code, "Core temperature", "°C", min=min, max=max)


# --- evaluate_limit -----------------------------------------------------------

def test_min_bound_is_inclusive():
    limit = _limit(min=85)
    assert evaluate_limit(85, limit) is True
    assert evaluate_limit(84.9, limit) is False


def test_max_bound_is_inclusive():
    limit = _limit(max=4.6)
    assert evaluate_limit(4.6, limit) is True
    assert evaluate_limit(4.61, limit) is False


def test_two_sided_range():
    limit = _limit(min=2, max=8)
    assert evaluate_limit(2, limit)
    assert evaluate_limit(5, limit)
    assert evaluate_limit(8, limit)
    assert not evaluate_limit(1.99, limit)
    assert not evaluate_limit(8.01, limit)


def test_zero_is_a_real_reading():
    limit = _limit(min=0, max=10)
    assert evaluate_limit(0, limit) is True
    assert evaluate_limit(-0.1, limit) is False


@pytest.mark.parametrize("min_, max_", [(None, 10), (0, None), (-5, 5), (3, 3)])
@pytest.mark.parametrize("value", [-10, -5, 0, 3, 5, 10, 11])
def test_evaluate_matches_definition(min_, max_, value):
    limit = _limit(min=min_, max=max_)
    expected = (min_ is None or value >= min_) and (max_ is None or value <= max_)
    assert evaluate_limit(value, limit) is expected


# --- CriticalLimit invariants --------------------------------------------------

def test_limit_requires_a_bound():
    with pytest.raises(InvalidLimitError):
        _limit()


def test_limit_rejects_inverted_range():
    with pytest.raises(InvalidLimitError) as exc:
        _limit(min=10, max=5)
    assert exc.value.http_status == 422


def test_describe_renders_each_shape():
    assert _limit(min=85, max=100).describe() == "85 ~ 100 °C"
    assert _limit(min=85).describe() == ">= 85 °C"
    assert _limit(max=4.6).describe() == "<= 4.6 °C"


# --- parse_measurement_value --------------------------------------------------

@pytest.mark.parametrize("raw, expected", [
    (85, 85.0),
    (4.0, 4.0),
    ("72.5", 72.5),
    ("  0 ", 0.0),
    (Decimal("3.25"), 3.25),
])
def test_parse_accepts_numbers(raw, expected):
    assert parse_measurement_value("T", raw) == expected


@pytest.mark.parametrize("raw", [
    None, "", "   ", "hot", True, False, math.nan, math.inf, "nan", "-inf", [1],
])
def test_parse_rejects_non_numbers(raw):
    with pytest.raises(InvalidMeasurementError) as exc:
        parse_measurement_value("T", raw)
    assert exc.value.code == "INVALID_MEASUREMENT"
    assert exc.value.context.parameter_code == "T"


# --- normalize_limits ---------------------------------------------------------

def test_plural_shape_normalizes():
    limits = normalize_limits({"critical_limits": [
        {"parameter_code": "T", "parameter_name": "Temp", "min": 85, "unit": "°C"},
        {"parameter_code": "pH", "parameter_name": "pH", "max": 4.6, "unit": ""},
    ]})
    assert [lim.parameter_code for lim in limits] == ["T", "pH"]
    assert limits[0].min == 85.0 and limits[0].max is None
    assert limits[1].max == 4.6


def test_singular_legacy_shape_normalizes():
    limits = normalize_limits({
        "critical_limit": {"parameter": "Core temperature", "min": "85", "unit": "°C"},
    })
    assert len(limits) == 1
    assert limits[0].parameter_code == "Core temperature"
    assert limits[0].parameter_name == "Core temperature"
    assert limits[0].min == 85.0


def test_plural_wins_when_both_shapes_present():
    limits = normalize_limits({
        "critical_limit": {"parameter": "old", "min": 1},
        "critical_limits": [{"parameter_code": "new", "max": 2}],
    })
    assert [lim.parameter_code for lim in limits] == ["new"]


def test_missing_limits_normalize_to_empty():
    assert normalize_limits({}) == ()


def test_empty_string_bound_means_unset():
    limit = limit_from_dict({"parameter_code": "T", "min": "", "max": 10})
    assert limit.min is None
    assert limit.max == 10.0


def test_duplicate_codes_rejected():
    with pytest.raises(InvalidLimitError):
        normalize_limits({"critical_limits": [
            {"parameter_code": "T", "min": 1},
            {"parameter_code": "T", "max": 2},
        ]})


def test_non_numeric_bound_rejected():
    with pytest.raises(InvalidLimitError):
        limit_from_dict({"parameter_code": "T", "min": "warm"})


def test_limit_to_dict_reads_back():
    limit = _limit(min=2, max=8)
    assert limit_from_dict(limit_to_dict(limit)) == limit
