"""Request schema validation — boundary checks before the compliance core runs.

Invariants:
    - CCPRecordCreate requires at least one measurement
    - Measurement values stay unparsed (numeric strings reach the core intact)
    - Boolean measurement values are rejected, never coerced to 1.0 or 0.0
    - PestCheckCreate requires at least one catch; season optional
    - CalibrationRegister frequency/result restricted to known enums
"""

import pytest
from pydantic import ValidationError

from haccp_compliance.core.domain_types import CalibrationFrequency, Season
from haccp_compliance.schemas.calibration import CalibrationRegister
from haccp_compliance.schemas.ccp import CCPRecordCreate, RecordVerify
from haccp_compliance.schemas.pest_control import PestCheckCreate


def _ccp(**overrides):
    data = {
        "ccp_id": " ccp-1b ",
        "record_date": "2024-06-03",
        "record_time": "09:30",
        "measurements": [{"parameter_code": "T", "value": "85.5"}],
    }
    data.update(overrides)
    return CCPRecordCreate(**data)


# --- CCPRecordCreate -------------------------------------------------------------

def test_ccp_id_is_stripped():
    assert _ccp().ccp_id == "ccp-1b"


def test_numeric_string_value_kept_as_string():
    assert _ccp().measurements[0].value == "85.5"


def test_missing_value_allowed_through_to_core():
    body = _ccp(measurements=[{"parameter_code": "T", "value": None}])
    assert body.measurements[0].value is None


@pytest.mark.parametrize("flag", [True, False])
def test_boolean_value_rejected(flag):
    with pytest.raises(ValidationError):
        _ccp(measurements=[{"parameter_code": "pH", "value": flag}])


def test_zero_reading_kept():
    body = _ccp(measurements=[{"parameter_code": "T", "value": 0}])
    assert body.measurements[0].value == 0
    assert body.measurements[0].value is not False


def test_empty_measurements_rejected():
    with pytest.raises(ValidationError):
        _ccp(measurements=[])


def test_deviation_action_optional():
    assert _ccp().deviation_action is None


def test_verifier_required():
    with pytest.raises(ValidationError):
        RecordVerify(verified_by="")


# --- PestCheckCreate -------------------------------------------------------------

def test_pest_check_season_optional():
    body = PestCheckCreate(
        check_date="2024-07-01",
        catches=[{"trap_location_id": "R-01", "catch_count": 0}],
    )
    assert body.season is None


def test_pest_check_season_parsed():
    body = PestCheckCreate(
        check_date="2024-07-01", season="WINTER",
        catches=[{"trap_location_id": "R-01", "catch_count": 0}],
    )
    assert body.season == Season.WINTER


def test_pest_check_requires_catches():
    with pytest.raises(ValidationError):
        PestCheckCreate(check_date="2024-07-01", catches=[])


# --- CalibrationRegister -----------------------------------------------------------

def test_calibration_defaults_left_to_core():
    body = CalibrationRegister(equipment_id="thermo-1", last_calibration_date="2024-01-01")
    assert body.frequency is None
    assert body.result is None


def test_calibration_frequency_enum():
    body = CalibrationRegister(
        equipment_id="thermo-1", last_calibration_date="2024-01-01", frequency="MONTHLY",
    )
    assert body.frequency == CalibrationFrequency.MONTHLY


def test_calibration_unknown_frequency_rejected():
    with pytest.raises(ValidationError):
        CalibrationRegister(
            equipment_id="thermo-1", last_calibration_date="2024-01-01", frequency="DAILY",
        )
