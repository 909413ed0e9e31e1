"""CCP Schemas — Pydantic models for CCP monitoring records at the API boundary.

Invariants:
    - CCPRecordCreate.measurements: at least one reading
    - Measurement values arrive unparsed (int/float/str); core parses and rejects NaN
    - JSON booleans are never readings: strict numeric types stop true -> 1.0
    - within_limit and overall_within_limit are response-only (never accepted as input)

Design Decisions:
    - value typed as StrictFloat | StrictInt | str | None: numeric strings from form
      inputs reach parse_measurement_value intact, which owns the rejection rules
"""

from datetime import date, datetime, time

from pydantic import BaseModel, Field, StrictFloat, StrictInt, field_validator

from haccp_compliance.core.critical_limits import CriticalLimit, limit_to_dict
from haccp_compliance.core.evaluate_ccp import CCPDefinition, CCPRecord
from haccp_compliance.services.deviation_dispatch import DispatchOutcome


class MeasurementIn(BaseModel):
    parameter_code: str = Field(min_length=1, max_length=50)
    value: StrictFloat | StrictInt | str | None
    unit: str = Field("", max_length=20)


class CCPRecordCreate(BaseModel):
    """Monitoring submission — lot/batch identify the product run."""
    ccp_id: str = Field(min_length=1, max_length=64)
    record_date: date
    record_time: time
    lot_number: str = Field("", max_length=50)
    batch_number: str = Field("", max_length=50)
    measurements: list[MeasurementIn] = Field(min_length=1)
    deviation_action: str | None = Field(None, max_length=2000)

    @field_validator("ccp_id", "lot_number", "batch_number")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class RecordVerify(BaseModel):
    verified_by: str = Field(min_length=1, max_length=100)


class CriticalLimitResponse(BaseModel):
    parameter_code: str
    parameter_name: str
    unit: str
    min: float | None = None
    max: float | None = None

    @classmethod
    def from_limit(cls, limit: CriticalLimit) -> "CriticalLimitResponse":
        return cls(**limit_to_dict(limit))


class CCPDefinitionResponse(BaseModel):
    id: str
    ccp_number: str
    process: str
    status: str
    critical_limits: list[CriticalLimitResponse]

    @classmethod
    def from_definition(cls, definition: CCPDefinition) -> "CCPDefinitionResponse":
        return cls(
            id=definition.id,
            ccp_number=definition.ccp_number,
            process=definition.process,
            status=definition.status.value,
            critical_limits=[
                CriticalLimitResponse.from_limit(lim) for lim in definition.limits
            ],
        )


class MeasurementResponse(BaseModel):
    parameter_code: str
    value: float
    unit: str
    within_limit: bool


class CCPRecordResponse(BaseModel):
    id: str | None
    ccp_id: str
    record_date: date
    record_time: time
    lot_number: str
    batch_number: str
    measurements: list[MeasurementResponse]
    overall_within_limit: bool
    failing_parameters: list[str]
    deviation_action: str | None
    state: str
    verified_at: datetime | None = None
    verified_by: str | None = None
    deviation_reference_id: str | None = None
    notification_error: str | None = None

    @classmethod
    def from_record(
        cls, record: CCPRecord, dispatch: DispatchOutcome | None = None,
    ) -> "CCPRecordResponse":
        return cls(
            id=record.id,
            ccp_id=record.ccp_id,
            record_date=record.record_date,
            record_time=record.record_time,
            lot_number=record.lot_number,
            batch_number=record.batch_number,
            measurements=[
                MeasurementResponse(
                    parameter_code=m.parameter_code, value=m.value,
                    unit=m.unit, within_limit=m.within_limit,
                )
                for m in record.measurements
            ],
            overall_within_limit=record.overall_within_limit,
            failing_parameters=record.failing_parameters,
            deviation_action=record.deviation_action,
            state=record.state.value,
            verified_at=record.verified_at,
            verified_by=record.verified_by,
            deviation_reference_id=record.deviation_reference_id,
            notification_error=(
                dispatch.error.message if dispatch and dispatch.error else None
            ),
        )
