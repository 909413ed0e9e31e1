"""Calibration Schemas — registration, renewal, and derived status views."""

from datetime import date

from pydantic import BaseModel, Field

from haccp_compliance.core.domain_types import CalibrationFrequency, CalibrationResult
from haccp_compliance.services.calibration_tracking import (
    CalibrationOverview, EquipmentCalibrationView,
)


class CalibrationRegister(BaseModel):
    equipment_id: str = Field(min_length=1, max_length=64)
    last_calibration_date: date
    frequency: CalibrationFrequency | None = None
    result: CalibrationResult | None = None
    equipment_name: str = Field("", max_length=200)
    equipment_type: str = Field("", max_length=50)
    provider: str | None = Field(None, max_length=200)
    certificate_number: str | None = Field(None, max_length=100)


class CalibrationRenew(BaseModel):
    calibration_date: date
    result: CalibrationResult
    frequency: CalibrationFrequency | None = None


class CalibrationStatusResponse(BaseModel):
    equipment_id: str
    equipment_name: str
    equipment_type: str
    last_calibration_date: date
    frequency: str
    result: str
    next_calibration_date: date
    status: str
    days_remaining: int
    provider: str | None = None
    certificate_number: str | None = None

    @classmethod
    def from_view(cls, view: EquipmentCalibrationView) -> "CalibrationStatusResponse":
        record, status = view.record, view.status
        return cls(
            equipment_id=record.equipment_id,
            equipment_name=record.equipment_name,
            equipment_type=record.equipment_type,
            last_calibration_date=record.last_calibration_date,
            frequency=record.frequency.value,
            result=record.result.value,
            next_calibration_date=status.next_calibration_date,
            status=status.status.value,
            days_remaining=status.days_remaining,
            provider=record.provider,
            certificate_number=record.certificate_number,
        )


class CalibrationSummaryResponse(BaseModel):
    total: int
    valid: int
    expiring: int
    expired: int


class CalibrationOverviewResponse(BaseModel):
    today: date
    items: list[CalibrationStatusResponse]
    summary: CalibrationSummaryResponse

    @classmethod
    def from_overview(
        cls, today: date, overview: CalibrationOverview,
    ) -> "CalibrationOverviewResponse":
        s = overview.summary
        return cls(
            today=today,
            items=[CalibrationStatusResponse.from_view(v) for v in overview.items],
            summary=CalibrationSummaryResponse(
                total=s.total, valid=s.valid, expiring=s.expiring, expired=s.expired,
            ),
        )
