"""SQL Record Repositories — persistence for CCP records, pest checks, and calibrations.

Invariants:
    - Records are stored with their evaluated snapshots (JSON), never live references
    - update() touches only verification and hand-off fields; the verdict is immutable
    - Calibration rows rewrite next_calibration_date on every save (cache refresh)
    - No commit outside save()/update(): each call is one unit of work
"""

import uuid
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from haccp_compliance.core.calibration import CalibrationRecord, compute_next_due
from haccp_compliance.core.domain_types import (
    CalibrationFrequency, CalibrationResult, HazardCategory, PestCheckStatus,
    PestLevel, RecordState, Season, ZoneGrade,
)
from haccp_compliance.core.errors import ResourceNotFoundError
from haccp_compliance.core.evaluate_ccp import CCPRecord, MeasurementValue
from haccp_compliance.core.pest_checks import PestControlCheck, TrapCheck
from haccp_compliance.core.pest_thresholds import TrapEvaluation
from haccp_compliance.models.ccp_record import CCPRecordModel
from haccp_compliance.models.equipment_calibration import EquipmentCalibrationModel
from haccp_compliance.models.pest_control_check import PestControlCheckModel


def _uuid_or_none(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(value)
    except (TypeError, ValueError):
        return None


# ─── CCP records ─────────────────────────────────────────────────

def measurements_to_json(measurements: tuple[MeasurementValue, ...]) -> list[dict]:
    return [
        {
            "parameter_code": m.parameter_code,
            "value": m.value,
            "unit": m.unit,
            "within_limit": m.within_limit,
        }
        for m in measurements
    ]


def ccp_record_from_row(row: CCPRecordModel) -> CCPRecord:
    return CCPRecord(
        id=str(row.id),
        ccp_id=row.ccp_id,
        record_date=row.record_date,
        record_time=row.record_time,
        lot_number=row.lot_number,
        batch_number=row.batch_number,
        measurements=tuple(
            MeasurementValue(
                parameter_code=m["parameter_code"],
                value=m["value"],
                unit=m["unit"],
                within_limit=m["within_limit"],
            )
            for m in row.measurements
        ),
        overall_within_limit=row.overall_within_limit,
        deviation_action=row.deviation_action,
        state=RecordState(row.state),
        verified_at=row.verified_at,
        verified_by=row.verified_by,
        deviation_reference_id=row.deviation_reference_id,
    )


class SqlCCPRecordRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(self, record: CCPRecord, notification_error: str | None = None) -> CCPRecord:
        row = CCPRecordModel(
            id=_uuid_or_none(record.id or "") or uuid.uuid4(),
            ccp_id=record.ccp_id,
            record_date=record.record_date,
            record_time=record.record_time,
            lot_number=record.lot_number,
            batch_number=record.batch_number,
            measurements=measurements_to_json(record.measurements),
            overall_within_limit=record.overall_within_limit,
            deviation_action=record.deviation_action,
            state=record.state.value,
            deviation_reference_id=record.deviation_reference_id,
            notification_error=notification_error,
        )
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return ccp_record_from_row(row)

    async def _get_row(self, record_id: str) -> CCPRecordModel | None:
        key = _uuid_or_none(record_id)
        if key is None:
            return None
        result = await self.db.execute(
            select(CCPRecordModel).where(CCPRecordModel.id == key),
        )
        return result.scalar_one_or_none()

    async def get(self, record_id: str) -> CCPRecord | None:
        row = await self._get_row(record_id)
        return ccp_record_from_row(row) if row else None

    async def update(self, record: CCPRecord) -> CCPRecord:
        row = await self._get_row(record.id or "")
        if row is None:
            raise ResourceNotFoundError("CCPRecord", record.id or "")
        row.state = record.state.value
        row.verified_at = record.verified_at
        row.verified_by = record.verified_by
        row.deviation_reference_id = record.deviation_reference_id
        await self.db.commit()
        return ccp_record_from_row(row)


# ─── Pest control checks ─────────────────────────────────────────

def trap_checks_to_json(trap_checks: tuple[TrapCheck, ...]) -> list[dict]:
    return [
        {
            "trap_location_id": tc.trap_location_id,
            "zone_grade": tc.zone_grade.value,
            "hazard_category": tc.hazard_category.value,
            "catch_count": tc.catch_count,
            "level": int(tc.evaluation.level),
            "status": tc.evaluation.status.value,
            "configured": tc.evaluation.configured,
        }
        for tc in trap_checks
    ]


def trap_checks_from_json(data: list[dict]) -> tuple[TrapCheck, ...]:
    return tuple(
        TrapCheck(
            trap_location_id=item["trap_location_id"],
            zone_grade=ZoneGrade(item["zone_grade"]),
            hazard_category=HazardCategory(item["hazard_category"]),
            catch_count=item["catch_count"],
            evaluation=TrapEvaluation(
                level=PestLevel(item["level"]),
                status=PestCheckStatus(item["status"]),
                configured=item.get("configured", True),
            ),
        )
        for item in data
    )


def pest_check_from_row(row: PestControlCheckModel) -> PestControlCheck:
    return PestControlCheck(
        id=str(row.id),
        check_date=row.check_date,
        season=Season(row.season),
        trap_checks=trap_checks_from_json(row.trap_checks),
        overall_status=PestCheckStatus(row.overall_status),
        unconfigured_trap_ids=tuple(row.unconfigured_trap_ids or ()),
        state=RecordState(row.state),
        verified_at=row.verified_at,
        verified_by=row.verified_by,
        deviation_reference_id=row.deviation_reference_id,
    )


class SqlPestCheckRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(
        self, check: PestControlCheck, notification_error: str | None = None,
    ) -> PestControlCheck:
        row = PestControlCheckModel(
            id=_uuid_or_none(check.id or "") or uuid.uuid4(),
            check_date=check.check_date,
            season=check.season.value,
            trap_checks=trap_checks_to_json(check.trap_checks),
            overall_status=check.overall_status.value,
            unconfigured_trap_ids=list(check.unconfigured_trap_ids),
            state=check.state.value,
            deviation_reference_id=check.deviation_reference_id,
            notification_error=notification_error,
        )
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return pest_check_from_row(row)

    async def _get_row(self, check_id: str) -> PestControlCheckModel | None:
        key = _uuid_or_none(check_id)
        if key is None:
            return None
        result = await self.db.execute(
            select(PestControlCheckModel).where(PestControlCheckModel.id == key),
        )
        return result.scalar_one_or_none()

    async def get(self, check_id: str) -> PestControlCheck | None:
        row = await self._get_row(check_id)
        return pest_check_from_row(row) if row else None

    async def list_by_date(self, check_date: date) -> list[PestControlCheck]:
        result = await self.db.execute(
            select(PestControlCheckModel)
            .where(PestControlCheckModel.check_date == check_date)
            .order_by(PestControlCheckModel.created_at.desc()),
        )
        return [pest_check_from_row(row) for row in result.scalars().all()]

    async def update(self, check: PestControlCheck) -> PestControlCheck:
        row = await self._get_row(check.id or "")
        if row is None:
            raise ResourceNotFoundError("PestControlCheck", check.id or "")
        row.state = check.state.value
        row.verified_at = check.verified_at
        row.verified_by = check.verified_by
        row.deviation_reference_id = check.deviation_reference_id
        await self.db.commit()
        return pest_check_from_row(row)


# ─── Equipment calibration ───────────────────────────────────────

def calibration_from_row(row: EquipmentCalibrationModel) -> CalibrationRecord:
    frequency = CalibrationFrequency(row.frequency)
    return CalibrationRecord(
        equipment_id=row.equipment_id,
        last_calibration_date=row.last_calibration_date,
        frequency=frequency,
        # cache column is not trusted; re-derive
        next_calibration_date=compute_next_due(row.last_calibration_date, frequency),
        result=CalibrationResult(row.result),
        equipment_name=row.equipment_name,
        equipment_type=row.equipment_type,
        provider=row.provider,
        certificate_number=row.certificate_number,
    )


class SqlCalibrationRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_row(self, equipment_id: str) -> EquipmentCalibrationModel | None:
        result = await self.db.execute(
            select(EquipmentCalibrationModel).where(
                EquipmentCalibrationModel.equipment_id == equipment_id,
            ),
        )
        return result.scalar_one_or_none()

    async def get(self, equipment_id: str) -> CalibrationRecord | None:
        row = await self._get_row(equipment_id)
        return calibration_from_row(row) if row else None

    async def save(self, record: CalibrationRecord) -> CalibrationRecord:
        row = await self._get_row(record.equipment_id)
        if row is None:
            row = EquipmentCalibrationModel(equipment_id=record.equipment_id)
            self.db.add(row)
        row.equipment_name = record.equipment_name
        row.equipment_type = record.equipment_type
        row.last_calibration_date = record.last_calibration_date
        row.frequency = record.frequency.value
        row.next_calibration_date = record.next_calibration_date
        row.result = record.result.value
        row.provider = record.provider
        row.certificate_number = record.certificate_number
        row.is_active = True
        await self.db.commit()
        return calibration_from_row(row)

    async def list_active(self, equipment_type: str | None = None) -> list[CalibrationRecord]:
        query = (
            select(EquipmentCalibrationModel)
            .where(EquipmentCalibrationModel.is_active.is_(True))
            .order_by(EquipmentCalibrationModel.next_calibration_date)
        )
        if equipment_type:
            query = query.where(EquipmentCalibrationModel.equipment_type == equipment_type)
        result = await self.db.execute(query)
        return [calibration_from_row(row) for row in result.scalars().all()]
