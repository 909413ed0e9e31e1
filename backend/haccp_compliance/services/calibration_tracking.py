"""Calibration Tracking Service — register, renew, and report equipment calibration.

Invariants:
    - Status is recomputed from (today, next due) on every read, never loaded
    - `today` always comes from the caller
    - Renewal replaces last_calibration_date and refreshes the next-due cache
"""

import logging
from dataclasses import dataclass
from datetime import date

from haccp_compliance.core.calibration import (
    CalibrationRecord, CalibrationStatus, CalibrationSummary,
    EXPIRING_WINDOW_DAYS, calibration_status, register_calibration, renew, summarize,
)
from haccp_compliance.core.domain_types import (
    CalibrationFrequency, CalibrationResult, CalibrationState,
)
from haccp_compliance.core.errors import ResourceNotFoundError
from haccp_compliance.core.repository_protocols import CalibrationRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EquipmentCalibrationView:
    record: CalibrationRecord
    status: CalibrationStatus


@dataclass(frozen=True)
class CalibrationOverview:
    items: list[EquipmentCalibrationView]
    summary: CalibrationSummary


class CalibrationTrackingService:
    def __init__(
        self, repository: CalibrationRepository,
        *, expiring_window_days: int = EXPIRING_WINDOW_DAYS,
    ):
        self.repository = repository
        self.expiring_window_days = expiring_window_days

    def _view(self, record: CalibrationRecord, today: date) -> EquipmentCalibrationView:
        return EquipmentCalibrationView(
            record=record,
            status=calibration_status(record, today, self.expiring_window_days),
        )

    async def _get(self, equipment_id: str) -> CalibrationRecord:
        record = await self.repository.get(equipment_id)
        if record is None:
            raise ResourceNotFoundError("Equipment", equipment_id)
        return record

    async def register(
        self,
        equipment_id: str,
        last_calibration_date: date,
        today: date,
        frequency: CalibrationFrequency | None = None,
        result: CalibrationResult | None = None,
        **details,
    ) -> EquipmentCalibrationView:
        record = register_calibration(
            equipment_id, last_calibration_date, frequency, result, **details,
        )
        saved = await self.repository.save(record)
        return self._view(saved, today)

    async def renew(
        self,
        equipment_id: str,
        new_calibration_date: date,
        result: CalibrationResult,
        today: date,
        new_frequency: CalibrationFrequency | None = None,
    ) -> EquipmentCalibrationView:
        current = await self._get(equipment_id)
        saved = await self.repository.save(
            renew(current, new_calibration_date, result, new_frequency),
        )
        logger.info(
            f"Calibration renewed, next due {saved.next_calibration_date.isoformat()}",
            extra={"equipment_id": equipment_id},
        )
        return self._view(saved, today)

    async def status(self, equipment_id: str, today: date) -> EquipmentCalibrationView:
        return self._view(await self._get(equipment_id), today)

    async def overview(
        self, today: date, equipment_type: str | None = None,
        expiring_only: bool = False,
    ) -> CalibrationOverview:
        """All active equipment with derived status. Summary always covers the full set."""
        records = await self.repository.list_active(equipment_type)
        items = [self._view(r, today) for r in records]
        if expiring_only:
            items = [
                item for item in items
                if item.status.status != CalibrationState.VALID
            ]
        return CalibrationOverview(
            items=items,
            summary=summarize(records, today, self.expiring_window_days),
        )
