"""Calibration — equipment registration, renewal, and expiry overview.

Invariants:
    - `today` is read at this edge only (query param, defaulting to date.today())
    - Status in every response is derived at read time
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from haccp_compliance.config import get_settings
from haccp_compliance.infrastructure.database import get_db
from haccp_compliance.infrastructure.sql_records import SqlCalibrationRepository
from haccp_compliance.schemas.calibration import (
    CalibrationOverviewResponse, CalibrationRegister, CalibrationRenew,
    CalibrationStatusResponse,
)
from haccp_compliance.services.calibration_tracking import CalibrationTrackingService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/calibration", tags=["calibration"])


def get_calibration_service(
    db: AsyncSession = Depends(get_db),
) -> CalibrationTrackingService:
    return CalibrationTrackingService(
        SqlCalibrationRepository(db),
        expiring_window_days=get_settings().calibration_expiring_window_days,
    )


@router.get("", response_model=CalibrationOverviewResponse)
async def calibration_overview(
    today: date | None = Query(None),
    equipment_type: str | None = Query(None, max_length=50),
    expiring_only: bool = Query(False),
    service: CalibrationTrackingService = Depends(get_calibration_service),
):
    """Active equipment with status; summary counts always cover the full set."""
    today = today or date.today()
    overview = await service.overview(today, equipment_type, expiring_only)
    return CalibrationOverviewResponse.from_overview(today, overview)


@router.post(
    "", response_model=CalibrationStatusResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_equipment(
    body: CalibrationRegister,
    today: date | None = Query(None),
    service: CalibrationTrackingService = Depends(get_calibration_service),
):
    view = await service.register(
        body.equipment_id,
        body.last_calibration_date,
        today or date.today(),
        frequency=body.frequency,
        result=body.result,
        equipment_name=body.equipment_name,
        equipment_type=body.equipment_type,
        provider=body.provider,
        certificate_number=body.certificate_number,
    )
    return CalibrationStatusResponse.from_view(view)


@router.get("/{equipment_id}", response_model=CalibrationStatusResponse)
async def calibration_status(
    equipment_id: str,
    today: date | None = Query(None),
    service: CalibrationTrackingService = Depends(get_calibration_service),
):
    view = await service.status(equipment_id, today or date.today())
    return CalibrationStatusResponse.from_view(view)


@router.post("/{equipment_id}/renew", response_model=CalibrationStatusResponse)
async def renew_calibration(
    equipment_id: str,
    body: CalibrationRenew,
    today: date | None = Query(None),
    service: CalibrationTrackingService = Depends(get_calibration_service),
):
    view = await service.renew(
        equipment_id, body.calibration_date, body.result,
        today or date.today(), new_frequency=body.frequency,
    )
    return CalibrationStatusResponse.from_view(view)
