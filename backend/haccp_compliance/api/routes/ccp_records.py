"""CCP Records — submit, read, and verify CCP monitoring records.

Invariants:
    - Routes never evaluate limits (delegated to CCPMonitoringService -> core)
    - A failed deviation hand-off still returns 201 with notification_error set
    - Domain errors propagate to the global HaccpError handler

Design Decisions:
    - Service built per request from the request's AsyncSession: catalog, record
      repository and notifier share one transaction scope
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from haccp_compliance.config import get_settings
from haccp_compliance.core.evaluate_ccp import MeasurementInput
from haccp_compliance.infrastructure.corrective_actions import SqlCorrectiveActionNotifier
from haccp_compliance.infrastructure.database import get_db
from haccp_compliance.infrastructure.sql_catalogs import SqlCCPCatalog
from haccp_compliance.infrastructure.sql_records import SqlCCPRecordRepository
from haccp_compliance.schemas.ccp import (
    CCPDefinitionResponse, CCPRecordCreate, CCPRecordResponse, RecordVerify,
)
from haccp_compliance.services.ccp_monitoring import CCPMonitoringService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ccp", tags=["ccp"])


def get_ccp_service(db: AsyncSession = Depends(get_db)) -> CCPMonitoringService:
    return CCPMonitoringService(
        SqlCCPCatalog(db),
        SqlCCPRecordRepository(db),
        SqlCorrectiveActionNotifier(db),
        require_deviation_action=get_settings().require_deviation_action,
    )


@router.get("/definitions", response_model=list[CCPDefinitionResponse])
async def list_definitions(
    service: CCPMonitoringService = Depends(get_ccp_service),
):
    """ACTIVE definitions only: MERGED CCPs are not selectable for new records."""
    return [
        CCPDefinitionResponse.from_definition(d)
        for d in await service.list_selectable()
    ]


@router.post(
    "/records", response_model=CCPRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_record(
    body: CCPRecordCreate,
    service: CCPMonitoringService = Depends(get_ccp_service),
):
    submission = await service.submit_record(
        body.ccp_id,
        [
            MeasurementInput(m.parameter_code, m.value, m.unit)
            for m in body.measurements
        ],
        record_date=body.record_date,
        record_time=body.record_time,
        lot_number=body.lot_number,
        batch_number=body.batch_number,
        deviation_action=body.deviation_action,
    )
    return CCPRecordResponse.from_record(submission.record, submission.dispatch)


@router.get("/records/{record_id}", response_model=CCPRecordResponse)
async def get_record(
    record_id: str,
    service: CCPMonitoringService = Depends(get_ccp_service),
):
    return CCPRecordResponse.from_record(await service.get_record(record_id))


@router.post("/records/{record_id}/verify", response_model=CCPRecordResponse)
async def verify_record(
    record_id: str,
    body: RecordVerify,
    service: CCPMonitoringService = Depends(get_ccp_service),
):
    return CCPRecordResponse.from_record(
        await service.verify(record_id, body.verified_by),
    )
