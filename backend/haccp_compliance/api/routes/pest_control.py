"""Pest Control — submit and verify pest control checks.

Invariants:
    - Season comes from the body or is resolved from check_date with configured months
    - Duplicate trap ids in one submission are rejected before scoring
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from haccp_compliance.config import get_settings
from haccp_compliance.core.errors import DuplicateTrapReadingError
from haccp_compliance.core.seasons import SeasonConfig
from haccp_compliance.infrastructure.corrective_actions import SqlCorrectiveActionNotifier
from haccp_compliance.infrastructure.database import get_db
from haccp_compliance.infrastructure.sql_catalogs import SqlPestCatalog
from haccp_compliance.infrastructure.sql_records import SqlPestCheckRepository
from haccp_compliance.schemas.ccp import RecordVerify
from haccp_compliance.schemas.pest_control import PestCheckCreate, PestCheckResponse
from haccp_compliance.services.pest_monitoring import PestMonitoringService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/pest-control", tags=["pest-control"])


def get_pest_service(db: AsyncSession = Depends(get_db)) -> PestMonitoringService:
    settings = get_settings()
    return PestMonitoringService(
        SqlPestCatalog(db),
        SqlPestCheckRepository(db),
        SqlCorrectiveActionNotifier(db),
        season_config=SeasonConfig(
            winter_start_month=settings.winter_start_month,
            winter_end_month=settings.winter_end_month,
        ),
    )


@router.post(
    "/checks", response_model=PestCheckResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_check(
    body: PestCheckCreate,
    service: PestMonitoringService = Depends(get_pest_service),
):
    catches: dict[str, object] = {}
    for reading in body.catches:
        if reading.trap_location_id in catches:
            raise DuplicateTrapReadingError(reading.trap_location_id)
        catches[reading.trap_location_id] = reading.catch_count
    submission = await service.submit_check(body.check_date, catches, body.season)
    return PestCheckResponse.from_check(submission.check, submission.dispatch)


@router.get("/checks", response_model=list[PestCheckResponse])
async def list_checks(
    check_date: date = Query(...),
    service: PestMonitoringService = Depends(get_pest_service),
):
    """Checks recorded on check_date, newest first."""
    return [
        PestCheckResponse.from_check(c) for c in await service.list_checks(check_date)
    ]


@router.get("/checks/{check_id}", response_model=PestCheckResponse)
async def get_check(
    check_id: str,
    service: PestMonitoringService = Depends(get_pest_service),
):
    return PestCheckResponse.from_check(await service.get_check(check_id))


@router.post("/checks/{check_id}/verify", response_model=PestCheckResponse)
async def verify_check(
    check_id: str,
    body: RecordVerify,
    service: PestMonitoringService = Depends(get_pest_service),
):
    return PestCheckResponse.from_check(
        await service.verify(check_id, body.verified_by),
    )
