"""SQL Catalogs — SQLAlchemy implementations of CCPCatalog and PestCatalog.

Invariants:
    - Every method returns a complete snapshot in one query; nothing is lazily re-read
    - Rows are converted to frozen core dataclasses before leaving this module
    - Legacy singular limit rows are normalized here, never downstream
    - SQLAlchemy failures surface as CatalogUnavailableError (no verdict attempted)
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from haccp_compliance.core.critical_limits import normalize_limits
from haccp_compliance.core.domain_types import (
    CCPStatus, HazardCategory, Season, ZoneGrade,
)
from haccp_compliance.core.errors import CatalogUnavailableError, ResourceNotFoundError
from haccp_compliance.core.evaluate_ccp import CCPDefinition
from haccp_compliance.core.pest_checks import TrapLocation
from haccp_compliance.core.pest_thresholds import PestStandard
from haccp_compliance.models.ccp_definition import CCPDefinitionModel
from haccp_compliance.models.pest_catalog import (
    PestStandardModel, TrapLocationModel,
)

logger = logging.getLogger(__name__)


def definition_from_row(row: CCPDefinitionModel) -> CCPDefinition:
    limits = row.critical_limits
    # dict rows are the legacy singular {"critical_limit": {...}} shape
    raw = limits if isinstance(limits, dict) else {"critical_limits": limits}
    return CCPDefinition(
        id=row.id,
        ccp_number=row.ccp_number,
        process=row.process,
        limits=normalize_limits(raw),
        status=CCPStatus(row.status),
    )


def standard_from_row(row: PestStandardModel) -> PestStandard:
    return PestStandard(
        season=Season(row.season),
        zone_grade=ZoneGrade(row.zone_grade),
        hazard_category=HazardCategory(row.hazard_category),
        level=row.level,
        upper_limit=row.upper_limit,
        lower_limit=row.lower_limit,
    )


def trap_from_row(row: TrapLocationModel) -> TrapLocation:
    return TrapLocation(
        id=row.id,
        zone_id=row.zone_id,
        zone_grade=ZoneGrade(row.zone.grade),
        hazard_category=HazardCategory(row.hazard_category),
        trap_type=row.trap_type,
        location_code=row.location_code,
    )


class SqlCCPCatalog:
    """CCPCatalog backed by the ccp_definitions table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_ccp_definition(self, ccp_id: str) -> CCPDefinition:
        try:
            result = await self.db.execute(
                select(CCPDefinitionModel).where(CCPDefinitionModel.id == ccp_id),
            )
        except SQLAlchemyError as e:
            logger.error(f"CCP catalog read failed: {e}", extra={"ccp_id": ccp_id})
            raise CatalogUnavailableError("ccp_definitions", str(e)) from e
        row = result.scalar_one_or_none()
        if row is None:
            raise ResourceNotFoundError("CCPDefinition", ccp_id)
        return definition_from_row(row)

    async def list_ccp_definitions(self) -> list[CCPDefinition]:
        try:
            result = await self.db.execute(
                select(CCPDefinitionModel).order_by(CCPDefinitionModel.ccp_number),
            )
        except SQLAlchemyError as e:
            logger.error(f"CCP catalog read failed: {e}")
            raise CatalogUnavailableError("ccp_definitions", str(e)) from e
        return [definition_from_row(row) for row in result.scalars().all()]


class SqlPestCatalog:
    """PestCatalog backed by pest_standards / trap_locations / pest_zones."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_pest_standards(self, season: Season) -> list[PestStandard]:
        try:
            result = await self.db.execute(
                select(PestStandardModel).where(
                    PestStandardModel.season == season.value,
                ),
            )
        except SQLAlchemyError as e:
            logger.error(f"Pest standards read failed: {e}")
            raise CatalogUnavailableError("pest_standards", str(e)) from e
        return [standard_from_row(row) for row in result.scalars().all()]

    async def get_trap_locations(self) -> list[TrapLocation]:
        try:
            result = await self.db.execute(
                select(TrapLocationModel).where(TrapLocationModel.is_active.is_(True)),
            )
        except SQLAlchemyError as e:
            logger.error(f"Trap locations read failed: {e}")
            raise CatalogUnavailableError("trap_locations", str(e)) from e
        return [trap_from_row(row) for row in result.scalars().all()]
