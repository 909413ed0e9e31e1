"""Pest Control Schemas — check submission and per-trap verdict rendering.

Invariants:
    - PestCheckCreate.catches: at least one trap reading
    - season is optional; when omitted it is resolved from check_date
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from haccp_compliance.core.domain_types import Season
from haccp_compliance.core.pest_checks import PestControlCheck
from haccp_compliance.services.deviation_dispatch import DispatchOutcome


class TrapCatchIn(BaseModel):
    trap_location_id: str = Field(min_length=1, max_length=64)
    catch_count: int | str


class PestCheckCreate(BaseModel):
    check_date: date
    season: Season | None = None
    catches: list[TrapCatchIn] = Field(min_length=1)


class TrapCheckResponse(BaseModel):
    trap_location_id: str
    zone_grade: str
    hazard_category: str
    catch_count: int
    level: int
    status: str
    configured: bool


class PestCheckResponse(BaseModel):
    id: str | None
    check_date: date
    season: str
    overall_status: str
    trap_checks: list[TrapCheckResponse]
    unconfigured_trap_ids: list[str]
    state: str
    verified_at: datetime | None = None
    verified_by: str | None = None
    deviation_reference_id: str | None = None
    notification_error: str | None = None

    @classmethod
    def from_check(
        cls, check: PestControlCheck, dispatch: DispatchOutcome | None = None,
    ) -> "PestCheckResponse":
        return cls(
            id=check.id,
            check_date=check.check_date,
            season=check.season.value,
            overall_status=check.overall_status.value,
            trap_checks=[
                TrapCheckResponse(
                    trap_location_id=tc.trap_location_id,
                    zone_grade=tc.zone_grade.value,
                    hazard_category=tc.hazard_category.value,
                    catch_count=tc.catch_count,
                    level=int(tc.evaluation.level),
                    status=tc.evaluation.status.value,
                    configured=tc.evaluation.configured,
                )
                for tc in check.trap_checks
            ],
            unconfigured_trap_ids=list(check.unconfigured_trap_ids),
            state=check.state.value,
            verified_at=check.verified_at,
            verified_by=check.verified_by,
            deviation_reference_id=check.deviation_reference_id,
            notification_error=(
                dispatch.error.message if dispatch and dispatch.error else None
            ),
        )
