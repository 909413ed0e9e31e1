"""Pest Monitoring Service — season, snapshots, per-trap scoring, aggregate, hand-off.

Invariants:
    - Season resolved once per check from check_date (unless given explicitly)
    - Standards and trap locations read once each, before any scoring
    - A non-NORMAL check triggers exactly one dispatch_deviation call
    - The check is persisted even when the hand-off fails
"""

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Callable, Mapping

from haccp_compliance.core.domain_types import Season
from haccp_compliance.core.errors import ResourceNotFoundError
from haccp_compliance.core.pest_checks import (
    PestControlCheck, build_pest_deviation_event, evaluate_pest_check,
    verify_pest_check,
)
from haccp_compliance.core.pest_thresholds import PestThresholdMatrix
from haccp_compliance.core.repository_protocols import (
    DeviationNotifier, PestCatalog, PestCheckRepository,
)
from haccp_compliance.core.seasons import DEFAULT_SEASON_CONFIG, SeasonConfig, resolve_season
from haccp_compliance.services.deviation_dispatch import (
    DispatchOutcome, NOT_DISPATCHED, dispatch_deviation,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PestSubmission:
    check: PestControlCheck
    dispatch: DispatchOutcome = NOT_DISPATCHED


class PestMonitoringService:
    """Scores pest control rounds against the tiered standards."""

    def __init__(
        self,
        catalog: PestCatalog,
        checks: PestCheckRepository,
        notifier: DeviationNotifier,
        *,
        season_config: SeasonConfig = DEFAULT_SEASON_CONFIG,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.catalog = catalog
        self.checks = checks
        self.notifier = notifier
        self.season_config = season_config
        self._clock = clock

    async def load_matrix(self, season: Season) -> PestThresholdMatrix:
        return PestThresholdMatrix.from_standards(
            await self.catalog.get_pest_standards(season),
        )

    async def submit_check(
        self,
        check_date: date,
        catches: Mapping[str, object],
        season: Season | None = None,
    ) -> PestSubmission:
        season = season or resolve_season(check_date, self.season_config)
        matrix = await self.load_matrix(season)
        traps = await self.catalog.get_trap_locations()

        check = evaluate_pest_check(check_date, season, catches, traps, matrix)
        check = replace(check, id=str(uuid.uuid4()))
        if check.unconfigured_trap_ids:
            logger.warning(
                f"Traps scored without standards: {list(check.unconfigured_trap_ids)}",
                extra={"check_date": check_date.isoformat()},
            )

        event = build_pest_deviation_event(check, check.id, self._clock())
        dispatch = await dispatch_deviation(self.notifier, event)
        if dispatch.reference_id:
            check = replace(check, deviation_reference_id=dispatch.reference_id)

        saved = await self.checks.save(
            check,
            notification_error=dispatch.error.message if dispatch.error else None,
        )
        logger.info(
            f"Pest check saved ({saved.overall_status.value})",
            extra={
                "check_date": check_date.isoformat(),
                "reference_id": saved.deviation_reference_id,
            },
        )
        return PestSubmission(check=saved, dispatch=dispatch)

    async def get_check(self, check_id: str) -> PestControlCheck:
        check = await self.checks.get(check_id)
        if check is None:
            raise ResourceNotFoundError("PestControlCheck", check_id)
        return check

    async def list_checks(self, check_date: date) -> list[PestControlCheck]:
        """Checks recorded for one day, newest first."""
        return await self.checks.list_by_date(check_date)

    async def verify(self, check_id: str, verifier: str) -> PestControlCheck:
        check = await self.get_check(check_id)
        return await self.checks.update(
            verify_pest_check(check, verifier, self._clock()),
        )
