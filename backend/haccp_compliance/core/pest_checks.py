"""Pest Check Aggregation — per-trap snapshots reduced to one overall check status.

Invariants:
    - TrapCheck copies zone_grade and hazard_category at check time; a later zone
      edit never changes a past verdict
    - calculate_overall_status reads only TrapCheck snapshots (never live config)
    - calculate_overall_status is order-invariant: worst level wins
    - overall_status is always recomputable from trap_checks

Design Decisions:
    - Reduction via max() over PestLevel (IntEnum): precedence IS the numeric order
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Iterable, Mapping

from haccp_compliance.core.deviation import DeviationEvent
from haccp_compliance.core.domain_types import (
    DeviationKind, DeviationSource, HazardCategory, PestCheckStatus,
    PestLevel, RecordState, Season, STATUS_BY_LEVEL, ZoneGrade,
)
from haccp_compliance.core.errors import (
    EmptyTrapCheckSetError, RecordAlreadyVerifiedError, UnknownTrapLocationError,
)
from haccp_compliance.core.pest_thresholds import (
    PestThresholdMatrix, TrapEvaluation, parse_catch_count,
)


@dataclass(frozen=True)
class TrapLocation:
    """Trap catalog entry with its zone grade already resolved."""
    id: str
    zone_id: str
    zone_grade: ZoneGrade
    hazard_category: HazardCategory
    trap_type: str = ""
    location_code: str = ""


@dataclass(frozen=True)
class TrapCheck:
    trap_location_id: str
    zone_grade: ZoneGrade
    hazard_category: HazardCategory
    catch_count: int
    evaluation: TrapEvaluation


@dataclass(frozen=True)
class PestControlCheck:
    check_date: date
    season: Season
    trap_checks: tuple[TrapCheck, ...]
    overall_status: PestCheckStatus
    unconfigured_trap_ids: tuple[str, ...] = field(default_factory=tuple)
    state: RecordState = RecordState.DRAFT
    id: str | None = None
    verified_at: datetime | None = None
    verified_by: str | None = None
    deviation_reference_id: str | None = None

    @property
    def worst_level(self) -> PestLevel:
        return worst_level(self.trap_checks)


def snapshot_trap_check(
    trap: TrapLocation, catch_count: int,
    matrix: PestThresholdMatrix, season: Season,
) -> TrapCheck:
    evaluation = matrix.evaluate_catch_count(
        catch_count, trap.zone_grade, trap.hazard_category, season,
    )
    return TrapCheck(
        trap_location_id=trap.id,
        zone_grade=trap.zone_grade,
        hazard_category=trap.hazard_category,
        catch_count=catch_count,
        evaluation=evaluation,
    )


def worst_level(trap_checks: Iterable[TrapCheck]) -> PestLevel:
    return max(
        (tc.evaluation.level for tc in trap_checks), default=PestLevel.NORMAL,
    )


def calculate_overall_status(trap_checks: Iterable[TrapCheck]) -> PestCheckStatus:
    """LEVEL2 if any trap is level 2, else LEVEL1 if any is level 1, else NORMAL."""
    return STATUS_BY_LEVEL[worst_level(trap_checks)]


def evaluate_pest_check(
    check_date: date,
    season: Season,
    catches: Mapping[str, object],
    traps: Iterable[TrapLocation],
    matrix: PestThresholdMatrix,
) -> PestControlCheck:
    """Score every reading against one standards snapshot and aggregate."""
    if not catches:
        raise EmptyTrapCheckSetError()
    trap_by_id = {t.id: t for t in traps}
    trap_checks = []
    for trap_id in sorted(catches):
        trap = trap_by_id.get(trap_id)
        if trap is None:
            raise UnknownTrapLocationError(trap_id)
        count = parse_catch_count(trap_id, catches[trap_id])
        trap_checks.append(snapshot_trap_check(trap, count, matrix, season))
    checks = tuple(trap_checks)
    return PestControlCheck(
        check_date=check_date,
        season=season,
        trap_checks=checks,
        overall_status=calculate_overall_status(checks),
        unconfigured_trap_ids=tuple(
            tc.trap_location_id for tc in checks if tc.evaluation.unconfigured
        ),
    )


def build_pest_deviation_event(
    check: PestControlCheck, source_id: str, timestamp: datetime,
) -> DeviationEvent | None:
    """None for a NORMAL check; otherwise one event carrying the worst level."""
    level = check.worst_level
    if level == PestLevel.NORMAL:
        return None
    exceeded = [
        tc.trap_location_id for tc in check.trap_checks
        if tc.evaluation.level == level
    ]
    worst = max(
        (tc for tc in check.trap_checks if tc.evaluation.level == level),
        key=lambda tc: tc.catch_count,
    )
    return DeviationEvent(
        source_type=DeviationSource.PEST,
        kind=DeviationKind.PEST_LEVEL_EXCEEDED,
        source_id=source_id,
        timestamp=timestamp,
        measured_value=float(worst.catch_count),
        level=level,
        failing_parameters=tuple(exceeded),
        description=(
            f"Pest check {check.check_date.isoformat()} ({check.season.value}): "
            f"{check.overall_status.value} at traps {exceeded}"
        ),
    )


def verify_pest_check(
    check: PestControlCheck, verifier: str, at: datetime,
) -> PestControlCheck:
    if check.state == RecordState.VERIFIED:
        raise RecordAlreadyVerifiedError(check.id or check.check_date.isoformat())
    return replace(
        check, state=RecordState.VERIFIED, verified_at=at, verified_by=verifier,
    )
