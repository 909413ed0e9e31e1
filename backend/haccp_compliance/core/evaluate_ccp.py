"""CCP Record Evaluation — multi-parameter measurements -> one record-level verdict.

Invariants:
    - evaluate_ccp_record is PURE: no IO, no clock, no catalog reads
    - overall_within_limit == AND(m.within_limit for m in measurements), never vacuous
    - within_limit is always derived here; callers cannot supply it
    - Every measurement must match a limit by parameter_code (no silent skipping)
    - A non-conforming record yields exactly one DeviationEvent
    - VERIFIED records are immutable (ensure_record_mutable guards every edit)

Design Decisions:
    - Raise typed errors (not error dicts): submissions are rejected wholesale,
      there is no partial verdict to return
    - MERGED definitions evaluate normally: the catalog, not the evaluator,
      decides what is selectable for new records (ADR: historical lookups stay valid)
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time

from haccp_compliance.core.critical_limits import (
    CriticalLimit, evaluate_limit, parse_measurement_value,
)
from haccp_compliance.core.deviation import DeviationEvent
from haccp_compliance.core.domain_types import (
    CCPStatus, DeviationKind, DeviationSource, RecordState,
)
from haccp_compliance.core.errors import (
    EmptyMeasurementSetError,
    MissingDeviationActionError,
    RecordAlreadyVerifiedError,
    UnknownParameterError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CCPDefinition:
    """Catalog snapshot of one CCP. Read-only for this engine."""
    id: str
    ccp_number: str
    process: str
    limits: tuple[CriticalLimit, ...]
    status: CCPStatus = CCPStatus.ACTIVE

    def limit_for(self, parameter_code: str) -> CriticalLimit | None:
        for limit in self.limits:
            if limit.parameter_code == parameter_code:
                return limit
        return None


@dataclass(frozen=True)
class MeasurementInput:
    """Raw reading as submitted. value is unparsed on purpose."""
    parameter_code: str
    value: object
    unit: str = ""


@dataclass(frozen=True)
class MeasurementValue:
    parameter_code: str
    value: float
    unit: str
    within_limit: bool


@dataclass(frozen=True)
class CCPRecord:
    ccp_id: str
    record_date: date
    record_time: time
    lot_number: str
    batch_number: str
    measurements: tuple[MeasurementValue, ...]
    overall_within_limit: bool
    deviation_action: str | None = None
    state: RecordState = RecordState.DRAFT
    id: str | None = None
    verified_at: datetime | None = None
    verified_by: str | None = None
    deviation_reference_id: str | None = None

    @property
    def failing_parameters(self) -> list[str]:
        return [m.parameter_code for m in self.measurements if not m.within_limit]


@dataclass(frozen=True)
class CCPEvaluation:
    """Verdict plus the events the shell must emit for it."""
    record: CCPRecord
    deviation_events: tuple[DeviationEvent, ...] = field(default_factory=tuple)


def select_active_definitions(
    definitions: list[CCPDefinition],
) -> list[CCPDefinition]:
    """Definitions selectable for NEW records. MERGED ones are history only."""
    return [d for d in definitions if d.status == CCPStatus.ACTIVE]


def evaluate_measurements(
    measurements: list[MeasurementInput],
    limits: tuple[CriticalLimit, ...],
    ccp_id: str | None = None,
) -> tuple[MeasurementValue, ...]:
    """Derive within_limit for each reading against its own limit."""
    if not measurements:
        raise EmptyMeasurementSetError(ccp_id)
    by_code = {limit.parameter_code: limit for limit in limits}
    evaluated = []
    for m in measurements:
        limit = by_code.get(m.parameter_code)
        if limit is None:
            raise UnknownParameterError(m.parameter_code, ccp_id)
        value = parse_measurement_value(m.parameter_code, m.value)
        evaluated.append(MeasurementValue(
            parameter_code=m.parameter_code,
            value=value,
            unit=m.unit or limit.unit,
            within_limit=evaluate_limit(value, limit),
        ))
    return tuple(evaluated)


def build_ccp_deviation_event(
    record: CCPRecord, limits: tuple[CriticalLimit, ...],
    source_id: str, timestamp: datetime,
) -> DeviationEvent:
    """One event per record; details taken from the first failing parameter."""
    failing = [m for m in record.measurements if not m.within_limit]
    first = failing[0]
    limit = next(lim for lim in limits if lim.parameter_code == first.parameter_code)
    return DeviationEvent(
        source_type=DeviationSource.CCP,
        kind=DeviationKind.CCP_LIMIT_EXCEEDED,
        source_id=source_id,
        timestamp=timestamp,
        parameter_code=first.parameter_code,
        measured_value=first.value,
        limit=limit.describe(),
        failing_parameters=tuple(m.parameter_code for m in failing),
        description=(
            f"CCP {record.ccp_id} lot {record.lot_number}: "
            f"{first.parameter_code}={first.value:g} outside {limit.describe()}"
        ),
    )


def evaluate_ccp_record(
    definition: CCPDefinition,
    measurements: list[MeasurementInput],
    *,
    record_date: date,
    record_time: time,
    lot_number: str = "",
    batch_number: str = "",
    deviation_action: str | None = None,
    require_deviation_action: bool = True,
    evaluated_at: datetime | None = None,
    record_id: str | None = None,
) -> CCPEvaluation:
    """Evaluate one monitoring event against a CCP definition snapshot.

    The deviation event is keyed by record_id when given, else by the CCP id.
    """
    values = evaluate_measurements(measurements, definition.limits, definition.id)
    overall = all(m.within_limit for m in values)
    action = (deviation_action or "").strip() or None

    record = CCPRecord(
        ccp_id=definition.id,
        record_date=record_date,
        record_time=record_time,
        lot_number=lot_number,
        batch_number=batch_number,
        measurements=values,
        overall_within_limit=overall,
        deviation_action=action,
        id=record_id,
    )
    if overall:
        return CCPEvaluation(record=record)

    if require_deviation_action and action is None:
        raise MissingDeviationActionError(record.failing_parameters, definition.id)

    timestamp = evaluated_at or datetime.combine(record_date, record_time)
    event = build_ccp_deviation_event(
        record, definition.limits, record_id or definition.id, timestamp,
    )
    logger.info(
        f"CCP {definition.ccp_number} out of limit: {record.failing_parameters}",
        extra={"ccp_id": definition.id},
    )
    return CCPEvaluation(record=record, deviation_events=(event,))


def ensure_record_mutable(record: CCPRecord) -> None:
    if record.state == RecordState.VERIFIED:
        raise RecordAlreadyVerifiedError(record.id or record.ccp_id)


def verify_record(record: CCPRecord, verifier: str, at: datetime) -> CCPRecord:
    """DRAFT -> VERIFIED. Returns a new record; the input is untouched."""
    ensure_record_mutable(record)
    return replace(
        record, state=RecordState.VERIFIED, verified_at=at, verified_by=verifier,
    )
