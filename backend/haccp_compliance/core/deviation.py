"""Deviation Events — the shape handed to the corrective-action subsystem.

Invariants:
    - One DeviationEvent per non-conforming record or check, never per parameter
    - timestamp is supplied by the caller (core never reads the clock)
    - corrective_action_due_dates is PURE and total over ActionSeverity

Design Decisions:
    - Event built in core, delivered by shell: the notifier does IO, the event does not
      (ADR: ExMA impureim sandwich)
    - Severity derived from the deviation, not chosen by the operator:
      CCP limit breaches and pest level 2 are CRITICAL, pest level 1 is HIGH
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from haccp_compliance.core.domain_types import (
    ActionSeverity, DeviationKind, DeviationSource, PestLevel,
)


@dataclass(frozen=True)
class DeviationEvent:
    """Non-conforming verdict, as emitted to the corrective-action collaborator."""
    source_type: DeviationSource
    kind: DeviationKind
    source_id: str
    timestamp: datetime
    parameter_code: str | None = None
    measured_value: float | None = None
    limit: str | None = None
    level: PestLevel | None = None
    failing_parameters: tuple[str, ...] = field(default_factory=tuple)
    description: str = ""

    @property
    def severity(self) -> ActionSeverity:
        return severity_for(self)

    def to_dict(self) -> dict:
        return {
            "source_type": self.source_type.value,
            "kind": self.kind.value,
            "source_id": self.source_id,
            "timestamp": self.timestamp.isoformat(),
            "parameter_code": self.parameter_code,
            "measured_value": self.measured_value,
            "limit": self.limit,
            "level": int(self.level) if self.level is not None else None,
            "failing_parameters": list(self.failing_parameters),
            "description": self.description,
            "severity": self.severity.value,
        }


def severity_for(event: DeviationEvent) -> ActionSeverity:
    if event.kind == DeviationKind.CCP_LIMIT_EXCEEDED:
        return ActionSeverity.CRITICAL
    if event.level == PestLevel.LEVEL2:
        return ActionSeverity.CRITICAL
    return ActionSeverity.HIGH


@dataclass(frozen=True)
class CorrectiveActionDueDates:
    immediate: datetime
    root_cause: datetime
    corrective: datetime
    verification: datetime


# severity -> (immediate, root cause, corrective, verification) offsets
_DUE_OFFSETS: dict[ActionSeverity, tuple[timedelta, timedelta, timedelta, timedelta]] = {
    ActionSeverity.CRITICAL: (
        timedelta(hours=4), timedelta(days=1), timedelta(days=3), timedelta(days=7),
    ),
    ActionSeverity.HIGH: (
        timedelta(hours=24), timedelta(days=3), timedelta(days=7), timedelta(days=14),
    ),
    ActionSeverity.MEDIUM: (
        timedelta(days=2), timedelta(days=5), timedelta(days=14), timedelta(days=21),
    ),
    ActionSeverity.LOW: (
        timedelta(days=3), timedelta(days=7), timedelta(days=21), timedelta(days=30),
    ),
}


def corrective_action_due_dates(
    severity: ActionSeverity, base: datetime,
) -> CorrectiveActionDueDates:
    """Deadline schedule for a corrective action opened at `base`."""
    immediate, root_cause, corrective, verification = _DUE_OFFSETS[severity]
    return CorrectiveActionDueDates(
        immediate=base + immediate,
        root_cause=base + root_cause,
        corrective=base + corrective,
        verification=base + verification,
    )


def format_action_number(opened_at: datetime, sequence: int) -> str:
    """CA-YYYYMMDD-NNN. Zero-padded to three digits, wider past 999 (never wraps)."""
    if sequence < 1:
        raise ValueError(f"Action sequence must be positive, got {sequence}")
    return f"CA-{opened_at:%Y%m%d}-{sequence:03d}"
