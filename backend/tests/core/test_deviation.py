"""Tests for deviation — event severity, corrective-action due dates, action numbers."""

from datetime import datetime, timedelta, timezone

import pytest

from haccp_compliance.core.deviation import (
    DeviationEvent, corrective_action_due_dates, format_action_number,
)
from haccp_compliance.core.domain_types import (
    ActionSeverity, DeviationKind, DeviationSource, PestLevel,
)

BASE = datetime(2024, 3, 5, 14, 0, tzinfo=timezone.utc)


def _pest_event(level):
    return DeviationEvent(
        DeviationSource.PEST, DeviationKind.PEST_LEVEL_EXCEEDED, "chk", BASE, level=level,
    )


def test_ccp_events_are_critical():
    event = DeviationEvent(
        DeviationSource.CCP, DeviationKind.CCP_LIMIT_EXCEEDED, "rec", BASE,
    )
    assert event.severity == ActionSeverity.CRITICAL


def test_pest_severity_follows_level():
    assert _pest_event(PestLevel.LEVEL2).severity == ActionSeverity.CRITICAL
    assert _pest_event(PestLevel.LEVEL1).severity == ActionSeverity.HIGH


def test_to_dict_is_json_ready():
    data = _pest_event(PestLevel.LEVEL2).to_dict()
    assert data["level"] == 2
    assert data["severity"] == "CRITICAL"
    assert data["timestamp"] == BASE.isoformat()
    assert data["failing_parameters"] == []


@pytest.mark.parametrize("severity, immediate, verification", [
    (ActionSeverity.CRITICAL, timedelta(hours=4), timedelta(days=7)),
    (ActionSeverity.HIGH, timedelta(hours=24), timedelta(days=14)),
    (ActionSeverity.MEDIUM, timedelta(days=2), timedelta(days=21)),
    (ActionSeverity.LOW, timedelta(days=3), timedelta(days=30)),
])
def test_due_date_schedule(severity, immediate, verification):
    due = corrective_action_due_dates(severity, BASE)
    assert due.immediate == BASE + immediate
    assert due.verification == BASE + verification
    assert due.immediate <= due.root_cause <= due.corrective <= due.verification


def test_action_number_format():
    assert format_action_number(BASE, 1) == "CA-20240305-001"
    assert format_action_number(BASE, 42) == "CA-20240305-042"


def test_action_number_widens_instead_of_wrapping():
    assert format_action_number(BASE, 999) == "CA-20240305-999"
    assert format_action_number(BASE, 1000) == "CA-20240305-1000"
    assert format_action_number(BASE, 1001) != format_action_number(BASE, 1)


@pytest.mark.parametrize("sequence", [0, -1])
def test_action_number_rejects_non_positive_sequence(sequence):
    with pytest.raises(ValueError):
        format_action_number(BASE, sequence)
