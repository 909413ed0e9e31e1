"""Calibration Expiry — next-due arithmetic and the VALID/EXPIRING/EXPIRED classification.

Invariants:
    - All functions are PURE: `today` is always a parameter, never read from a clock
    - compute_next_due uses calendar arithmetic (months, not fixed day counts);
      month-end overflow clamps to the last day of the target month
    - classify is monotonic in time: VALID -> EXPIRING -> EXPIRED, never backward
    - status is derived on every read; CalibrationRecord stores no status field

Design Decisions:
    - Calendar months over 365/91/30-day approximations: renewal certificates are
      issued "one year from", which drifts under fixed counts across leap years
    - Clamp instead of overflow on short months: Jan 31 + 1 month is Feb 28/29,
      never early March
"""

import calendar
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Iterable

from haccp_compliance.core.domain_types import (
    CalibrationFrequency, CalibrationResult, CalibrationState,
)

EXPIRING_WINDOW_DAYS: int = 30

_MONTHS_BY_FREQUENCY: dict[CalibrationFrequency, int] = {
    CalibrationFrequency.YEARLY: 12,
    CalibrationFrequency.QUARTERLY: 3,
    CalibrationFrequency.MONTHLY: 1,
}


@dataclass(frozen=True)
class CalibrationRecord:
    equipment_id: str
    last_calibration_date: date
    frequency: CalibrationFrequency
    next_calibration_date: date
    result: CalibrationResult = CalibrationResult.PASS
    equipment_name: str = ""
    equipment_type: str = ""
    provider: str | None = None
    certificate_number: str | None = None


@dataclass(frozen=True)
class CalibrationStatus:
    status: CalibrationState
    next_calibration_date: date
    days_remaining: int


@dataclass(frozen=True)
class CalibrationSummary:
    total: int = 0
    valid: int = 0
    expiring: int = 0
    expired: int = 0


def add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def compute_next_due(last_calibration_date: date, frequency: CalibrationFrequency) -> date:
    if frequency == CalibrationFrequency.WEEKLY:
        return last_calibration_date + timedelta(days=7)
    return add_months(last_calibration_date, _MONTHS_BY_FREQUENCY[frequency])


def classify(
    today: date, next_due: date, expiring_window_days: int = EXPIRING_WINDOW_DAYS,
) -> CalibrationState:
    remaining = (next_due - today).days
    if remaining < 0:
        return CalibrationState.EXPIRED
    if remaining <= expiring_window_days:
        return CalibrationState.EXPIRING
    return CalibrationState.VALID


def calibration_status(
    record: CalibrationRecord, today: date,
    expiring_window_days: int = EXPIRING_WINDOW_DAYS,
) -> CalibrationStatus:
    """Recomputed on every read. next_calibration_date is re-derived, not trusted."""
    next_due = compute_next_due(record.last_calibration_date, record.frequency)
    return CalibrationStatus(
        status=classify(today, next_due, expiring_window_days),
        next_calibration_date=next_due,
        days_remaining=(next_due - today).days,
    )


def register_calibration(
    equipment_id: str,
    last_calibration_date: date,
    frequency: CalibrationFrequency | None = None,
    result: CalibrationResult | None = None,
    **details,
) -> CalibrationRecord:
    """New equipment record. Frequency defaults to YEARLY, result to PASS."""
    freq = frequency or CalibrationFrequency.YEARLY
    return CalibrationRecord(
        equipment_id=equipment_id,
        last_calibration_date=last_calibration_date,
        frequency=freq,
        next_calibration_date=compute_next_due(last_calibration_date, freq),
        result=result or CalibrationResult.PASS,
        **details,
    )


def renew(
    record: CalibrationRecord,
    new_calibration_date: date,
    result: CalibrationResult,
    new_frequency: CalibrationFrequency | None = None,
) -> CalibrationRecord:
    frequency = new_frequency or record.frequency
    return replace(
        record,
        last_calibration_date=new_calibration_date,
        frequency=frequency,
        next_calibration_date=compute_next_due(new_calibration_date, frequency),
        result=result,
    )


def summarize(
    records: Iterable[CalibrationRecord], today: date,
    expiring_window_days: int = EXPIRING_WINDOW_DAYS,
) -> CalibrationSummary:
    counts = {state: 0 for state in CalibrationState}
    total = 0
    for record in records:
        total += 1
        counts[calibration_status(record, today, expiring_window_days).status] += 1
    return CalibrationSummary(
        total=total,
        valid=counts[CalibrationState.VALID],
        expiring=counts[CalibrationState.EXPIRING],
        expired=counts[CalibrationState.EXPIRED],
    )
