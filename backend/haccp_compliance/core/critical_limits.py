"""Critical Limits — limit definitions, measurement parsing, and the single-value check.

Invariants:
    - evaluate_limit is PURE: inclusive bounds, unset bound means "no bound"
    - A CriticalLimit always has min or max; when both, min <= max
    - None means "not entered"; 0 is a real reading and is never treated as unset
    - normalize_limits is the ONLY place that knows about the legacy singular shape

Design Decisions:
    - Frozen dataclasses: limits are catalog snapshots, never mutated during evaluation
    - Parsing separated from evaluation: evaluate_limit only ever sees a finite float
      (ADR: reject malformed input at the boundary, never coerce)
"""

import math
from dataclasses import dataclass
from numbers import Real

from haccp_compliance.core.errors import InvalidLimitError, InvalidMeasurementError


@dataclass(frozen=True)
class CriticalLimit:
    """Acceptable range for one CCP parameter."""
    parameter_code: str
    parameter_name: str
    unit: str
    min: float | None = None
    max: float | None = None

    def __post_init__(self):
        if self.min is None and self.max is None:
            raise InvalidLimitError(
                f"Limit '{self.parameter_code}' needs a min or a max",
                self.parameter_code,
            )
        if self.min is not None and self.max is not None and self.min > self.max:
            raise InvalidLimitError(
                f"Limit '{self.parameter_code}' has min {self.min} > max {self.max}",
                self.parameter_code,
            )

    def describe(self) -> str:
        """Human-readable range, e.g. '85 ~ 100 °C' or '>= 85 °C'."""
        if self.min is not None and self.max is not None:
            return f"{self.min:g} ~ {self.max:g} {self.unit}".strip()
        if self.min is not None:
            return f">= {self.min:g} {self.unit}".strip()
        return f"<= {self.max:g} {self.unit}".strip()


def evaluate_limit(value: float, limit: CriticalLimit) -> bool:
    """True iff value lies within the limit. Bounds are inclusive."""
    if limit.min is not None and value < limit.min:
        return False
    if limit.max is not None and value > limit.max:
        return False
    return True


def parse_measurement_value(parameter_code: str, raw: object) -> float:
    """Accept int/float/Decimal or a numeric string. Reject everything else.

    bool is rejected even though it subclasses int: a checkbox is not a reading.
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidMeasurementError(parameter_code, raw)
    if isinstance(raw, Real):
        value = float(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise InvalidMeasurementError(parameter_code, raw)
        try:
            value = float(text)
        except ValueError:
            raise InvalidMeasurementError(parameter_code, raw) from None
    else:
        try:
            value = float(raw)  # Decimal and friends
        except (TypeError, ValueError):
            raise InvalidMeasurementError(parameter_code, raw) from None
    if not math.isfinite(value):
        raise InvalidMeasurementError(parameter_code, raw)
    return value


# ─── Legacy schema normalization ────────────────────────────────

def _optional_bound(raw: object, parameter_code: str) -> float | None:
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise InvalidLimitError(
            f"Limit '{parameter_code}' has a non-numeric bound: {raw!r}",
            parameter_code,
        ) from None
    if not math.isfinite(value):
        raise InvalidLimitError(
            f"Limit '{parameter_code}' has a non-finite bound: {raw!r}",
            parameter_code,
        )
    return value


def limit_from_dict(data: dict) -> CriticalLimit:
    """Build a CriticalLimit from one stored limit entry.

    Legacy singular entries carry only `parameter` (the display name); that name
    doubles as the code.
    """
    name = data.get("parameter_name") or data.get("parameter") or ""
    code = data.get("parameter_code") or name
    if not code:
        raise InvalidLimitError("Limit entry has no parameter code or name", "")
    return CriticalLimit(
        parameter_code=str(code),
        parameter_name=str(name or code),
        unit=str(data.get("unit") or ""),
        min=_optional_bound(data.get("min"), str(code)),
        max=_optional_bound(data.get("max"), str(code)),
    )


def normalize_limits(raw: dict) -> tuple[CriticalLimit, ...]:
    """Normalize `critical_limit` (singular) or `critical_limits` (plural) to one shape."""
    entries = raw.get("critical_limits")
    if entries is None:
        single = raw.get("critical_limit")
        entries = [single] if single else []
    limits = tuple(limit_from_dict(entry) for entry in entries)
    codes = [limit.parameter_code for limit in limits]
    duplicates = sorted({c for c in codes if codes.count(c) > 1})
    if duplicates:
        raise InvalidLimitError(
            f"Duplicate parameter codes in limit set: {duplicates}", duplicates[0],
        )
    return limits


def limit_to_dict(limit: CriticalLimit) -> dict:
    return {
        "parameter_code": limit.parameter_code,
        "parameter_name": limit.parameter_name,
        "min": limit.min,
        "max": limit.max,
        "unit": limit.unit,
    }
