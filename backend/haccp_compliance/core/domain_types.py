"""Domain Types — enums that replace raw status strings across the codebase.

Invariants:
    - All valid states encoded as Enums — no raw string matching
    - PestLevel is ordered: NORMAL < LEVEL1 < LEVEL2 (max() picks the worst)

Design Decisions:
    - str Enums: serialize to JSON without custom encoders (ADR: API and JSON columns)
    - PestLevel as IntEnum: the numeric level IS the severity order
"""

from enum import Enum, IntEnum


# ─── CCP ─────────────────────────────────────────────────────────

class CCPStatus(str, Enum):
    """CCP definition catalog state. MERGED stays readable for history."""
    ACTIVE = "ACTIVE"
    MERGED = "MERGED"


class RecordState(str, Enum):
    """Monitoring record lifecycle: DRAFT -> VERIFIED, exactly once."""
    DRAFT = "DRAFT"
    VERIFIED = "VERIFIED"


# ─── Pest control ────────────────────────────────────────────────

class Season(str, Enum):
    WINTER = "WINTER"
    SUMMER = "SUMMER"


class ZoneGrade(str, Enum):
    """Clean zones tolerate fewer catches than general zones."""
    CLEAN = "CLEAN"
    GENERAL = "GENERAL"


class HazardCategory(str, Enum):
    AIRBORNE = "AIRBORNE"
    CRAWLING = "CRAWLING"
    RODENT = "RODENT"


class PestLevel(IntEnum):
    NORMAL = 0
    LEVEL1 = 1
    LEVEL2 = 2


class PestCheckStatus(str, Enum):
    """Overall status of a pest control check (and of a single trap)."""
    NORMAL = "NORMAL"
    LEVEL1 = "LEVEL1"
    LEVEL2 = "LEVEL2"


STATUS_BY_LEVEL: dict[PestLevel, PestCheckStatus] = {
    PestLevel.NORMAL: PestCheckStatus.NORMAL,
    PestLevel.LEVEL1: PestCheckStatus.LEVEL1,
    PestLevel.LEVEL2: PestCheckStatus.LEVEL2,
}


# ─── Calibration ─────────────────────────────────────────────────

class CalibrationFrequency(str, Enum):
    YEARLY = "YEARLY"
    QUARTERLY = "QUARTERLY"
    MONTHLY = "MONTHLY"
    WEEKLY = "WEEKLY"


class CalibrationState(str, Enum):
    """Derived validity of an instrument calibration. Never persisted as truth."""
    VALID = "VALID"
    EXPIRING = "EXPIRING"
    EXPIRED = "EXPIRED"


class CalibrationResult(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"


# ─── Deviations ──────────────────────────────────────────────────

class DeviationSource(str, Enum):
    CCP = "CCP"
    PEST = "PEST"


class DeviationKind(str, Enum):
    CCP_LIMIT_EXCEEDED = "CCP_LIMIT_EXCEEDED"
    PEST_LEVEL_EXCEEDED = "PEST_LEVEL_EXCEEDED"


class ActionSeverity(str, Enum):
    """Corrective-action urgency. Drives the due-date schedule."""
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
