"""Pest Threshold Matrix — tiered trap thresholds keyed by season x zone grade x hazard.

Invariants:
    - PestThresholdMatrix is an immutable snapshot; built once per evaluation
    - Keys (season, zone_grade, hazard_category, level) are unique
    - For a key with both levels, level2.upper_limit >= level1.upper_limit
    - evaluate_catch_count checks level 2 first, then level 1, with >= (the upper
      limit is the first non-conforming count)
    - evaluate_catch_count is monotonic non-decreasing in count
    - No standard for (season, grade, category) -> level 0 with configured=False

Design Decisions:
    - Missing configuration degrades to level 0 instead of raising: monitoring must
      keep working mid-shift, but the UNCONFIGURED flag keeps it distinguishable from
      a verified normal (ADR: availability over strictness, never silent)
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from haccp_compliance.core.domain_types import (
    HazardCategory, PestCheckStatus, PestLevel, Season, STATUS_BY_LEVEL, ZoneGrade,
)
from haccp_compliance.core.errors import InvalidCatchCountError, InvalidStandardError

logger = logging.getLogger(__name__)

StandardKey = tuple[Season, ZoneGrade, HazardCategory, PestLevel]


@dataclass(frozen=True)
class PestStandard:
    season: Season
    zone_grade: ZoneGrade
    hazard_category: HazardCategory
    level: PestLevel
    upper_limit: int
    lower_limit: int = 0

    def __post_init__(self):
        object.__setattr__(self, "season", Season(self.season))
        object.__setattr__(self, "zone_grade", ZoneGrade(self.zone_grade))
        object.__setattr__(self, "hazard_category", HazardCategory(self.hazard_category))
        if self.level not in (PestLevel.LEVEL1, PestLevel.LEVEL2):
            raise InvalidStandardError(f"Standard level must be 1 or 2, got {self.level}")
        object.__setattr__(self, "level", PestLevel(self.level))
        if self.upper_limit < 0 or self.lower_limit < 0:
            raise InvalidStandardError("Standard limits must be non-negative")
        if self.lower_limit > self.upper_limit:
            raise InvalidStandardError(
                f"lower_limit {self.lower_limit} > upper_limit {self.upper_limit} "
                f"for {self.key}"
            )

    @property
    def key(self) -> StandardKey:
        return (self.season, self.zone_grade, self.hazard_category, self.level)


@dataclass(frozen=True)
class TrapEvaluation:
    """Level for one trap reading. configured=False is the UNCONFIGURED signal."""
    level: PestLevel
    status: PestCheckStatus
    configured: bool = True

    @property
    def unconfigured(self) -> bool:
        return not self.configured


UNCONFIGURED = TrapEvaluation(PestLevel.NORMAL, PestCheckStatus.NORMAL, configured=False)


def parse_catch_count(trap_location_id: str, raw: object) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        raise InvalidCatchCountError(trap_location_id, raw)
    return raw


class PestThresholdMatrix:
    """Immutable lookup table of pest standards."""

    def __init__(self, table: Mapping[StandardKey, PestStandard]):
        self._table = MappingProxyType(dict(table))

    @classmethod
    def from_standards(cls, standards: list[PestStandard]) -> "PestThresholdMatrix":
        table: dict[StandardKey, PestStandard] = {}
        for standard in standards:
            if standard.key in table:
                raise InvalidStandardError(f"Duplicate pest standard for {standard.key}")
            table[standard.key] = standard
        _check_level_order(table)
        return cls(table)

    def __len__(self) -> int:
        return len(self._table)

    def lookup(
        self, season: Season, zone_grade: ZoneGrade,
        hazard_category: HazardCategory, level: PestLevel,
    ) -> PestStandard | None:
        return self._table.get((season, zone_grade, hazard_category, level))

    def is_configured(
        self, season: Season, zone_grade: ZoneGrade, hazard_category: HazardCategory,
    ) -> bool:
        return any(
            self.lookup(season, zone_grade, hazard_category, level) is not None
            for level in (PestLevel.LEVEL1, PestLevel.LEVEL2)
        )

    def evaluate_catch_count(
        self, count: int, zone_grade: ZoneGrade,
        hazard_category: HazardCategory, season: Season,
    ) -> TrapEvaluation:
        """Level 2 first, then level 1, else normal."""
        for level in (PestLevel.LEVEL2, PestLevel.LEVEL1):
            standard = self.lookup(season, zone_grade, hazard_category, level)
            if standard is not None and count >= standard.upper_limit:
                return TrapEvaluation(level, STATUS_BY_LEVEL[level])
        if not self.is_configured(season, zone_grade, hazard_category):
            logger.warning(
                f"No pest standard for {season.value}/{zone_grade.value}/"
                f"{hazard_category.value}; reading as level 0 (UNCONFIGURED)",
            )
            return UNCONFIGURED
        return TrapEvaluation(PestLevel.NORMAL, PestCheckStatus.NORMAL)


def _check_level_order(table: dict[StandardKey, PestStandard]) -> None:
    for (season, grade, category, level), level2 in table.items():
        if level != PestLevel.LEVEL2:
            continue
        level1 = table.get((season, grade, category, PestLevel.LEVEL1))
        if level1 is not None and level2.upper_limit < level1.upper_limit:
            raise InvalidStandardError(
                f"Level 2 upper limit {level2.upper_limit} below level 1 "
                f"upper limit {level1.upper_limit} for "
                f"{season.value}/{grade.value}/{category.value}"
            )
