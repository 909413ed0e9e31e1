"""Season Resolution — maps a check date to the pest-control season.

Invariants:
    - resolve_season is PURE: the date is always passed in
    - Winter ranges may wrap the year end (Nov..Mar); every month maps to exactly one season

Design Decisions:
    - Month granularity only: standards are authored per season, not per week
"""

from dataclasses import dataclass
from datetime import date

from haccp_compliance.core.domain_types import Season


@dataclass(frozen=True)
class SeasonConfig:
    winter_start_month: int = 11
    winter_end_month: int = 3

    def __post_init__(self):
        for month in (self.winter_start_month, self.winter_end_month):
            if not 1 <= month <= 12:
                raise ValueError(f"month out of range: {month}")


DEFAULT_SEASON_CONFIG = SeasonConfig()


def is_winter_month(month: int, config: SeasonConfig = DEFAULT_SEASON_CONFIG) -> bool:
    start, end = config.winter_start_month, config.winter_end_month
    if start > end:
        return month >= start or month <= end
    return start <= month <= end


def resolve_season(day: date, config: SeasonConfig = DEFAULT_SEASON_CONFIG) -> Season:
    return Season.WINTER if is_winter_month(day.month, config) else Season.SUMMER
