"""In-memory collaborators for service tests — protocol fakes and catalog data.

Invariants:
    - Fakes satisfy the repository protocols without IO
    - Every call is recorded so tests can assert "read once" and "notified once"
"""

from dataclasses import replace
from datetime import datetime, timezone

from haccp_compliance.core.critical_limits import CriticalLimit
from haccp_compliance.core.domain_types import (
    CCPStatus, HazardCategory, PestLevel, Season, ZoneGrade,
)
from haccp_compliance.core.errors import ResourceNotFoundError
from haccp_compliance.core.evaluate_ccp import CCPDefinition
from haccp_compliance.core.pest_checks import TrapLocation
from haccp_compliance.core.pest_thresholds import PestStandard

FIXED_NOW = datetime(2024, 6, 3, 9, 30, tzinfo=timezone.utc)


# --- fake collaborators ---------------------------------------------------------

class FakeCCPCatalog:
    def __init__(self, definitions: list[CCPDefinition]):
        self.definitions = {d.id: d for d in definitions}
        self.reads: list[str] = []

    async def get_ccp_definition(self, ccp_id: str) -> CCPDefinition:
        self.reads.append(ccp_id)
        if ccp_id not in self.definitions:
            raise ResourceNotFoundError("CCPDefinition", ccp_id)
        return self.definitions[ccp_id]

    async def list_ccp_definitions(self) -> list[CCPDefinition]:
        return list(self.definitions.values())


class FakePestCatalog:
    def __init__(self, standards: list[PestStandard], traps: list[TrapLocation]):
        self.standards = standards
        self.traps = traps
        self.standard_reads: list[Season] = []
        self.trap_reads = 0

    async def get_pest_standards(self, season: Season) -> list[PestStandard]:
        self.standard_reads.append(season)
        return [s for s in self.standards if s.season == season]

    async def get_trap_locations(self) -> list[TrapLocation]:
        self.trap_reads += 1
        return list(self.traps)


class InMemoryRepository:
    """Satisfies CCPRecordRepository and PestCheckRepository."""

    def __init__(self):
        self.items: dict[str, object] = {}
        self.notification_errors: dict[str, str | None] = {}

    async def save(self, item, notification_error=None):
        self.items[item.id] = item
        self.notification_errors[item.id] = notification_error
        return item

    async def get(self, item_id):
        return self.items.get(item_id)

    async def list_by_date(self, check_date):
        return [
            i for i in reversed(list(self.items.values()))
            if getattr(i, "check_date", None) == check_date
        ]

    async def update(self, item):
        if item.id not in self.items:
            raise ResourceNotFoundError("Record", item.id)
        self.items[item.id] = item
        return item


class InMemoryCalibrationRepository:
    def __init__(self):
        self.items = {}

    async def get(self, equipment_id):
        return self.items.get(equipment_id)

    async def save(self, record):
        self.items[record.equipment_id] = record
        return record

    async def list_active(self, equipment_type=None):
        return [
            r for r in self.items.values()
            if not equipment_type or r.equipment_type == equipment_type
        ]


class RecordingNotifier:
    def __init__(self):
        self.events = []

    async def on_deviation(self, event) -> str:
        self.events.append(event)
        return f"CA-20240603-{len(self.events):03d}"


class FailingNotifier:
    def __init__(self, exc: Exception | None = None):
        self.exc = exc or ConnectionError("notification service unreachable")
        self.calls = 0

    async def on_deviation(self, event) -> str:
        self.calls += 1
        raise self.exc


# --- catalog data ----------------------------------------------------------------

STERILIZATION = CCPDefinition(
    id="ccp-1b",
    ccp_number="CCP-1B",
    process="Sterilization",
    limits=(
        CriticalLimit("T", "Core temperature", "°C", min=85),
        CriticalLimit("pH", "Acidity", "", min=4.2, max=4.6),
    ),
)

SUMMER_STANDARDS = [
    PestStandard(Season.SUMMER, ZoneGrade.CLEAN, HazardCategory.RODENT, PestLevel.LEVEL1, 2),
    PestStandard(Season.SUMMER, ZoneGrade.CLEAN, HazardCategory.RODENT, PestLevel.LEVEL2, 5),
    PestStandard(Season.WINTER, ZoneGrade.CLEAN, HazardCategory.RODENT, PestLevel.LEVEL1, 1),
    PestStandard(Season.WINTER, ZoneGrade.CLEAN, HazardCategory.RODENT, PestLevel.LEVEL2, 3),
]

TRAPS = [
    TrapLocation("R-01", "zone-a", ZoneGrade.CLEAN, HazardCategory.RODENT),
    TrapLocation("R-02", "zone-a", ZoneGrade.CLEAN, HazardCategory.RODENT),
    TrapLocation("F-01", "zone-b", ZoneGrade.GENERAL, HazardCategory.AIRBORNE),
]

MERGED_STERILIZATION = replace(
    STERILIZATION, id="ccp-old", ccp_number="CCP-0", status=CCPStatus.MERGED,
)
