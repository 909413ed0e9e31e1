"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Catalog reads return complete snapshots; callers read each catalog once per evaluation
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE their results are never async themselves —
      the shell orchestrates the async calls around the pure logic
"""

from datetime import date
from typing import Protocol

from haccp_compliance.core.calibration import CalibrationRecord
from haccp_compliance.core.deviation import DeviationEvent
from haccp_compliance.core.domain_types import Season
from haccp_compliance.core.evaluate_ccp import CCPDefinition, CCPRecord
from haccp_compliance.core.pest_checks import PestControlCheck, TrapLocation
from haccp_compliance.core.pest_thresholds import PestStandard


class CCPCatalog(Protocol):
    """Read-only CCP definitions. Raises ResourceNotFoundError for unknown ids."""
    async def get_ccp_definition(self, ccp_id: str) -> CCPDefinition: ...
    async def list_ccp_definitions(self) -> list[CCPDefinition]: ...


class PestCatalog(Protocol):
    """Read-only pest standards and trap locations (zone grade resolved)."""
    async def get_pest_standards(self, season: Season) -> list[PestStandard]: ...
    async def get_trap_locations(self) -> list[TrapLocation]: ...


class CCPRecordRepository(Protocol):
    async def save(
        self, record: CCPRecord, notification_error: str | None = None,
    ) -> CCPRecord: ...
    async def get(self, record_id: str) -> CCPRecord | None: ...
    async def update(self, record: CCPRecord) -> CCPRecord: ...


class PestCheckRepository(Protocol):
    async def save(
        self, check: PestControlCheck, notification_error: str | None = None,
    ) -> PestControlCheck: ...
    async def get(self, check_id: str) -> PestControlCheck | None: ...
    async def list_by_date(self, check_date: date) -> list[PestControlCheck]: ...
    async def update(self, check: PestControlCheck) -> PestControlCheck: ...


class CalibrationRepository(Protocol):
    async def get(self, equipment_id: str) -> CalibrationRecord | None: ...
    async def save(self, record: CalibrationRecord) -> CalibrationRecord: ...
    async def list_active(
        self, equipment_type: str | None = None,
    ) -> list[CalibrationRecord]: ...


class DeviationNotifier(Protocol):
    """Corrective-action hand-off. Returns the collaborator's opaque reference id."""
    async def on_deviation(self, event: DeviationEvent) -> str: ...
