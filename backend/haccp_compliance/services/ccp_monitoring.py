"""CCP Monitoring Service — snapshot, evaluate, hand off, persist.

Invariants:
    - The CCP definition is read exactly once per submission (single snapshot)
    - A non-conforming record triggers exactly one dispatch_deviation call
    - The verdict is persisted and returned even when the hand-off fails;
      the failure travels back in CCPSubmission.dispatch.error
    - Verification goes through core.verify_record (DRAFT -> VERIFIED once)

Design Decisions:
    - Impureim sandwich: async reads, pure evaluate_ccp_record, async writes
    - Record id minted before evaluation so the deviation event can reference it
"""

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timezone
from typing import Callable

from haccp_compliance.core.errors import ResourceNotFoundError
from haccp_compliance.core.evaluate_ccp import (
    CCPDefinition, CCPRecord, MeasurementInput,
    evaluate_ccp_record, select_active_definitions, verify_record,
)
from haccp_compliance.core.repository_protocols import (
    CCPCatalog, CCPRecordRepository, DeviationNotifier,
)
from haccp_compliance.services.deviation_dispatch import (
    DispatchOutcome, NOT_DISPATCHED, dispatch_deviation,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CCPSubmission:
    record: CCPRecord
    dispatch: DispatchOutcome = NOT_DISPATCHED


class CCPMonitoringService:
    """Records CCP monitoring events against the CCP catalog."""

    def __init__(
        self,
        catalog: CCPCatalog,
        records: CCPRecordRepository,
        notifier: DeviationNotifier,
        *,
        require_deviation_action: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.catalog = catalog
        self.records = records
        self.notifier = notifier
        self.require_deviation_action = require_deviation_action
        self._clock = clock

    async def list_selectable(self) -> list[CCPDefinition]:
        return select_active_definitions(await self.catalog.list_ccp_definitions())

    async def submit_record(
        self,
        ccp_id: str,
        measurements: list[MeasurementInput],
        *,
        record_date: date,
        record_time: time,
        lot_number: str = "",
        batch_number: str = "",
        deviation_action: str | None = None,
    ) -> CCPSubmission:
        definition = await self.catalog.get_ccp_definition(ccp_id)
        evaluation = evaluate_ccp_record(
            definition,
            measurements,
            record_date=record_date,
            record_time=record_time,
            lot_number=lot_number,
            batch_number=batch_number,
            deviation_action=deviation_action,
            require_deviation_action=self.require_deviation_action,
            evaluated_at=self._clock(),
            record_id=str(uuid.uuid4()),
        )
        record = evaluation.record

        dispatch = NOT_DISPATCHED
        for event in evaluation.deviation_events:
            dispatch = await dispatch_deviation(self.notifier, event)
        if dispatch.reference_id:
            record = replace(record, deviation_reference_id=dispatch.reference_id)

        saved = await self.records.save(
            record,
            notification_error=dispatch.error.message if dispatch.error else None,
        )
        logger.info(
            f"CCP record saved (within_limit={saved.overall_within_limit})",
            extra={"ccp_id": ccp_id, "reference_id": saved.deviation_reference_id},
        )
        return CCPSubmission(record=saved, dispatch=dispatch)

    async def get_record(self, record_id: str) -> CCPRecord:
        record = await self.records.get(record_id)
        if record is None:
            raise ResourceNotFoundError("CCPRecord", record_id)
        return record

    async def verify(self, record_id: str, verifier: str) -> CCPRecord:
        record = await self.get_record(record_id)
        verified = verify_record(record, verifier, self._clock())
        return await self.records.update(verified)
