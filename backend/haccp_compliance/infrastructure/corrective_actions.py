"""Corrective Action Recorder — SQL implementation of the DeviationNotifier boundary.

Invariants:
    - on_deviation writes exactly one corrective_actions row per event
    - The returned reference id is the action number (CA-YYYYMMDD-NNN, widening past 999)
    - Severity and due dates come from core.deviation, never from the caller
    - The row is flushed, never committed here: it commits with the record that
      references it, or not at all
    - on_deviation runs before the caller writes anything in the session; a
      numbering collision rolls the session back and renumbers

Design Decisions:
    - Next number = highest numeric suffix of the day + 1, not a row count:
      gaps and widened numbers never map back onto an existing number
    - Unique action_number is the arbiter under concurrent writers; the loser
      of a race retries with a fresh read, bounded by MAX_NUMBERING_ATTEMPTS
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import Integer, cast, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from haccp_compliance.core.deviation import (
    DeviationEvent, corrective_action_due_dates, format_action_number,
)
from haccp_compliance.models.corrective_action import CorrectiveActionModel

logger = logging.getLogger(__name__)

MAX_NUMBERING_ATTEMPTS = 5


class SqlCorrectiveActionNotifier:
    """Opens a corrective action for each deviation event."""

    def __init__(self, db: AsyncSession, clock=None):
        self.db = db
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def _next_sequence(self, opened_at: datetime) -> int:
        prefix = f"CA-{opened_at:%Y%m%d}-"
        suffix = cast(
            func.substr(CorrectiveActionModel.action_number, len(prefix) + 1),
            Integer,
        )
        result = await self.db.execute(
            select(func.max(suffix)).where(
                CorrectiveActionModel.action_number.like(f"{prefix}%"),
            ),
        )
        return (result.scalar_one() or 0) + 1

    async def on_deviation(self, event: DeviationEvent) -> str:
        opened_at = self._clock()
        severity = event.severity
        due = corrective_action_due_dates(severity, opened_at)
        for attempt in range(1, MAX_NUMBERING_ATTEMPTS + 1):
            try:
                action_number = format_action_number(
                    opened_at, await self._next_sequence(opened_at),
                )
                self.db.add(CorrectiveActionModel(
                    action_number=action_number,
                    source_type=event.source_type.value,
                    source_id=event.source_id,
                    kind=event.kind.value,
                    severity=severity.value,
                    problem_description=event.description or event.kind.value,
                    event=event.to_dict(),
                    immediate_due_at=due.immediate,
                    due_date=due.corrective.date(),
                    created_at=opened_at,
                ))
                await self.db.flush()
                break
            except IntegrityError:
                await self.db.rollback()
                if attempt == MAX_NUMBERING_ATTEMPTS:
                    raise
                logger.warning(
                    f"Action number {action_number} already taken, renumbering",
                    extra={"source_id": event.source_id, "attempt": attempt},
                )
            except SQLAlchemyError:
                await self.db.rollback()
                raise
        logger.info(
            f"Corrective action {action_number} opened ({severity.value})",
            extra={
                "source_type": event.source_type.value,
                "source_id": event.source_id,
                "reference_id": action_number,
            },
        )
        return action_number
