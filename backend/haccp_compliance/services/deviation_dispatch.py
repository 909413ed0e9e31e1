"""Deviation Dispatch — non-fatal hand-off of deviation events to the notifier.

Invariants:
    - dispatch_deviation never raises: failures come back as DeviationDeliveryError
      inside the outcome, next to (never instead of) the verdict
    - Every failure is logged with exc_info; nothing is swallowed silently
    - Called at most once per evaluated record/check

Design Decisions:
    - Wrapped in try/except Exception: the notifier is an external collaborator
      and any failure mode must leave the verdict intact
"""

import logging
from dataclasses import dataclass

from haccp_compliance.core.deviation import DeviationEvent
from haccp_compliance.core.errors import DeviationDeliveryError
from haccp_compliance.core.repository_protocols import DeviationNotifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchOutcome:
    reference_id: str | None = None
    error: DeviationDeliveryError | None = None

    @property
    def delivered(self) -> bool:
        return self.error is None and self.reference_id is not None


NOT_DISPATCHED = DispatchOutcome()


async def dispatch_deviation(
    notifier: DeviationNotifier, event: DeviationEvent | None,
) -> DispatchOutcome:
    if event is None:
        return NOT_DISPATCHED
    try:
        reference_id = await notifier.on_deviation(event)
    except Exception as e:
        error = DeviationDeliveryError(event.source_id, str(e) or type(e).__name__)
        logger.error(
            f"Deviation hand-off failed: {error.message}",
            exc_info=True,
            extra={
                "error_code": error.code,
                "source_type": event.source_type.value,
                "source_id": event.source_id,
            },
        )
        return DispatchOutcome(error=error)
    return DispatchOutcome(reference_id=reference_id)
