"""CCPRecord ORM — one monitoring event with its evaluated measurements.

Invariants:
    - Append-only: rows are inserted once; only verification fields change afterwards
    - measurements stores the evaluated snapshot (value, unit, within_limit) so
      the verdict survives later limit edits
    - overall_within_limit is the stored verdict, recomputable from measurements
    - notification_error holds a failed corrective-action hand-off (verdict still valid)
"""

import uuid
from datetime import date, datetime, time, timezone

from sqlalchemy import (
    Boolean, Date, DateTime, ForeignKey, JSON, String, Text, Time,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from haccp_compliance.db.base import Base


class CCPRecordModel(Base):
    __tablename__ = "ccp_records"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    ccp_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("ccp_definitions.id"), nullable=False, index=True,
    )
    record_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    record_time: Mapped[time] = mapped_column(Time, nullable=False)
    lot_number: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    batch_number: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    measurements: Mapped[list] = mapped_column(JSON, nullable=False)
    overall_within_limit: Mapped[bool] = mapped_column(Boolean, nullable=False)
    deviation_action: Mapped[str | None] = mapped_column(Text, nullable=True)
    state: Mapped[str] = mapped_column(String(10), nullable=False, default="DRAFT")
    verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    verified_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    deviation_reference_id: Mapped[str | None] = mapped_column(
        String(50), nullable=True,
    )
    notification_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
