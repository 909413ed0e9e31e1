"""PestControlCheck ORM — one pest monitoring round with per-trap snapshots.

Invariants:
    - trap_checks stores zone_grade and hazard_category as copied at check time
    - overall_status is recomputable from trap_checks alone
    - unconfigured_trap_ids lists traps scored without any matching standard
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from haccp_compliance.db.base import Base


class PestControlCheckModel(Base):
    __tablename__ = "pest_control_checks"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    check_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    season: Mapped[str] = mapped_column(String(10), nullable=False)
    trap_checks: Mapped[list] = mapped_column(JSON, nullable=False)
    overall_status: Mapped[str] = mapped_column(String(10), nullable=False)
    unconfigured_trap_ids: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
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
