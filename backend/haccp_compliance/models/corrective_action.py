"""CorrectiveAction ORM — deviations handed off for remediation.

Invariants:
    - action_number is unique and is the reference id returned to the evaluator
    - event stores the DeviationEvent exactly as emitted
    - status starts OPEN; the remediation workflow itself lives outside this service
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from haccp_compliance.db.base import Base


class CorrectiveActionModel(Base):
    __tablename__ = "corrective_actions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    action_number: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True,
    )
    source_type: Mapped[str] = mapped_column(String(10), nullable=False)
    source_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    kind: Mapped[str] = mapped_column(String(30), nullable=False)
    severity: Mapped[str] = mapped_column(String(10), nullable=False)
    problem_description: Mapped[str] = mapped_column(Text, nullable=False)
    event: Mapped[dict] = mapped_column(JSON, nullable=False)
    status: Mapped[str] = mapped_column(String(15), nullable=False, default="OPEN")
    immediate_due_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
