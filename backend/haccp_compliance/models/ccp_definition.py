"""CCPDefinition ORM — catalog of critical control points and their limits.

Invariants:
    - id is a stable natural key (e.g. "CCP-1B"), referenced by ccp_records
    - critical_limits always stores the plural shape; legacy singular rows are
      normalized on read by core.critical_limits.normalize_limits
    - status is ACTIVE or MERGED; MERGED rows are never deleted

Design Decisions:
    - JSON column for limits: the limit set is read whole, never queried per parameter
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from haccp_compliance.db.base import Base


class CCPDefinitionModel(Base):
    __tablename__ = "ccp_definitions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    ccp_number: Mapped[str] = mapped_column(String(20), nullable=False)
    process: Mapped[str] = mapped_column(String(200), nullable=False)
    critical_limits: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default="ACTIVE",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
