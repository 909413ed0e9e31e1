"""EquipmentCalibration ORM — current calibration of each monitoring instrument.

Invariants:
    - One row per equipment_id; renewal overwrites last_calibration_date
    - next_calibration_date is a query cache, rewritten on every save
    - No status column: VALID/EXPIRING/EXPIRED is derived on read

Design Decisions:
    - Cached next_calibration_date kept for ORDER BY / range filters only
      (ADR: derived status is never a source of truth)
"""

from datetime import date, datetime, timezone

from sqlalchemy import Boolean, Date, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from haccp_compliance.db.base import Base


class EquipmentCalibrationModel(Base):
    __tablename__ = "equipment_calibrations"

    equipment_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    equipment_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    equipment_type: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    last_calibration_date: Mapped[date] = mapped_column(Date, nullable=False)
    frequency: Mapped[str] = mapped_column(String(10), nullable=False, default="YEARLY")
    next_calibration_date: Mapped[date] = mapped_column(
        Date, nullable=False, index=True,
    )
    result: Mapped[str] = mapped_column(String(10), nullable=False, default="PASS")
    provider: Mapped[str | None] = mapped_column(String(200), nullable=True)
    certificate_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
