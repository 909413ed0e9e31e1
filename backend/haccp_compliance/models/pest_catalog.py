"""Pest Catalog ORM — zones, trap locations, and tiered pest standards.

Invariants:
    - One pest_standards row per (season, zone_grade, hazard_category, level)
    - trap_locations.zone_id references pest_zones; grade is resolved at read time
      and then copied into each trap check, never referenced live

Design Decisions:
    - Three small tables in one module: they are always edited and read together
      by the pest catalog reader (ADR: ExMA max 3-4 files to understand a feature)
"""

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from haccp_compliance.db.base import Base


class PestZoneModel(Base):
    __tablename__ = "pest_zones"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    grade: Mapped[str] = mapped_column(String(10), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class TrapLocationModel(Base):
    __tablename__ = "trap_locations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    zone_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("pest_zones.id"), nullable=False,
    )
    location_code: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    trap_type: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    hazard_category: Mapped[str] = mapped_column(String(10), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    zone: Mapped["PestZoneModel"] = relationship("PestZoneModel", lazy="selectin")


class PestStandardModel(Base):
    __tablename__ = "pest_standards"
    __table_args__ = (
        UniqueConstraint(
            "season", "zone_grade", "hazard_category", "level",
            name="uq_pest_standard_key",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    season: Mapped[str] = mapped_column(String(10), nullable=False)
    zone_grade: Mapped[str] = mapped_column(String(10), nullable=False)
    hazard_category: Mapped[str] = mapped_column(String(10), nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    upper_limit: Mapped[int] = mapped_column(Integer, nullable=False)
    lower_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
