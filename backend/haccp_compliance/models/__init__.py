"""ORM Models — SQLAlchemy declarative models for catalogs, records, and actions.

Invariants:
    - All models inherit from Base (db/base.py)
    - Monitoring records store their own evaluated snapshots, never live catalog references

Design Decisions:
    - One file per entity for locality (pest catalog tables grouped: read together)
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from haccp_compliance.models.ccp_definition import CCPDefinitionModel  # noqa: F401
from haccp_compliance.models.ccp_record import CCPRecordModel  # noqa: F401
from haccp_compliance.models.pest_catalog import (  # noqa: F401
    PestZoneModel, TrapLocationModel, PestStandardModel,
)
from haccp_compliance.models.pest_control_check import PestControlCheckModel  # noqa: F401
from haccp_compliance.models.equipment_calibration import EquipmentCalibrationModel  # noqa: F401
from haccp_compliance.models.corrective_action import CorrectiveActionModel  # noqa: F401
