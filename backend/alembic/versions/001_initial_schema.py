"""Initial schema — CCP catalog and records, pest catalog and checks, calibration, corrective actions.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "ccp_definitions",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("ccp_number", sa.String(20), nullable=False),
        sa.Column("process", sa.String(200), nullable=False),
        sa.Column("critical_limits", sa.JSON, nullable=False),
        sa.Column("status", sa.String(10), nullable=False, server_default="ACTIVE"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "ccp_records",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("ccp_id", sa.String(64), sa.ForeignKey("ccp_definitions.id"), nullable=False),
        sa.Column("record_date", sa.Date, nullable=False),
        sa.Column("record_time", sa.Time, nullable=False),
        sa.Column("lot_number", sa.String(100), nullable=False, server_default=""),
        sa.Column("batch_number", sa.String(100), nullable=False, server_default=""),
        sa.Column("measurements", sa.JSON, nullable=False),
        sa.Column("overall_within_limit", sa.Boolean, nullable=False),
        sa.Column("deviation_action", sa.Text, nullable=True),
        sa.Column("state", sa.String(10), nullable=False, server_default="DRAFT"),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by", sa.String(100), nullable=True),
        sa.Column("deviation_reference_id", sa.String(50), nullable=True),
        sa.Column("notification_error", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_ccp_records_ccp_id", "ccp_records", ["ccp_id"])
    op.create_index("ix_ccp_records_record_date", "ccp_records", ["record_date"])

    op.create_table(
        "pest_zones",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, server_default=""),
        sa.Column("grade", sa.String(10), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
    )

    op.create_table(
        "trap_locations",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("zone_id", sa.String(64), sa.ForeignKey("pest_zones.id"), nullable=False),
        sa.Column("location_code", sa.String(50), nullable=False, server_default=""),
        sa.Column("trap_type", sa.String(50), nullable=False, server_default=""),
        sa.Column("hazard_category", sa.String(10), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
    )

    op.create_table(
        "pest_standards",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("season", sa.String(10), nullable=False),
        sa.Column("zone_grade", sa.String(10), nullable=False),
        sa.Column("hazard_category", sa.String(10), nullable=False),
        sa.Column("level", sa.Integer, nullable=False),
        sa.Column("upper_limit", sa.Integer, nullable=False),
        sa.Column("lower_limit", sa.Integer, nullable=False, server_default="0"),
        sa.UniqueConstraint(
            "season", "zone_grade", "hazard_category", "level",
            name="uq_pest_standard_key",
        ),
    )

    op.create_table(
        "pest_control_checks",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("check_date", sa.Date, nullable=False),
        sa.Column("season", sa.String(10), nullable=False),
        sa.Column("trap_checks", sa.JSON, nullable=False),
        sa.Column("overall_status", sa.String(10), nullable=False),
        sa.Column("unconfigured_trap_ids", sa.JSON, nullable=False),
        sa.Column("state", sa.String(10), nullable=False, server_default="DRAFT"),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verified_by", sa.String(100), nullable=True),
        sa.Column("deviation_reference_id", sa.String(50), nullable=True),
        sa.Column("notification_error", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_pest_control_checks_check_date", "pest_control_checks", ["check_date"])

    op.create_table(
        "equipment_calibrations",
        sa.Column("equipment_id", sa.String(64), primary_key=True),
        sa.Column("equipment_name", sa.String(200), nullable=False, server_default=""),
        sa.Column("equipment_type", sa.String(50), nullable=False, server_default=""),
        sa.Column("last_calibration_date", sa.Date, nullable=False),
        sa.Column("frequency", sa.String(10), nullable=False, server_default="YEARLY"),
        sa.Column("next_calibration_date", sa.Date, nullable=False),
        sa.Column("result", sa.String(10), nullable=False, server_default="PASS"),
        sa.Column("provider", sa.String(200), nullable=True),
        sa.Column("certificate_number", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_equipment_calibrations_next_calibration_date",
        "equipment_calibrations", ["next_calibration_date"],
    )

    op.create_table(
        "corrective_actions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("action_number", sa.String(20), nullable=False, unique=True),
        sa.Column("source_type", sa.String(10), nullable=False),
        sa.Column("source_id", sa.String(64), nullable=False),
        sa.Column("kind", sa.String(30), nullable=False),
        sa.Column("severity", sa.String(10), nullable=False),
        sa.Column("problem_description", sa.Text, nullable=False),
        sa.Column("event", sa.JSON, nullable=False),
        sa.Column("status", sa.String(15), nullable=False, server_default="OPEN"),
        sa.Column("immediate_due_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("due_date", sa.Date, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_corrective_actions_source_id", "corrective_actions", ["source_id"])


def downgrade() -> None:
    op.drop_table("corrective_actions")
    op.drop_table("equipment_calibrations")
    op.drop_table("pest_control_checks")
    op.drop_table("pest_standards")
    op.drop_table("trap_locations")
    op.drop_table("pest_zones")
    op.drop_table("ccp_records")
    op.drop_table("ccp_definitions")
