"""baseline inspections and agent execution tracking

Revision ID: 20251201_0001
Revises:
Create Date: 2025-12-01 12:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20251201_0001"
down_revision = None
branch_labels = None
depends_on = None

INSPECTION_STATUSES = ("pending", "queued", "processing", "completed", "done", "failed")
EXECUTION_STATUSES = ("pending", "running", "completed", "failed", "timeout", "skipped", "cancelled")


def upgrade() -> None:
    op.create_table(
        "inspections",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("workflow_run_id", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.Enum(*INSPECTION_STATUSES, name="inspectionstatus", native_enum=False, length=32),
            nullable=False,
        ),
        sa.Column("vin", sa.String(length=32), nullable=True),
        sa.Column("mileage", sa.String(length=32), nullable=True),
        sa.Column("zip_code", sa.String(length=16), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status != 'processing' OR workflow_run_id IS NOT NULL",
            name="ck_inspections_processing_has_run",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_inspections_status_created", "inspections", ["status", "created_at"])

    op.create_table(
        "agent_executions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("inspection_id", sa.String(length=36), nullable=False),
        sa.Column("workflow_run_id", sa.Text(), nullable=False),
        sa.Column("agent_name", sa.String(length=120), nullable=False),
        sa.Column("agent_type", sa.String(length=60), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*EXECUTION_STATUSES, name="executionstatus", native_enum=False, length=32),
            nullable=False,
        ),
        sa.Column("attempt_number", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("max_retries", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column("result_data", sa.JSON(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("error_code", sa.String(length=120), nullable=True),
        sa.Column("error_stack", sa.Text(), nullable=True),
        sa.Column("input_data", sa.JSON(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("lease_version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("attempt_number > 0", name="ck_agent_executions_attempt"),
        sa.CheckConstraint("max_retries >= 0", name="ck_agent_executions_max_retries"),
        sa.ForeignKeyConstraint(["inspection_id"], ["inspections.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "inspection_id",
            "workflow_run_id",
            "agent_name",
            "attempt_number",
            name="uq_agent_executions_attempt",
        ),
    )
    op.create_index("ix_agent_executions_inspection_id", "agent_executions", ["inspection_id"])
    op.create_index(
        "idx_agent_executions_latest_attempt",
        "agent_executions",
        ["inspection_id", "agent_name", "attempt_number"],
    )
    op.create_index(
        "idx_agent_executions_stuck_detection",
        "agent_executions",
        ["inspection_id", "status", "started_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_agent_executions_stuck_detection", table_name="agent_executions")
    op.drop_index("idx_agent_executions_latest_attempt", table_name="agent_executions")
    op.drop_index("ix_agent_executions_inspection_id", table_name="agent_executions")
    op.drop_table("agent_executions")

    op.drop_index("idx_inspections_status_created", table_name="inspections")
    op.drop_table("inspections")
