"""Agent execution model module."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autoinspect.core.config import get_config
from autoinspect.models.base import Base, TimestampMixin, new_uuid
from autoinspect.models.enums import ExecutionStatus, enum_values


def _default_max_retries() -> int:
    return get_config().DEFAULT_AGENT_MAX_RETRIES


class AgentExecution(Base, TimestampMixin):
    """One attempt of one agent for one inspection.

    ``lease_version`` is bumped by every watchdog rewrite and used as a fencing
    token: conditional updates only apply against the version that was read.
    """

    __tablename__ = "agent_executions"
    __table_args__ = (
        UniqueConstraint(
            "inspection_id",
            "workflow_run_id",
            "agent_name",
            "attempt_number",
            name="uq_agent_executions_attempt",
        ),
        CheckConstraint("attempt_number > 0", name="ck_agent_executions_attempt"),
        CheckConstraint("max_retries >= 0", name="ck_agent_executions_max_retries"),
        Index("idx_agent_executions_latest_attempt", "inspection_id", "agent_name", "attempt_number"),
        Index("idx_agent_executions_stuck_detection", "inspection_id", "status", "started_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    inspection_id: Mapped[str] = mapped_column(
        ForeignKey("inspections.id", ondelete="CASCADE"), nullable=False, index=True
    )
    workflow_run_id: Mapped[str] = mapped_column(Text, nullable=False)
    agent_name: Mapped[str] = mapped_column(String(120), nullable=False)
    agent_type: Mapped[str] = mapped_column(String(60), nullable=False)
    status: Mapped[ExecutionStatus] = mapped_column(
        Enum(ExecutionStatus, values_callable=enum_values, native_enum=False, length=32),
        default=ExecutionStatus.PENDING,
        nullable=False,
    )
    attempt_number: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    max_retries: Mapped[int] = mapped_column(Integer, default=_default_max_retries, nullable=False)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    duration_ms: Mapped[int | None] = mapped_column(Integer)
    result_data: Mapped[dict | None] = mapped_column(JSON)
    error_message: Mapped[str | None] = mapped_column(Text)
    error_code: Mapped[str | None] = mapped_column(String(120))
    error_stack: Mapped[str | None] = mapped_column(Text)
    input_data: Mapped[dict | None] = mapped_column(JSON)
    metadata_: Mapped[dict | None] = mapped_column("metadata", JSON)
    lease_version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    inspection = relationship("Inspection", back_populates="executions")
