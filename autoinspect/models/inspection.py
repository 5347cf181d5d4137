"""Inspection (job) model module."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autoinspect.models.base import Base, TimestampMixin, new_uuid
from autoinspect.models.enums import InspectionStatus, enum_values


class Inspection(Base, TimestampMixin):
    __tablename__ = "inspections"
    __table_args__ = (
        CheckConstraint(
            "status != 'processing' OR workflow_run_id IS NOT NULL",
            name="ck_inspections_processing_has_run",
        ),
        Index("idx_inspections_status_created", "status", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    workflow_run_id: Mapped[str | None] = mapped_column(Text)
    status: Mapped[InspectionStatus] = mapped_column(
        Enum(InspectionStatus, values_callable=enum_values, native_enum=False, length=32),
        default=InspectionStatus.PENDING,
        nullable=False,
    )
    vin: Mapped[str | None] = mapped_column(String(32))
    mileage: Mapped[str | None] = mapped_column(String(32))
    zip_code: Mapped[str | None] = mapped_column(String(16))
    email: Mapped[str | None] = mapped_column(String(320))
    error_message: Mapped[str | None] = mapped_column(Text)

    executions = relationship(
        "AgentExecution",
        back_populates="inspection",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
