"""Inspection store used by the watchdog: eligible-job listing and terminal failure writes."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from autoinspect.core.exceptions import DatabaseError
from autoinspect.models import Inspection, InspectionStatus
from autoinspect.services.base_service import BaseService


@dataclass(frozen=True)
class InspectionRef:
    """Detached view of an inspection row, safe to pass across sessions and threads."""

    id: str
    workflow_run_id: str
    vin: str | None = None


class InspectionService(BaseService):
    """Service for the inspection reads and writes the watchdog needs."""

    def list_processing(self) -> list[InspectionRef]:
        """Inspections still processing with an orchestrator run attached, newest first."""
        try:
            rows = (
                self.db.query(Inspection.id, Inspection.workflow_run_id, Inspection.vin)
                .filter(Inspection.status == InspectionStatus.PROCESSING)
                .filter(Inspection.workflow_run_id.is_not(None))
                .order_by(Inspection.created_at.desc())
                .all()
            )
        except SQLAlchemyError as exc:
            raise DatabaseError(f"Failed to query processing inspections: {exc}") from exc
        return [InspectionRef(id=row.id, workflow_run_id=row.workflow_run_id, vin=row.vin) for row in rows]

    def get_inspection(self, inspection_id: str) -> Inspection | None:
        return self.db.query(Inspection).filter(Inspection.id == inspection_id).first()

    def mark_failed(self, inspection_id: str, error_message: str) -> Inspection | None:
        inspection = self.get_inspection(inspection_id)
        if inspection is None:
            return None

        inspection.status = InspectionStatus.FAILED
        inspection.error_message = error_message
        self.commit()
        self.db.refresh(inspection)
        return inspection
