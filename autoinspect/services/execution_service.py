"""Agent execution store: snapshot loading and conditional watchdog writes."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from functools import reduce
from typing import Any

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from autoinspect.core.exceptions import DatabaseError
from autoinspect.models import AgentExecution, ExecutionStatus, Inspection, InspectionStatus
from autoinspect.orchestration.state_machine import watchdog_state_machine
from autoinspect.services.base_service import BaseService
from autoinspect.utils.clock import elapsed_ms

logger = logging.getLogger(__name__)

STUCK_AFTER_MAX_RETRIES_MESSAGE = "Agent stuck after max retries"


def _keep_first_per_agent(
    latest: Mapping[str, AgentExecution], execution: AgentExecution
) -> Mapping[str, AgentExecution]:
    if execution.agent_name in latest:
        return latest
    return {**latest, execution.agent_name: execution}


def latest_per_agent(executions: Iterable[AgentExecution]) -> dict[str, AgentExecution]:
    """Fold executions sorted by (agent_name ASC, attempt_number DESC) into the latest attempt per agent.

    The first occurrence of each agent wins, so the input ordering decides what
    "latest" means.
    """
    return dict(reduce(_keep_first_per_agent, executions, {}))


@dataclass(frozen=True)
class ExecutionRecord:
    """Detached copy of an execution row as it was read.

    Guarded writes compare against these values, never against a row reloaded
    after some other commit in the same session.
    """

    id: str
    inspection_id: str
    agent_name: str
    status: ExecutionStatus
    attempt_number: int
    max_retries: int
    started_at: datetime | None = None
    lease_version: int = 0

    @classmethod
    def from_row(cls, row: AgentExecution) -> "ExecutionRecord":
        return cls(
            id=row.id,
            inspection_id=row.inspection_id,
            agent_name=row.agent_name,
            status=ExecutionStatus(row.status),
            attempt_number=row.attempt_number,
            max_retries=row.max_retries,
            started_at=row.started_at,
            lease_version=row.lease_version,
        )


@dataclass(frozen=True)
class ExecutionSnapshot:
    inspection_id: str
    latest: Mapping[str, ExecutionRecord] = field(default_factory=dict)
    total_rows: int = 0

    @property
    def is_empty(self) -> bool:
        """No execution row exists yet: the orchestrator has not dispatched any agent."""
        return self.total_rows == 0

    def agent_names(self) -> list[str]:
        return list(self.latest.keys())


class ExecutionService(BaseService):
    """Reads execution history and applies the two watchdog-owned rewrites."""

    def list_for_inspection(self, inspection_id: str) -> list[AgentExecution]:
        return (
            self.db.query(AgentExecution)
            .filter(AgentExecution.inspection_id == inspection_id)
            .order_by(AgentExecution.agent_name.asc(), AgentExecution.attempt_number.desc())
            .all()
        )

    def load_snapshot(self, inspection_id: str) -> ExecutionSnapshot:
        rows = self.list_for_inspection(inspection_id)
        return ExecutionSnapshot(
            inspection_id=inspection_id,
            latest={name: ExecutionRecord.from_row(row) for name, row in latest_per_agent(rows).items()},
            total_rows=len(rows),
        )

    def list_running_for_processing(self) -> list[AgentExecution]:
        """Running executions of in-flight inspections, oldest start first."""
        return (
            self.db.query(AgentExecution)
            .join(Inspection, Inspection.id == AgentExecution.inspection_id)
            .filter(Inspection.status == InspectionStatus.PROCESSING)
            .filter(Inspection.workflow_run_id.is_not(None))
            .filter(AgentExecution.status == ExecutionStatus.RUNNING)
            .order_by(AgentExecution.inspection_id, AgentExecution.started_at.asc())
            .all()
        )

    def reset_to_pending(self, execution: ExecutionRecord) -> bool:
        """Flip a failed/timed-out/stuck execution back to pending for the orchestrator.

        attempt_number, started_at and completed_at are left as they are. The
        write only applies while the retry budget still holds.
        """
        return self._conditional_update(
            execution,
            {
                "status": ExecutionStatus.PENDING,
                "error_message": None,
                "error_code": None,
                "error_stack": None,
            },
            AgentExecution.attempt_number < AgentExecution.max_retries,
        )

    def mark_timeout(self, execution: ExecutionRecord, now: datetime) -> bool:
        """Move a running execution that exhausted its budget to terminal ``timeout``."""
        watchdog_state_machine.assert_transition(execution.status.value, ExecutionStatus.TIMEOUT.value)
        return self._conditional_update(
            execution,
            {
                "status": ExecutionStatus.TIMEOUT,
                "error_message": STUCK_AFTER_MAX_RETRIES_MESSAGE,
                "completed_at": now,
                "duration_ms": elapsed_ms(execution.started_at, now),
            },
        )

    def _conditional_update(self, execution: ExecutionRecord, values: dict[str, Any], *criteria: Any) -> bool:
        """Apply ``values`` only if the row still matches what was recorded in ``execution``.

        Status, attempt number and lease version all have to be unchanged since
        the read.

        Returns False when another writer got there first; raises DatabaseError on
        store failures. Either way the row is left fully written or untouched.
        """
        observed_status = execution.status
        observed_version = execution.lease_version
        statement = (
            update(AgentExecution)
            .where(AgentExecution.id == execution.id)
            .where(AgentExecution.status == observed_status)
            .where(AgentExecution.attempt_number == execution.attempt_number)
            .where(AgentExecution.lease_version == observed_version)
            .values(lease_version=observed_version + 1, **values)
            .execution_options(synchronize_session=False)
        )
        if criteria:
            statement = statement.where(*criteria)
        try:
            result = self.db.execute(statement)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise DatabaseError(f"Failed to update agent execution {execution.id}: {exc}") from exc
        self.commit()

        applied = result.rowcount == 1
        if not applied:
            logger.warning(
                "watchdog.execution.write_lost",
                extra={
                    "event": "watchdog.execution.write_lost",
                    "execution_id": execution.id,
                    "status": observed_status.value,
                },
            )
        return applied
