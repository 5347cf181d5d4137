"""Reset stuck and failed executions to ``pending`` so the orchestrator re-runs them."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass

from autoinspect.core.exceptions import DatabaseError
from autoinspect.models import ExecutionStatus
from autoinspect.orchestration.state_machine import InvalidTransitionError, StateMachine, watchdog_state_machine
from autoinspect.services.execution_service import ExecutionRecord, ExecutionService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetriedExecution:
    agent: str
    execution_id: str
    attempt: int
    max_retries: int

    def to_dict(self) -> dict:
        return asdict(self)


class RetryDispatcher:
    """Rewrite retryable executions back to ``pending``.

    The orchestrator polls for pending executions; nothing here calls it.
    ``attempt_number`` is never bumped here, only an actual restart increments it.
    """

    def __init__(self, executions: ExecutionService, state_machine: StateMachine = watchdog_state_machine) -> None:
        self.executions = executions
        self.state_machine = state_machine

    def dispatch(self, executions: Iterable[ExecutionRecord]) -> list[RetriedExecution]:
        retried: list[RetriedExecution] = []
        for execution in executions:
            outcome = self._dispatch_one(execution)
            if outcome is not None:
                retried.append(outcome)
        return retried

    def _dispatch_one(self, execution: ExecutionRecord) -> RetriedExecution | None:
        candidate = RetriedExecution(
            agent=execution.agent_name,
            execution_id=execution.id,
            attempt=execution.attempt_number,
            max_retries=execution.max_retries,
        )
        log_extra = {
            "job_id": execution.inspection_id,
            "execution_id": candidate.execution_id,
            "agent_name": candidate.agent,
            "attempt": candidate.attempt,
            "max_retries": candidate.max_retries,
        }

        # Classification and dispatch are not atomic; the budget may have changed in between.
        if candidate.attempt >= candidate.max_retries:
            logger.info(
                "watchdog.retry.skipped_budget",
                extra={"event": "watchdog.retry.skipped_budget", **log_extra},
            )
            return None

        # The status seen at classification, not whatever the row holds now.
        current = execution.status
        try:
            self.state_machine.assert_transition(current.value, ExecutionStatus.PENDING.value)
        except InvalidTransitionError:
            logger.warning(
                "watchdog.retry.invalid_transition",
                extra={"event": "watchdog.retry.invalid_transition", "status": current.value, **log_extra},
            )
            return None

        try:
            applied = self.executions.reset_to_pending(execution)
        except DatabaseError:
            logger.exception(
                "watchdog.retry.write_failed",
                extra={"event": "watchdog.retry.write_failed", **log_extra},
            )
            return None

        if not applied:
            return None

        logger.info("watchdog.execution.retried", extra={"event": "watchdog.execution.retried", **log_extra})
        return candidate
