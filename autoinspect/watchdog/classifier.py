"""Health classification of the latest attempt of each agent.

``classify_execution`` is a pure decision over one execution's status, start
time, attempt number and retry budget. ``HealthClassifier`` applies it to a
whole job snapshot and performs the single side effect of the classification
step: a ``running`` execution that is past the timeout with no retry budget
left is rewritten to ``timeout`` right away, so it stops reporting itself as
running forever.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from autoinspect.core.exceptions import DatabaseError, UnhandledStatusError
from autoinspect.models import ExecutionStatus
from autoinspect.orchestration.state_machine import InvalidTransitionError
from autoinspect.services.execution_service import ExecutionRecord, ExecutionSnapshot
from autoinspect.utils.clock import ensure_utc

logger = logging.getLogger(__name__)

DEFAULT_AGENT_TIMEOUT = timedelta(minutes=15)

TimeoutWriter = Callable[[ExecutionRecord, datetime], bool]


class Verdict(str, enum.Enum):
    HEALTHY = "healthy"
    STUCK_RETRYABLE = "stuck_retryable"
    FAILED_RETRYABLE = "failed_retryable"
    # Running past the timeout with no budget left; must be written to ``timeout``.
    EXHAUSTED_STUCK = "exhausted_stuck"
    EXHAUSTED = "exhausted"


def _coerce_status(status: ExecutionStatus | str) -> ExecutionStatus:
    try:
        return ExecutionStatus(status)
    except ValueError as exc:
        raise UnhandledStatusError(status) from exc


def classify_execution(
    status: ExecutionStatus | str,
    started_at: datetime | None,
    now: datetime,
    attempt_number: int,
    max_retries: int,
    timeout: timedelta = DEFAULT_AGENT_TIMEOUT,
) -> Verdict:
    """Decide what the watchdog should do with one agent's latest attempt."""
    status = _coerce_status(status)
    has_budget = attempt_number < max_retries

    if status is ExecutionStatus.RUNNING:
        if started_at is None:
            return Verdict.HEALTHY
        elapsed = ensure_utc(now) - ensure_utc(started_at)
        if elapsed <= timeout:
            return Verdict.HEALTHY
        return Verdict.STUCK_RETRYABLE if has_budget else Verdict.EXHAUSTED_STUCK

    if status in (ExecutionStatus.FAILED, ExecutionStatus.TIMEOUT):
        return Verdict.FAILED_RETRYABLE if has_budget else Verdict.EXHAUSTED

    if status in (
        ExecutionStatus.PENDING,
        ExecutionStatus.COMPLETED,
        ExecutionStatus.SKIPPED,
        ExecutionStatus.CANCELLED,
    ):
        return Verdict.HEALTHY

    raise UnhandledStatusError(status)


@dataclass
class JobHealth:
    inspection_id: str
    stuck_retryable: list[ExecutionRecord] = field(default_factory=list)
    failed_retryable: list[ExecutionRecord] = field(default_factory=list)
    exhausted: list[ExecutionRecord] = field(default_factory=list)
    # Stuck and exhausted, but the timeout write did not apply; re-evaluated next pass.
    deferred: list[ExecutionRecord] = field(default_factory=list)

    @property
    def retryable(self) -> list[ExecutionRecord]:
        return [*self.stuck_retryable, *self.failed_retryable]

    @property
    def has_retryable_issues(self) -> bool:
        return bool(self.stuck_retryable or self.failed_retryable or self.deferred)

    @property
    def stuck_agent_names(self) -> list[str]:
        return [execution.agent_name for execution in self.stuck_retryable]

    @property
    def failed_agent_names(self) -> list[str]:
        return [execution.agent_name for execution in self.failed_retryable]

    @property
    def exhausted_agent_names(self) -> list[str]:
        return [execution.agent_name for execution in self.exhausted]


class HealthClassifier:
    """Classify every agent of one job.

    ``writer`` performs the ``running -> timeout`` rewrite. With ``writer=None``
    the classification has no side effects, which is what previews use.
    """

    def __init__(self, timeout: timedelta = DEFAULT_AGENT_TIMEOUT, writer: TimeoutWriter | None = None) -> None:
        self.timeout = timeout
        self.writer = writer

    def verdict_for(self, execution: ExecutionRecord, now: datetime) -> Verdict:
        return classify_execution(
            status=execution.status,
            started_at=execution.started_at,
            now=now,
            attempt_number=execution.attempt_number,
            max_retries=execution.max_retries,
            timeout=self.timeout,
        )

    def classify(self, snapshot: ExecutionSnapshot, now: datetime) -> JobHealth:
        health = JobHealth(inspection_id=snapshot.inspection_id)
        for agent_name, execution in snapshot.latest.items():
            verdict = self.verdict_for(execution, now)
            if verdict is Verdict.STUCK_RETRYABLE:
                health.stuck_retryable.append(execution)
            elif verdict is Verdict.FAILED_RETRYABLE:
                logger.info(
                    "watchdog.agent.failed_retryable",
                    extra={
                        "event": "watchdog.agent.failed_retryable",
                        "job_id": snapshot.inspection_id,
                        "agent_name": agent_name,
                        "attempt": execution.attempt_number,
                        "max_retries": execution.max_retries,
                    },
                )
                health.failed_retryable.append(execution)
            elif verdict is Verdict.EXHAUSTED:
                logger.info(
                    "watchdog.agent.exhausted",
                    extra={"event": "watchdog.agent.exhausted", "job_id": snapshot.inspection_id, "agent_name": agent_name},
                )
                health.exhausted.append(execution)
            elif verdict is Verdict.EXHAUSTED_STUCK:
                self._timeout_exhausted(health, execution, now)
        return health

    def _timeout_exhausted(self, health: JobHealth, execution: ExecutionRecord, now: datetime) -> None:
        if self.writer is None:
            health.exhausted.append(execution)
            return

        log_extra = {
            "job_id": health.inspection_id,
            "execution_id": execution.id,
            "agent_name": execution.agent_name,
        }
        try:
            applied = self.writer(execution, now)
        except (DatabaseError, InvalidTransitionError):
            logger.exception(
                "watchdog.execution.timeout_write_failed",
                extra={"event": "watchdog.execution.timeout_write_failed", **log_extra},
            )
            applied = False

        if applied:
            logger.info(
                "watchdog.execution.timed_out",
                extra={"event": "watchdog.execution.timed_out", **log_extra},
            )
            health.exhausted.append(execution)
        else:
            health.deferred.append(execution)
