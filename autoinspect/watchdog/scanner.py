"""Periodic watchdog pass over in-flight inspections.

One ``run()`` is a single stateless pass: list processing inspections, then
for each one load the latest execution per agent, classify, reset retryable
agents to pending and fail the inspection if any agent is exhausted. Every
job gets its own session, so a failure in one job never leaks into another.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from autoinspect.core.config import get_config
from autoinspect.core.exceptions import DatabaseError, ScanError
from autoinspect.database.db import get_db_session
from autoinspect.services.execution_service import ExecutionRecord, ExecutionService
from autoinspect.services.inspection_service import InspectionRef, InspectionService
from autoinspect.utils.clock import ensure_utc, utcnow
from autoinspect.watchdog.aggregator import JobOutcome, ScanReport, build_job_outcome
from autoinspect.watchdog.classifier import HealthClassifier, Verdict
from autoinspect.watchdog.dispatcher import RetryDispatcher
from autoinspect.watchdog.terminal import TerminalFailureHandler

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractContextManager[Session]]


@dataclass(frozen=True)
class StuckExecutionView:
    job_id: str
    execution_id: str
    agent_name: str
    attempt: int
    max_retries: int
    started_at: datetime | None
    minutes_running: int | None
    verdict: Verdict

    @property
    def will_be_retried(self) -> bool:
        return self.verdict is Verdict.STUCK_RETRYABLE


class ScanScheduler:
    def __init__(
        self,
        session_factory: SessionFactory = get_db_session,
        timeout: timedelta | None = None,
        max_workers: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        config = get_config()
        self.session_factory = session_factory
        self.timeout = timeout if timeout is not None else config.agent_timeout
        self.max_workers = max_workers if max_workers is not None else config.WATCHDOG_MAX_WORKERS
        self.clock = clock

    def run(self) -> ScanReport:
        logger.info("watchdog.scan.start", extra={"event": "watchdog.scan.start"})
        try:
            jobs = self.list_jobs()
        except ScanError as exc:
            logger.exception("watchdog.scan.fatal", extra={"event": "watchdog.scan.fatal"})
            return ScanReport.fatal(exc)

        if not jobs:
            logger.info("watchdog.scan.no_jobs", extra={"event": "watchdog.scan.no_jobs"})
            return ScanReport.from_outcomes([])

        now = self.clock()
        outcomes = self._scan_all(jobs, now)
        report = ScanReport.from_outcomes(outcomes)
        summary = report.summary
        logger.info(
            "watchdog.scan.complete healthy=%s issues=%s failed=%s errors=%s",
            summary.healthy,
            summary.issues_detected,
            summary.failed,
            summary.errors,
            extra={"event": "watchdog.scan.complete"},
        )
        return report

    def list_jobs(self) -> list[InspectionRef]:
        try:
            with self.session_factory() as session:
                return InspectionService(db=session).list_processing()
        except DatabaseError as exc:
            raise ScanError(str(exc)) from exc

    def _scan_all(self, jobs: list[InspectionRef], now: datetime) -> list[JobOutcome]:
        if self.max_workers <= 1 or len(jobs) == 1:
            return [self._scan_isolated(job, now) for job in jobs]
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(lambda job: self._scan_isolated(job, now), jobs))

    def _scan_isolated(self, job: InspectionRef, now: datetime) -> JobOutcome:
        try:
            return self.scan_job(job, now)
        except Exception as exc:
            logger.exception(
                "watchdog.job.error",
                extra={"event": "watchdog.job.error", "job_id": job.id},
            )
            return JobOutcome.from_error(job.id, exc)

    def scan_job(self, job: InspectionRef, now: datetime) -> JobOutcome:
        logger.info("watchdog.job.check vin=%s", job.vin, extra={"event": "watchdog.job.check", "job_id": job.id})
        with self.session_factory() as session:
            executions = ExecutionService(db=session)
            snapshot = executions.load_snapshot(job.id)
            if snapshot.is_empty:
                logger.info("watchdog.job.no_agents", extra={"event": "watchdog.job.no_agents", "job_id": job.id})
                return JobOutcome.no_agents(job.id)

            classifier = HealthClassifier(timeout=self.timeout, writer=executions.mark_timeout)
            health = classifier.classify(snapshot, now)

            retried = RetryDispatcher(executions).dispatch(health.retryable)
            # Only after every agent of the job has been classified.
            job_failed = TerminalFailureHandler(InspectionService(db=session)).handle(
                job.id, health.exhausted_agent_names
            )
            return build_job_outcome(health, retried, job_failed)

    def preview(self) -> list[StuckExecutionView]:
        """List running executions of processing inspections with their verdict, without writing."""
        now = self.clock()
        classifier = HealthClassifier(timeout=self.timeout)
        with self.session_factory() as session:
            rows = ExecutionService(db=session).list_running_for_processing()
            running = [ExecutionRecord.from_row(row) for row in rows]
        return [
            StuckExecutionView(
                job_id=execution.inspection_id,
                execution_id=execution.id,
                agent_name=execution.agent_name,
                attempt=execution.attempt_number,
                max_retries=execution.max_retries,
                started_at=execution.started_at,
                minutes_running=_minutes_between(execution.started_at, now),
                verdict=classifier.verdict_for(execution, now),
            )
            for execution in running
        ]


def _minutes_between(start: datetime | None, end: datetime) -> int | None:
    if start is None:
        return None
    return int((ensure_utc(end) - ensure_utc(start)).total_seconds() // 60)
