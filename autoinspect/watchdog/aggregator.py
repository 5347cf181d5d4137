"""Per-job outcomes and the batch summary of one watchdog pass."""

from __future__ import annotations

import enum
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from autoinspect.watchdog.classifier import JobHealth
from autoinspect.watchdog.dispatcher import RetriedExecution


class ScanOutcome(str, enum.Enum):
    HEALTHY = "healthy"
    ISSUES_DETECTED = "issues_detected"
    FAILED = "failed"
    NO_AGENTS = "no_agents"
    ERROR = "error"


@dataclass
class JobOutcome:
    job_id: str
    status: ScanOutcome
    stuck_agents: list[str] = field(default_factory=list)
    timed_out_agents: list[str] = field(default_factory=list)
    exhausted_agents: list[str] = field(default_factory=list)
    retried_executions: list[RetriedExecution] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def no_agents(cls, job_id: str) -> "JobOutcome":
        return cls(job_id=job_id, status=ScanOutcome.NO_AGENTS)

    @classmethod
    def from_error(cls, job_id: str, exc: BaseException) -> "JobOutcome":
        return cls(job_id=job_id, status=ScanOutcome.ERROR, error=str(exc) or exc.__class__.__name__)

    def to_dict(self) -> dict:
        return {
            "job_id": self.job_id,
            "status": self.status.value,
            "stuck_agents": list(self.stuck_agents),
            "timed_out_agents": list(self.timed_out_agents),
            "exhausted_agents": list(self.exhausted_agents),
            "retried_executions": [item.to_dict() for item in self.retried_executions],
            "error": self.error,
        }


def outcome_status(health: JobHealth, job_failed: bool) -> ScanOutcome:
    # Retryable issues win: the job is still reported as having issues while its
    # exhausted agents fail it in the same pass.
    if health.has_retryable_issues:
        return ScanOutcome.ISSUES_DETECTED
    if job_failed or health.exhausted:
        return ScanOutcome.FAILED
    return ScanOutcome.HEALTHY


def build_job_outcome(health: JobHealth, retried: Sequence[RetriedExecution], job_failed: bool) -> JobOutcome:
    return JobOutcome(
        job_id=health.inspection_id,
        status=outcome_status(health, job_failed),
        stuck_agents=health.stuck_agent_names,
        timed_out_agents=health.failed_agent_names,
        exhausted_agents=health.exhausted_agent_names,
        retried_executions=list(retried),
    )


@dataclass(frozen=True)
class BatchSummary:
    total_checked: int = 0
    healthy: int = 0
    issues_detected: int = 0
    failed: int = 0
    errors: int = 0
    no_agents: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total_checked": self.total_checked,
            "healthy": self.healthy,
            "issues_detected": self.issues_detected,
            "failed": self.failed,
            "errors": self.errors,
            "no_agents": self.no_agents,
        }


def summarize(outcomes: Sequence[JobOutcome]) -> BatchSummary:
    counts = Counter(outcome.status for outcome in outcomes)
    return BatchSummary(
        total_checked=len(outcomes),
        healthy=counts[ScanOutcome.HEALTHY],
        issues_detected=counts[ScanOutcome.ISSUES_DETECTED],
        failed=counts[ScanOutcome.FAILED],
        errors=counts[ScanOutcome.ERROR],
        no_agents=counts[ScanOutcome.NO_AGENTS],
    )


@dataclass
class ScanReport:
    success: bool
    message: str
    summary: BatchSummary = field(default_factory=BatchSummary)
    results: list[JobOutcome] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def from_outcomes(cls, outcomes: Sequence[JobOutcome]) -> "ScanReport":
        if not outcomes:
            return cls(success=True, message="No processing inspections")
        return cls(
            success=True,
            message=f"Checked {len(outcomes)} inspections",
            summary=summarize(outcomes),
            results=list(outcomes),
        )

    @classmethod
    def fatal(cls, exc: BaseException) -> "ScanReport":
        return cls(success=False, message="Watchdog scan failed", error=str(exc))

    def to_dict(self) -> dict:
        payload = {
            "success": self.success,
            "message": self.message,
            "summary": self.summary.to_dict(),
            "results": [outcome.to_dict() for outcome in self.results],
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload
