"""Watchdog response schema module."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from autoinspect.watchdog.aggregator import ScanReport
from autoinspect.watchdog.scanner import StuckExecutionView


class RetriedExecutionItem(BaseModel):
    agent: str
    execution_id: str
    attempt: int = Field(ge=1)
    max_retries: int = Field(ge=0)


class JobResultItem(BaseModel):
    job_id: str
    status: str
    stuck_agents: list[str] = Field(default_factory=list)
    timed_out_agents: list[str] = Field(default_factory=list)
    exhausted_agents: list[str] = Field(default_factory=list)
    retried_executions: list[RetriedExecutionItem] = Field(default_factory=list)
    error: str | None = None


class ScanSummary(BaseModel):
    total_checked: int = 0
    healthy: int = 0
    issues_detected: int = 0
    failed: int = 0
    errors: int = 0
    no_agents: int = 0


class ScanResponse(BaseModel):
    success: bool
    message: str
    summary: ScanSummary = Field(default_factory=ScanSummary)
    results: list[JobResultItem] = Field(default_factory=list)
    error: str | None = None

    @classmethod
    def from_report(cls, report: ScanReport) -> "ScanResponse":
        return cls.model_validate(report.to_dict())


class StuckExecutionItem(BaseModel):
    job_id: str
    execution_id: str
    agent_name: str
    attempt: int
    max_retries: int
    started_at: datetime | None = None
    minutes_running: int | None = None
    verdict: str
    will_be_retried: bool

    @classmethod
    def from_view(cls, view: StuckExecutionView) -> "StuckExecutionItem":
        return cls(
            job_id=view.job_id,
            execution_id=view.execution_id,
            agent_name=view.agent_name,
            attempt=view.attempt,
            max_retries=view.max_retries,
            started_at=view.started_at,
            minutes_running=view.minutes_running,
            verdict=view.verdict.value,
            will_be_retried=view.will_be_retried,
        )
