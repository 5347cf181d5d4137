"""Structured logging helpers for watchdog events."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class LogContext:
    """Normalized context fields expected in structured logs."""

    job_id: str | None = None
    execution_id: str | None = None
    agent_name: str | None = None
    task_id: str | None = None
    trace_id: str | None = None


def build_log_event(event: str, context: LogContext, **fields: Any) -> dict[str, Any]:
    """Build a normalized structured log payload."""
    payload: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event": event,
        "job_id": context.job_id,
        "execution_id": context.execution_id,
        "agent_name": context.agent_name,
        "task_id": context.task_id,
        "trace_id": context.trace_id,
    }
    payload.update(fields)
    return payload
