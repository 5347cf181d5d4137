"""Lifecycle hooks for queue task execution."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from autoinspect.core.logging import LogContext, build_log_event


def before_task(task_name: str, context: dict[str, Any]) -> dict[str, Any]:
    """Build pre-task log payload."""
    return build_log_event(
        event="task.start",
        context=LogContext(
            agent_name=task_name,
            task_id=context.get("task_id"),
            trace_id=context.get("trace_id"),
        ),
    )


def after_task(task_name: str, context: dict[str, Any], status: str, **fields: Any) -> dict[str, Any]:
    """Build post-task log payload."""
    return build_log_event(
        event="task.finish",
        context=LogContext(
            agent_name=task_name,
            task_id=context.get("task_id"),
            trace_id=context.get("trace_id"),
        ),
        status=status,
        finished_at=datetime.now(timezone.utc).isoformat(),
        **fields,
    )
