"""Canonical enum values for inspections and agent executions."""

from __future__ import annotations

import enum


class InspectionStatus(str, enum.Enum):
    PENDING = "pending"
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    DONE = "done"
    FAILED = "failed"


class ExecutionStatus(str, enum.Enum):
    """Lifecycle of one agent attempt.

    ``pending -> running -> completed/failed`` is driven by the orchestrator.
    The watchdog only writes ``running -> timeout`` and
    ``running/failed/timeout -> pending``.
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMEOUT = "timeout"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum values (not member names) so external writers can use plain strings."""
    return [member.value for member in enum_cls]
