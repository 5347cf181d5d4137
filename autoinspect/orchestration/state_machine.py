"""Canonical state transition helpers for agent executions."""

from __future__ import annotations

from autoinspect.models.enums import ExecutionStatus


class InvalidTransitionError(ValueError):
    """Raised when a disallowed state transition is attempted."""


class StateMachine:
    """Simple in-memory state machine over status values."""

    def __init__(self, transitions: dict[str, set[str]]) -> None:
        self._transitions = transitions

    def can_transition(self, current: str, target: str) -> bool:
        return target in self._transitions.get(current, set())

    def assert_transition(self, current: str, target: str) -> None:
        if not self.can_transition(current=current, target=target):
            raise InvalidTransitionError(f"Transition not allowed: {current} -> {target}")


# The only transitions the watchdog may write. Everything else belongs to the orchestrator.
# running -> pending is the stuck-retry path; running -> timeout only once the budget is spent.
WATCHDOG_TRANSITIONS: dict[str, set[str]] = {
    ExecutionStatus.RUNNING.value: {ExecutionStatus.TIMEOUT.value, ExecutionStatus.PENDING.value},
    ExecutionStatus.FAILED.value: {ExecutionStatus.PENDING.value},
    ExecutionStatus.TIMEOUT.value: {ExecutionStatus.PENDING.value},
}

watchdog_state_machine = StateMachine(WATCHDOG_TRANSITIONS)
