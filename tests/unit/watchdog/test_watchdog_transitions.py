from __future__ import annotations

import pytest

from autoinspect.orchestration.state_machine import InvalidTransitionError, StateMachine, watchdog_state_machine


def test_state_machine_allows_valid_transition():
    sm = StateMachine({"failed": {"pending"}})
    assert sm.can_transition("failed", "pending") is True
    sm.assert_transition("failed", "pending")


def test_state_machine_rejects_invalid_transition():
    sm = StateMachine({"failed": {"pending"}})
    with pytest.raises(InvalidTransitionError):
        sm.assert_transition("failed", "completed")


@pytest.mark.parametrize(
    ("current", "target"),
    [("running", "timeout"), ("running", "pending"), ("failed", "pending"), ("timeout", "pending")],
)
def test_watchdog_owns_retry_and_timeout_transitions(current, target):
    assert watchdog_state_machine.can_transition(current, target) is True


@pytest.mark.parametrize(
    ("current", "target"),
    [
        ("pending", "running"),
        ("running", "completed"),
        ("completed", "pending"),
        ("skipped", "pending"),
        ("failed", "timeout"),
    ],
)
def test_watchdog_never_writes_orchestrator_transitions(current, target):
    assert watchdog_state_machine.can_transition(current, target) is False
