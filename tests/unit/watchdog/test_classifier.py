from __future__ import annotations

from datetime import timedelta

import pytest

from autoinspect.core.exceptions import DatabaseError, UnhandledStatusError
from autoinspect.models import ExecutionStatus
from autoinspect.orchestration.state_machine import InvalidTransitionError
from autoinspect.services.execution_service import ExecutionRecord, ExecutionSnapshot
from autoinspect.watchdog.classifier import HealthClassifier, Verdict, classify_execution
from tests.factories import NOW

TIMEOUT = timedelta(minutes=15)


def _classify(status, minutes_ago=20, attempt=1, max_retries=3):
    started_at = None if minutes_ago is None else NOW - timedelta(minutes=minutes_ago)
    return classify_execution(status, started_at, NOW, attempt, max_retries, TIMEOUT)


def _execution(agent_name, status=ExecutionStatus.RUNNING, minutes_ago=20, attempt=1, max_retries=3):
    return ExecutionRecord(
        id=f"exec-{agent_name}",
        inspection_id="J1",
        agent_name=agent_name,
        status=status,
        attempt_number=attempt,
        max_retries=max_retries,
        started_at=NOW - timedelta(minutes=minutes_ago),
        lease_version=0,
    )


def _snapshot(*executions):
    return ExecutionSnapshot(
        inspection_id="J1",
        latest={execution.agent_name: execution for execution in executions},
        total_rows=len(executions),
    )


def test_running_at_exact_timeout_is_healthy():
    assert _classify(ExecutionStatus.RUNNING, minutes_ago=15) is Verdict.HEALTHY


def test_running_past_timeout_with_budget_is_stuck_retryable():
    assert _classify(ExecutionStatus.RUNNING, minutes_ago=16, attempt=2) is Verdict.STUCK_RETRYABLE


def test_running_past_timeout_without_budget_is_exhausted_stuck():
    assert _classify(ExecutionStatus.RUNNING, attempt=3, max_retries=3) is Verdict.EXHAUSTED_STUCK


def test_running_without_start_time_is_healthy():
    assert _classify(ExecutionStatus.RUNNING, minutes_ago=None) is Verdict.HEALTHY


@pytest.mark.parametrize("status", [ExecutionStatus.FAILED, ExecutionStatus.TIMEOUT])
def test_reported_failure_uses_retry_budget(status):
    assert _classify(status, attempt=2, max_retries=3) is Verdict.FAILED_RETRYABLE
    assert _classify(status, attempt=3, max_retries=3) is Verdict.EXHAUSTED


@pytest.mark.parametrize(
    "status",
    [ExecutionStatus.PENDING, ExecutionStatus.COMPLETED, ExecutionStatus.SKIPPED, ExecutionStatus.CANCELLED],
)
def test_quiet_statuses_are_healthy_regardless_of_age(status):
    assert _classify(status, minutes_ago=600, attempt=3) is Verdict.HEALTHY


def test_zero_budget_failure_is_exhausted_on_first_attempt():
    assert _classify(ExecutionStatus.FAILED, attempt=1, max_retries=0) is Verdict.EXHAUSTED


def test_plain_string_status_is_accepted():
    assert _classify("failed") is Verdict.FAILED_RETRYABLE


def test_unknown_status_raises():
    with pytest.raises(UnhandledStatusError) as exc_info:
        _classify("paused")
    assert exc_info.value.status == "paused"


def test_classifier_buckets_each_agent():
    snapshot = _snapshot(
        _execution("cost_forecast", minutes_ago=20),
        _execution("expert_advice", status=ExecutionStatus.FAILED),
        _execution("market_value", status=ExecutionStatus.FAILED, attempt=3),
        _execution("reconditioning", status=ExecutionStatus.COMPLETED),
    )

    health = HealthClassifier(timeout=TIMEOUT).classify(snapshot, NOW)

    assert health.stuck_agent_names == ["cost_forecast"]
    assert health.failed_agent_names == ["expert_advice"]
    assert health.exhausted_agent_names == ["market_value"]
    assert [execution.agent_name for execution in health.retryable] == ["cost_forecast", "expert_advice"]
    assert health.has_retryable_issues is True


def test_preview_mode_treats_exhausted_stuck_as_exhausted_without_writing():
    snapshot = _snapshot(_execution("cost_forecast", attempt=3))

    health = HealthClassifier(timeout=TIMEOUT, writer=None).classify(snapshot, NOW)

    assert health.exhausted_agent_names == ["cost_forecast"]
    assert health.deferred == []


def test_applied_timeout_write_marks_agent_exhausted():
    calls = []

    def writer(execution, now):
        calls.append((execution.id, now))
        return True

    health = HealthClassifier(timeout=TIMEOUT, writer=writer).classify(
        _snapshot(_execution("cost_forecast", attempt=3)), NOW
    )

    assert calls == [("exec-cost_forecast", NOW)]
    assert health.exhausted_agent_names == ["cost_forecast"]


def test_lost_timeout_write_defers_agent():
    health = HealthClassifier(timeout=TIMEOUT, writer=lambda execution, now: False).classify(
        _snapshot(_execution("cost_forecast", attempt=3)), NOW
    )

    assert health.exhausted == []
    assert [execution.agent_name for execution in health.deferred] == ["cost_forecast"]
    assert health.has_retryable_issues is True


def test_failed_timeout_write_defers_agent():
    def writer(execution, now):
        raise DatabaseError("disk I/O error")

    health = HealthClassifier(timeout=TIMEOUT, writer=writer).classify(
        _snapshot(_execution("cost_forecast", attempt=3)), NOW
    )

    assert health.exhausted == []
    assert len(health.deferred) == 1


def test_refused_timeout_transition_defers_agent():
    def writer(execution, now):
        raise InvalidTransitionError(f"Invalid transition: {execution.status.value} -> timeout")

    health = HealthClassifier(timeout=TIMEOUT, writer=writer).classify(
        _snapshot(_execution("cost_forecast", attempt=3), _execution("expert_advice", status=ExecutionStatus.FAILED)),
        NOW,
    )

    assert health.exhausted == []
    assert [execution.agent_name for execution in health.deferred] == ["cost_forecast"]
    assert health.failed_agent_names == ["expert_advice"]
