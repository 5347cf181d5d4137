from __future__ import annotations

from autoinspect.models import AgentExecution, ExecutionStatus
from autoinspect.services.execution_service import ExecutionSnapshot, latest_per_agent


def _row(agent_name, attempt, status=ExecutionStatus.FAILED):
    return AgentExecution(id=f"{agent_name}-{attempt}", agent_name=agent_name, attempt_number=attempt, status=status)


def test_first_row_per_agent_wins():
    rows = [
        _row("cost_forecast", 3, ExecutionStatus.RUNNING),
        _row("cost_forecast", 2),
        _row("cost_forecast", 1),
        _row("market_value", 1, ExecutionStatus.COMPLETED),
    ]

    latest = latest_per_agent(rows)

    assert {name: execution.id for name, execution in latest.items()} == {
        "cost_forecast": "cost_forecast-3",
        "market_value": "market_value-1",
    }


def test_no_rows_gives_empty_mapping():
    assert latest_per_agent([]) == {}


def test_snapshot_emptiness_tracks_rows():
    assert ExecutionSnapshot(inspection_id="J1").is_empty is True
    rows = [_row("cost_forecast", 1)]
    snapshot = ExecutionSnapshot(inspection_id="J1", latest=latest_per_agent(rows), total_rows=1)
    assert snapshot.is_empty is False
    assert snapshot.agent_names() == ["cost_forecast"]
