from __future__ import annotations

from autoinspect.watchdog.terminal import TerminalFailureHandler, exhausted_failure_message


class _StubInspections:
    def __init__(self, found=True):
        self.found = found
        self.calls = []

    def mark_failed(self, inspection_id, error_message):
        self.calls.append((inspection_id, error_message))
        return object() if self.found else None


def test_failure_message_lists_agents_in_order():
    assert exhausted_failure_message(["cost_forecast", "market_value"]) == (
        "Agent(s) failed after max retries: cost_forecast, market_value"
    )


def test_no_exhausted_agents_leaves_job_alone():
    store = _StubInspections()
    assert TerminalFailureHandler(store).handle("J1", []) is False
    assert store.calls == []


def test_exhausted_agents_fail_the_job():
    store = _StubInspections()
    assert TerminalFailureHandler(store).handle("J1", ["cost_forecast"]) is True
    assert store.calls == [("J1", "Agent(s) failed after max retries: cost_forecast")]


def test_missing_job_is_not_reported_failed():
    assert TerminalFailureHandler(_StubInspections(found=False)).handle("J404", ["cost_forecast"]) is False
