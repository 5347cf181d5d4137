"""Manual trigger and observability endpoints for the agent watchdog."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from autoinspect.schemas.watchdog import ScanResponse, StuckExecutionItem
from autoinspect.watchdog.scanner import ScanScheduler

router = APIRouter(prefix="/watchdog", tags=["watchdog"])


def get_scheduler() -> ScanScheduler:
    return ScanScheduler()


@router.post("/scan", response_model=ScanResponse)
def trigger_scan(response: Response) -> ScanResponse:
    """Run one watchdog pass now, same as the periodic task."""
    report = get_scheduler().run()
    if not report.success:
        response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return ScanResponse.from_report(report)


@router.get("/stuck", response_model=list[StuckExecutionItem])
def list_running_executions() -> list[StuckExecutionItem]:
    """Running executions of processing inspections and what the next pass would do with them."""
    return [StuckExecutionItem.from_view(view) for view in get_scheduler().preview()]
