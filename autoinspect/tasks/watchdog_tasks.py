from __future__ import annotations

import logging
import uuid
from typing import Any

from autoinspect.schemas.watchdog import ScanResponse
from autoinspect.tasks.celery_app import celery_app
from autoinspect.tasks.hooks import after_task, before_task
from autoinspect.watchdog.scanner import ScanScheduler

logger = logging.getLogger(__name__)

SCAN_TASK_NAME = "watchdog.scan_agent_executions"


@celery_app.task(bind=True, name=SCAN_TASK_NAME, ignore_result=False)
def scan_agent_executions_task(self) -> dict[str, Any]:
    """Periodic entry point: one watchdog pass, no input payload."""
    context = {
        "task_id": getattr(self.request, "id", None),
        "trace_id": uuid.uuid4().hex,
    }
    logger.info("task.start", extra=before_task(task_name=SCAN_TASK_NAME, context=context))

    report = ScanScheduler().run()
    response = ScanResponse.from_report(report)

    status = "succeeded" if report.success else "failed"
    finish = after_task(task_name=SCAN_TASK_NAME, context=context, status=status, **report.summary.to_dict())
    if report.success:
        logger.info("task.finish", extra=finish)
    else:
        logger.error("task.failed", extra=finish)
    return response.model_dump(mode="json")
