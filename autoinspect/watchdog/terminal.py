"""Fail the inspection once any of its agents has exhausted its retries."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from autoinspect.services.inspection_service import InspectionService

logger = logging.getLogger(__name__)


def exhausted_failure_message(agent_names: Sequence[str]) -> str:
    return f"Agent(s) failed after max retries: {', '.join(agent_names)}"


class TerminalFailureHandler:
    def __init__(self, inspections: InspectionService) -> None:
        self.inspections = inspections

    def handle(self, inspection_id: str, exhausted_agent_names: Sequence[str]) -> bool:
        """Mark the inspection failed when ``exhausted_agent_names`` is non-empty.

        Re-applying to an already failed inspection rewrites the same values.
        Returns whether a failure was recorded.
        """
        if not exhausted_agent_names:
            return False

        inspection = self.inspections.mark_failed(inspection_id, exhausted_failure_message(exhausted_agent_names))
        if inspection is None:
            logger.warning(
                "watchdog.job.missing",
                extra={"event": "watchdog.job.missing", "job_id": inspection_id},
            )
            return False

        logger.info(
            "watchdog.job.failed",
            extra={
                "event": "watchdog.job.failed",
                "job_id": inspection_id,
                "agent_name": ",".join(exhausted_agent_names),
            },
        )
        return True
