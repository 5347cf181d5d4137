"""Celery application bootstrap and periodic watchdog schedule."""

from __future__ import annotations

import os

from celery import Celery
from celery.signals import worker_process_init

from autoinspect.core.config import get_config
from autoinspect.core.logging_config import configure_logging

config = get_config()

celery_app = Celery(
    "autoinspect",
    broker=config.CELERY_BROKER_URL,
    backend=config.CELERY_RESULT_BACKEND,
    include=["autoinspect.tasks.watchdog_tasks"],
)
celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    worker_hijack_root_logger=False,
    beat_schedule={
        "watchdog-scan-agent-executions": {
            "task": "watchdog.scan_agent_executions",
            "schedule": float(config.WATCHDOG_SCAN_INTERVAL_SECONDS),
            # A pass that has not started by the next tick is superseded by it.
            "options": {"expires": float(config.WATCHDOG_SCAN_INTERVAL_SECONDS)},
        },
    },
)

# Local/dev convenience: run tasks synchronously when requested.
if os.getenv("CELERY_TASK_ALWAYS_EAGER", "false").lower() in {"1", "true", "yes", "on"}:
    celery_app.conf.task_always_eager = True


@worker_process_init.connect
def _configure_worker_logging(**_kwargs) -> None:
    configure_logging()
