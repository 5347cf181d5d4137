"""Run one agent watchdog pass by hand, or preview what the next pass would do."""

import argparse
import json
import sys
from datetime import timedelta
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from autoinspect.core.startup import bootstrap
from autoinspect.schemas.watchdog import ScanResponse, StuckExecutionItem
from autoinspect.watchdog.scanner import ScanScheduler


def _print_preview(scheduler: ScanScheduler) -> int:
    views = scheduler.preview()
    if not views:
        print("No running agent executions.")
        return 0
    for view in views:
        item = StuckExecutionItem.from_view(view)
        print(
            f"[{item.job_id}] {item.agent_name} execution={item.execution_id} "
            f"attempt={item.attempt}/{item.max_retries} running_for={item.minutes_running}m "
            f"verdict={item.verdict}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="run_watchdog", description="Agent execution watchdog")
    parser.add_argument("--dry-run", action="store_true", help="Only list running executions and their verdict")
    parser.add_argument("--timeout-minutes", type=int, default=None, help="Override AGENT_TIMEOUT_MINUTES")
    args = parser.parse_args(argv)

    bootstrap()
    timeout = timedelta(minutes=args.timeout_minutes) if args.timeout_minutes is not None else None
    scheduler = ScanScheduler(timeout=timeout)

    if args.dry_run:
        return _print_preview(scheduler)

    report = scheduler.run()
    print(json.dumps(ScanResponse.from_report(report).model_dump(mode="json"), indent=2))
    return 0 if report.success else 2


if __name__ == "__main__":
    raise SystemExit(main())
