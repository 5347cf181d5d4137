"""Agent-execution watchdog: stuck/failed agent detection and retry coordination."""

from autoinspect.watchdog.aggregator import BatchSummary, JobOutcome, ScanOutcome, ScanReport
from autoinspect.watchdog.classifier import HealthClassifier, JobHealth, Verdict, classify_execution
from autoinspect.watchdog.dispatcher import RetriedExecution, RetryDispatcher
from autoinspect.watchdog.scanner import ScanScheduler, StuckExecutionView
from autoinspect.watchdog.terminal import TerminalFailureHandler

__all__ = [
    "BatchSummary",
    "HealthClassifier",
    "JobHealth",
    "JobOutcome",
    "RetriedExecution",
    "RetryDispatcher",
    "ScanOutcome",
    "ScanReport",
    "ScanScheduler",
    "StuckExecutionView",
    "TerminalFailureHandler",
    "Verdict",
    "classify_execution",
]
