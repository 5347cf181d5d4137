from autoinspect.schemas.watchdog import (
    JobResultItem,
    RetriedExecutionItem,
    ScanResponse,
    ScanSummary,
    StuckExecutionItem,
)

__all__ = [
    "JobResultItem",
    "RetriedExecutionItem",
    "ScanResponse",
    "ScanSummary",
    "StuckExecutionItem",
]
