"""SQLAlchemy model package for inspections and agent executions."""

from autoinspect.models.agent_execution import AgentExecution
from autoinspect.models.base import Base
from autoinspect.models.enums import ExecutionStatus, InspectionStatus
from autoinspect.models.inspection import Inspection

__all__ = [
    "AgentExecution",
    "Base",
    "ExecutionStatus",
    "Inspection",
    "InspectionStatus",
]
