"""Naming, planning, retention, and execution of filesystem operations."""

from .executor import OperationExecutor
from .models import (
    ExecutionReport,
    Operation,
    OperationKind,
    OperationPlan,
    PlanMode,
    RetentionDecision,
)
from .naming import Namer
from .planner import OrganizerPlanner
from .retention import RetentionPolicy

__all__ = [
    "ExecutionReport",
    "Namer",
    "Operation",
    "OperationExecutor",
    "OperationKind",
    "OperationPlan",
    "OrganizerPlanner",
    "PlanMode",
    "RetentionDecision",
    "RetentionPolicy",
]
