"""Task plan model, dependency graph and placeholder handling.

Public API::

    from sayso.core.task import (
        PlaceholderStore,
        PlanError,
        PlanOutcome,
        TaskGraph,
        TaskPlan,
        TaskResult,
        TaskSpec,
        substitute,
    )
"""

from sayso.core.task.graph import TaskGraph
from sayso.core.task.models import PlanError, PlanOutcome, TaskPlan, TaskResult, TaskSpec
from sayso.core.task.placeholders import PlaceholderStore, outputs_from_summary, substitute

__all__ = [
    "PlaceholderStore",
    "PlanError",
    "PlanOutcome",
    "TaskGraph",
    "TaskPlan",
    "TaskResult",
    "TaskSpec",
    "outputs_from_summary",
    "substitute",
]
