"""Execution engine -- schedules task waves, resolves tasks, aggregates results.

Public API::

    from sayso.engine import (
        DependencyScheduler,
        TaskExecutorAdapter,
        aggregate,
    )
"""

from sayso.engine.aggregator import NO_ACTION_REPLY, aggregate
from sayso.engine.executor import TaskExecutorAdapter
from sayso.engine.scheduler import DependencyScheduler

__all__ = [
    "DependencyScheduler",
    "NO_ACTION_REPLY",
    "TaskExecutorAdapter",
    "aggregate",
]
