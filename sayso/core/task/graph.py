"""Read-only dependency graph over a :class:`TaskPlan`."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from sayso.core.task.models import TaskPlan, TaskSpec


class TaskGraph:
    """Lookup and readiness checks for the tasks of one plan.

    A task is ready when every id in its ``depends_on`` is among the ids of
    tasks that already completed successfully.  Position in the plan plays
    no part in readiness.
    """

    def __init__(self, plan: TaskPlan) -> None:
        self._tasks: dict[str, TaskSpec] = {t.id: t for t in plan.tasks}
        self._dependents: dict[str, list[str]] = defaultdict(list)
        for task in plan.tasks:
            for dep_id in task.depends_on:
                self._dependents[dep_id].append(task.id)

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    @property
    def task_ids(self) -> frozenset[str]:
        return frozenset(self._tasks)

    def get(self, task_id: str) -> TaskSpec:
        """Return the task with *task_id*; raises ``KeyError`` if unknown."""
        return self._tasks[task_id]

    def dependents_of(self, task_id: str) -> list[str]:
        """Ids of the tasks that list *task_id* in their ``depends_on``."""
        return list(self._dependents.get(task_id, ()))

    def is_ready(self, task_id: str, completed_success_ids: Iterable[str]) -> bool:
        done = completed_success_ids
        if not isinstance(done, (set, frozenset)):
            done = set(done)
        return all(dep_id in done for dep_id in self._tasks[task_id].depends_on)
