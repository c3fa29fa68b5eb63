"""Task-related data models.

Defines the plan produced by the planner, the per-task results recorded by
the executor adapter, and the aggregated outcome handed back to callers.
Plans are validated once, at construction, and are immutable afterwards.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from sayso.skills.models import ActionDescriptor, ActionSummary, SkillType
from sayso.utils.exceptions import PlanValidationError

__all__ = [
    "PlanError",
    "PlanOutcome",
    "SkillType",
    "TaskPlan",
    "TaskResult",
    "TaskSpec",
]


class TaskSpec(BaseModel):
    """A single planned unit of work.

    Attributes:
        id: Identifier, unique within the plan (e.g. ``task_1``).
        skill: Capability tag.  Unknown tags are kept as plain strings so
            that they fail at execution time, on the task itself.
        platform: Target integration hint (``feishu`` / ``slack``), if any.
        input: Free-text description handed to skill resolution.  May
            contain ``{{key}}`` placeholders.
        depends_on: Ids of tasks that must succeed before this one runs.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    skill: Union[SkillType, str] = Field(union_mode="left_to_right")
    platform: str | None = None
    input: str = ""
    depends_on: tuple[str, ...] = ()

    @field_validator("depends_on", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,) if value else ()
        return value

    @field_validator("platform", mode="before")
    @classmethod
    def _blank_platform(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def skill_name(self) -> str:
        return self.skill.value if isinstance(self.skill, SkillType) else str(self.skill)


class TaskPlan(BaseModel):
    """Summary plus the ordered list of tasks for one request.

    List order matters only for presenting results; execution order comes
    from ``depends_on`` alone.

    Raises :class:`PlanValidationError` on duplicate ids or on dependencies
    that name a task outside the plan.  Self-dependencies and cycles are
    accepted here and reported by the scheduler.
    """

    model_config = ConfigDict(frozen=True)

    summary: str = ""
    tasks: tuple[TaskSpec, ...] = ()

    @field_validator("tasks", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return () if value is None else value

    @model_validator(mode="after")
    def _check_references(self) -> TaskPlan:
        problems: list[str] = []
        seen: set[str] = set()
        for task in self.tasks:
            if task.id in seen:
                problems.append(f"duplicate task id '{task.id}'")
            seen.add(task.id)

        for task in self.tasks:
            for dep_id in task.depends_on:
                if dep_id not in seen:
                    problems.append(
                        f"task '{task.id}' depends on unknown task '{dep_id}'"
                    )

        if problems:
            raise PlanValidationError(problems)
        return self


class TaskResult(BaseModel):
    """Outcome of running one task through the executor adapter.

    Attributes:
        task_id: The originating task's identifier.
        action: The resolved action, when resolution succeeded.
        error: Human-readable error message on failure.
        outputs: Placeholder values produced by this task (``doc_url`` ...).
            Read-only.
        summary: Execution summary, present only when the action was
            executed while the plan was running.
        duration_seconds: Wall-clock time taken.
    """

    model_config = ConfigDict(frozen=True)

    task_id: str
    action: ActionDescriptor | None = None
    error: str | None = None
    outputs: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    summary: ActionSummary | None = None
    duration_seconds: float = 0.0

    @field_validator("outputs", mode="after")
    @classmethod
    def _read_only_outputs(cls, value):
        return MappingProxyType(dict(value))

    @field_serializer("outputs")
    def _serialize_outputs(self, value):
        return dict(value)

    @property
    def succeeded(self) -> bool:
        return self.error is None


class PlanError(BaseModel):
    """Why a plan stopped early.

    ``kind="task_failed"`` names the failing task in ``task_id``;
    ``kind="deadlock"`` lists the tasks that could never become ready in
    ``stuck_task_ids`` with ``reason`` ``"cycle"`` or ``"blocked"``.
    """

    kind: Literal["task_failed", "deadlock"]
    message: str
    task_id: str | None = None
    stuck_task_ids: list[str] = []
    reason: str | None = None


class PlanOutcome(BaseModel):
    """Final result of executing a :class:`TaskPlan`.

    On success ``actions`` holds every produced action in plan order.  On
    failure ``actions`` is empty, ``error`` explains what went wrong and
    ``partial_actions`` keeps whatever had already been produced.
    """

    summary: str = ""
    actions: list[ActionDescriptor] = []
    partial_actions: list[ActionDescriptor] = []
    error: PlanError | None = None
    results: list[TaskResult] = []
    no_action: bool = False
    reply: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None
