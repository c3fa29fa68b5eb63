"""Task executor adapter -- turns one ready task into a :class:`TaskResult`.

For every :class:`TaskSpec` handed over by the scheduler it:

1. Fills ``{{key}}`` placeholders in the task input and platform hint from
   the current placeholder snapshot.
2. Asks the skill resolver for a typed action.
3. Optionally executes the action right away when the skill yields outputs
   (document / folder creation) so that dependants see real URLs.
4. Returns a :class:`TaskResult` describing the outcome.
"""

from __future__ import annotations

import time
import traceback

from sayso.core.task.models import TaskResult, TaskSpec
from sayso.core.task.placeholders import (
    PlaceholderStore,
    find_placeholders,
    outputs_from_summary,
    substitute,
)
from sayso.skills.registry import SkillRegistry
from sayso.utils.exceptions import SaysoError
from sayso.utils.logging import get_logger


class TaskExecutorAdapter:
    """Resolve (and optionally execute) individual tasks.

    Parameters
    ----------
    resolver:
        Object with ``async resolve(skill, text, platform=None)`` returning an
        action descriptor, normally a
        :class:`~sayso.core.intent.resolver.SkillResolver`.
    registry:
        Skill registry used to decide which skills yield outputs.  Defaults
        to :meth:`SkillRegistry.default`.
    action_executor:
        Optional :class:`~sayso.executors.dispatcher.ActionExecutor`.  When
        given, actions of output-yielding skills are executed immediately
        and their outputs published for later waves.
    """

    def __init__(
        self,
        resolver,
        registry: SkillRegistry | None = None,
        action_executor=None,
    ) -> None:
        self.resolver = resolver
        self.registry = registry or SkillRegistry.default()
        self.action_executor = action_executor
        self.logger = get_logger("engine.executor")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def execute_task(
        self,
        task: TaskSpec,
        store: PlaceholderStore,
        request=None,
    ) -> TaskResult:
        """Run a single *task* end-to-end.

        Errors are caught and returned inside the :class:`TaskResult` rather
        than propagated.
        """
        start = time.monotonic()
        values = store.snapshot()
        text = substitute(task.input, values)
        platform = substitute(task.platform, values) if task.platform else None

        unresolved = find_placeholders(text)
        if unresolved:
            self.logger.debug(
                "placeholders_unresolved",
                task_id=task.id,
                keys=sorted(unresolved),
            )

        self.logger.info("task_start", task_id=task.id, skill=task.skill_name)

        try:
            action = await self.resolver.resolve(task.skill, text, platform=platform)
        except SaysoError as exc:
            return self._fail(task, str(exc), start)
        except Exception as exc:
            self.logger.error(
                "task_unexpected_error",
                task_id=task.id,
                error=str(exc),
                traceback=traceback.format_exc(),
            )
            return self._fail(task, f"Unexpected error: {exc}", start)

        summary = None
        outputs: dict[str, str] = {}
        if self.action_executor is not None and self.registry.yields_outputs(task.skill):
            try:
                summary = await self.action_executor.execute(action, request)
            except SaysoError as exc:
                return self._fail(task, str(exc), start)
            except Exception as exc:
                self.logger.error(
                    "task_unexpected_error",
                    task_id=task.id,
                    error=str(exc),
                    traceback=traceback.format_exc(),
                )
                return self._fail(task, f"Unexpected error: {exc}", start)
            outputs = outputs_from_summary(action.type, summary)

        duration = round(time.monotonic() - start, 4)
        self.logger.info(
            "task_complete",
            task_id=task.id,
            action_type=action.type,
            outputs=sorted(outputs),
            duration=duration,
        )
        return TaskResult(
            task_id=task.id,
            action=action,
            outputs=outputs,
            summary=summary,
            duration_seconds=duration,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _fail(self, task: TaskSpec, error_msg: str, start: float) -> TaskResult:
        duration = round(time.monotonic() - start, 4)
        self.logger.error(
            "task_failed",
            task_id=task.id,
            skill=task.skill_name,
            error=error_msg,
            duration=duration,
        )
        return TaskResult(
            task_id=task.id,
            error=error_msg,
            duration_seconds=duration,
        )
