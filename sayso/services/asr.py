"""ASR orchestration -- transcribed text in, executed actions out.

Flow for one request:

1. Plan the utterance into dependent tasks (one LLM call).
2. Run the plan through the :class:`DependencyScheduler`, which resolves
   every task into a typed action wave by wave.
3. Execute the resulting actions in plan order, filling ``{{doc_url}}`` and
   friends from the summaries of the actions executed before them.
"""

from __future__ import annotations

import time

import structlog

from sayso.api.v1.schemas.asr import ASRRequest, ASRResponse
from sayso.core.task.models import PlanOutcome, TaskPlan
from sayso.core.task.placeholders import PlaceholderStore, outputs_from_summary, substitute
from sayso.engine.scheduler import DependencyScheduler
from sayso.skills.models import ActionDescriptor, parse_action
from sayso.utils.exceptions import PlanningError, SaysoError
from sayso.utils.logging import get_logger

logger = get_logger("services.asr")

DONE_MESSAGE = "Done"


class ASRService:
    """Plans, resolves and executes the actions behind one utterance.

    Parameters
    ----------
    planner:
        A :class:`~sayso.core.intent.planner.TaskPlanner`.
    scheduler:
        Scheduler used for real requests.  Its adapter may execute
        output-yielding actions eagerly; their summaries are reused here.
    action_executor:
        The :class:`~sayso.executors.dispatcher.ActionExecutor` carrying out
        the remaining actions.
    preview_scheduler:
        Resolution-only scheduler for :meth:`preview`.  Defaults to
        *scheduler*.
    """

    def __init__(
        self,
        planner,
        scheduler: DependencyScheduler,
        action_executor,
        preview_scheduler: DependencyScheduler | None = None,
    ) -> None:
        self.planner = planner
        self.scheduler = scheduler
        self.action_executor = action_executor
        self.preview_scheduler = preview_scheduler or scheduler

    async def process(self, request: ASRRequest) -> ASRResponse:
        task_id = str(time.time_ns())
        with structlog.contextvars.bound_contextvars(task_id=task_id):
            return await self._process(task_id, request)

    async def _process(self, task_id: str, request: ASRRequest) -> ASRResponse:
        logger.info("asr_request", text_len=len(request.text), user_id=request.user_id)

        try:
            plan = await self.planner.plan(request.text, request.user_id, request.contacts)
        except PlanningError as exc:
            logger.error("asr_planning_failed", error=str(exc))
            return ASRResponse(task_id=task_id, success=False, message=f"LLM processing failed: {exc}")

        outcome = await self.scheduler.execute_plan(plan, request)

        if outcome.no_action:
            return ASRResponse(task_id=task_id, success=True, message=outcome.reply or "")

        if outcome.error is not None:
            # Eagerly executed actions already exist on the platform.
            executed = [r.summary for r in outcome.results if r.summary is not None]
            logger.error(
                "asr_plan_failed",
                kind=outcome.error.kind,
                task_id=outcome.error.task_id,
                stuck=outcome.error.stuck_task_ids,
                executed=len(executed),
            )
            return ASRResponse(
                task_id=task_id,
                success=False,
                message=outcome.error.message,
                actions=executed,
            )

        store = PlaceholderStore()
        summaries = []
        for result in outcome.results:
            action = result.action
            summary = result.summary
            if summary is None:
                action = apply_placeholders(action, store)
                try:
                    summary = await self.action_executor.execute(action, request)
                except SaysoError as exc:
                    logger.error("asr_action_failed", action_type=action.type, error=str(exc))
                    return ASRResponse(
                        task_id=task_id,
                        success=False,
                        message=f"Action {action.type} failed: {exc}",
                        actions=summaries,
                    )
            summaries.append(summary)
            store.update(outputs_from_summary(action.type, summary))

        logger.info("asr_complete", actions=len(summaries))
        return ASRResponse(
            task_id=task_id,
            success=True,
            message=outcome.reply or DONE_MESSAGE,
            actions=summaries,
        )

    async def preview(
        self,
        text: str,
        user_id: str | None = None,
        contacts=(),
    ) -> tuple[TaskPlan, PlanOutcome]:
        """Plan and resolve *text* without executing anything.

        Raises :class:`PlanningError` when planning fails.
        """
        plan = await self.planner.plan(text, user_id, contacts)
        outcome = await self.preview_scheduler.execute_plan(plan)
        return plan, outcome


def apply_placeholders(action: ActionDescriptor, store: PlaceholderStore) -> ActionDescriptor:
    """Return *action* with ``{{key}}`` tokens in its params filled from *store*."""
    values = store.snapshot()
    if not values:
        return action
    data = action.model_dump()
    filled = substitute(data, values)
    if filled == data:
        return action
    return parse_action(filled)
