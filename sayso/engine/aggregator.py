"""Collects per-task results into the final :class:`PlanOutcome`."""

from __future__ import annotations

from collections.abc import Mapping

from sayso.core.task.models import PlanError, PlanOutcome, TaskPlan, TaskResult

NO_ACTION_REPLY = (
    "Sorry, I did not catch what you want me to do. "
    "You can ask me to create a document, create a folder, or send a message."
)


def aggregate(
    plan: TaskPlan,
    results: Mapping[str, TaskResult],
    failure: PlanError | None = None,
) -> PlanOutcome:
    """Build the outcome of *plan* from its task *results*.

    Results and actions follow the plan's task order regardless of the order
    in which tasks finished.  Tasks that never ran are skipped.
    """
    if not plan.tasks:
        return PlanOutcome(summary=plan.summary, no_action=True, reply=NO_ACTION_REPLY)

    ordered = [results[t.id] for t in plan.tasks if t.id in results]
    produced = [r.action for r in ordered if r.action is not None]

    if failure is None:
        return PlanOutcome(summary=plan.summary, actions=produced, results=ordered)

    return PlanOutcome(
        summary=plan.summary,
        partial_actions=produced,
        error=failure,
        results=ordered,
    )
