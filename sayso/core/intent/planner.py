"""Task planner -- turns one user utterance into a validated :class:`TaskPlan`.

The planner makes a single LLM call.  Everything that can go wrong here
(provider failure, non-JSON output, a structure that is not a plan, broken
dependency references) surfaces as :class:`PlanningError` before any task is
scheduled.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import ValidationError

from sayso.core.intent.prompts.planning import (
    CONTACTS_HEADER,
    PLANNER_SYSTEM_PROMPT,
    PLANNER_USER_TEMPLATE,
    REQUESTER_LINE,
)
from sayso.core.task.models import TaskPlan
from sayso.utils.exceptions import PlanningError
from sayso.utils.logging import get_logger

logger = get_logger("intent.planner")


class TaskPlanner:
    """Plans tasks for a user request.

    Parameters
    ----------
    llm_client:
        A :class:`~sayso.core.llm.client.LLMClient` (or anything exposing an
        async ``complete_json(system, user)``).
    """

    def __init__(self, llm_client):
        self.llm = llm_client

    async def plan(
        self,
        user_text: str,
        user_id: str | None = None,
        contacts: Sequence = (),
    ) -> TaskPlan:
        """Return the task plan for *user_text*.

        Parameters
        ----------
        user_text:
            The transcribed request.
        user_id:
            Identifier of the requesting user, shown to the model so that
            "send it to me" can be resolved.
        contacts:
            Known contacts (objects with ``name``, ``open_id``, ``user_id``
            and ``email`` attributes) used to map names to platform ids.

        Raises
        ------
        PlanningError
            On any LLM failure or when the response is not a usable plan.
        """
        user_msg = build_planning_message(user_text, user_id, contacts)

        try:
            data = await self.llm.complete_json(PLANNER_SYSTEM_PROMPT, user_msg)
        except Exception as exc:
            logger.error("planning_llm_failed", error=str(exc))
            raise PlanningError(f"Planning failed: {exc}") from exc

        if not isinstance(data, dict):
            raise PlanningError("Planner response is not a JSON object")

        try:
            plan = TaskPlan.model_validate(
                {"summary": data.get("summary") or "", "tasks": data.get("tasks")}
            )
        except PlanningError:
            raise
        except ValidationError as exc:
            logger.error("planning_invalid_structure", errors=exc.error_count())
            raise PlanningError(f"Planner returned an unusable plan: {exc}") from exc

        logger.info(
            "plan_created",
            summary=plan.summary,
            tasks=[(t.id, t.skill_name, list(t.depends_on)) for t in plan.tasks],
        )
        return plan


def build_planning_message(
    user_text: str,
    user_id: str | None = None,
    contacts: Sequence = (),
) -> str:
    """Compose the user message sent to the planner."""
    lines: list[str] = []
    if user_id:
        lines.append(REQUESTER_LINE.format(user_id=user_id))

    contact_lines = [_format_contact(c) for c in contacts]
    contact_lines = [line for line in contact_lines if line]
    if contact_lines:
        lines.append(CONTACTS_HEADER)
        lines.extend(contact_lines)

    if lines:
        lines.append("")
    lines.append(PLANNER_USER_TEMPLATE.format(user_text=user_text))
    return "\n".join(lines)


def _format_contact(contact) -> str:
    name = getattr(contact, "name", "") or ""
    if not name:
        return ""
    ids = [
        f"{field}={value}"
        for field in ("open_id", "user_id", "email")
        if (value := getattr(contact, field, None))
    ]
    return f"- {name}: {', '.join(ids)}" if ids else f"- {name}"
