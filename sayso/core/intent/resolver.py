"""Skill resolution -- one task description in, one typed action out.

The resolver looks the skill up in the registry, asks the LLM to extract the
action parameters with that skill's prompt, and validates the answer into
the :data:`~sayso.skills.models.ActionDescriptor` union.  It never touches a
platform.
"""

from __future__ import annotations

from pydantic import ValidationError

from sayso.skills.models import ActionDescriptor, SkillType, parse_action
from sayso.skills.registry import SkillRegistry
from sayso.utils.exceptions import ActionValidationError
from sayso.utils.logging import get_logger

logger = get_logger("intent.resolver")


class SkillResolver:
    """Resolves ``(skill, text)`` pairs into actions.

    Parameters
    ----------
    llm_client:
        Object exposing an async ``complete_json(system, user)``.
    registry:
        Skill registry.  Defaults to :meth:`SkillRegistry.default`.
    """

    def __init__(self, llm_client, registry: SkillRegistry | None = None):
        self.llm = llm_client
        self.registry = registry or SkillRegistry.default()

    async def resolve(
        self,
        skill: SkillType | str,
        text: str,
        platform: str | None = None,
    ) -> ActionDescriptor:
        """Return the action for *skill* described by *text*.

        Raises
        ------
        SkillNotFoundError
            When *skill* is not registered.
        ActionValidationError
            When the model's answer does not describe a valid action of the
            skill's type.
        LLMError
            When the model call itself fails.
        """
        definition = self.registry.get(skill)
        name = definition.name.value

        data = await self.llm.complete_json(definition.prompt, text)

        action_type = data.get("type") or definition.action_type
        if action_type != definition.action_type:
            raise ActionValidationError(
                name,
                f"expected action type '{definition.action_type}', got '{action_type}'",
            )

        params = data.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise ActionValidationError(name, "params must be a JSON object")

        if definition.name == SkillType.SEND_MESSAGE and platform and not params.get("platform"):
            params = {**params, "platform": platform}

        try:
            action = parse_action({"type": action_type, "params": params})
        except ValidationError as exc:
            raise ActionValidationError(name, _describe(exc)) from exc

        logger.debug("skill_resolved", skill=name, action_type=action.type)
        return action


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', 'invalid')}" if loc else err.get("msg", "invalid"))
    return "; ".join(parts)
