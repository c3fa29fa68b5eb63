"""Central registry of the skills a task plan may use."""

from __future__ import annotations

from pydantic import BaseModel

from sayso.skills.models import SkillType
from sayso.skills.prompts import (
    CREATE_DOC_PROMPT,
    CREATE_FOLDER_PROMPT,
    SEND_MESSAGE_PROMPT,
)
from sayso.utils.exceptions import SkillNotFoundError
from sayso.utils.logging import get_logger

logger = get_logger(__name__)


class SkillDefinition(BaseModel):
    """Everything needed to resolve one skill into an action.

    Attributes:
        name: The skill tag the planner uses.
        description: One-line summary shown to the planner and in the API.
        prompt: System prompt for the parameter extraction call.
        action_type: The ``type`` of action this skill resolves to.
        yields_outputs: Whether executing the action produces values (URL,
            id, note) that later tasks may reference as placeholders.
    """

    name: SkillType
    description: str
    prompt: str
    action_type: str
    yields_outputs: bool = False


class SkillRegistry:
    """Lookup table from :class:`SkillType` to :class:`SkillDefinition`.

    Typical lifecycle::

        registry = SkillRegistry.default()
        skill = registry.get(SkillType.CREATE_DOC)
    """

    def __init__(self) -> None:
        self._skills: dict[SkillType, SkillDefinition] = {}

    @classmethod
    def default(cls) -> SkillRegistry:
        """Return a registry holding the built-in skills."""
        registry = cls()
        registry.register(SkillDefinition(
            name=SkillType.CREATE_DOC,
            description="Create a cloud document",
            prompt=CREATE_DOC_PROMPT,
            action_type="feishu_create_doc",
            yields_outputs=True,
        ))
        registry.register(SkillDefinition(
            name=SkillType.CREATE_FOLDER,
            description="Create a cloud drive folder",
            prompt=CREATE_FOLDER_PROMPT,
            action_type="feishu_create_folder",
            yields_outputs=True,
        ))
        registry.register(SkillDefinition(
            name=SkillType.SEND_MESSAGE,
            description="Send a message to a person, group or channel",
            prompt=SEND_MESSAGE_PROMPT,
            action_type="send_message",
        ))
        return registry

    def register(self, skill: SkillDefinition) -> None:
        """Add (or replace) a skill."""
        if skill.name in self._skills:
            logger.warning("skill_replaced", skill=skill.name.value)
        self._skills[skill.name] = skill

    def get(self, name: SkillType | str) -> SkillDefinition:
        """Return the skill registered under *name*.

        Raises :class:`SkillNotFoundError` for unknown names.
        """
        try:
            key = SkillType(name)
        except ValueError as exc:
            raise SkillNotFoundError(str(name)) from exc
        skill = self._skills.get(key)
        if skill is None:
            raise SkillNotFoundError(key.value)
        return skill

    def list_all(self) -> list[SkillDefinition]:
        return list(self._skills.values())

    def yields_outputs(self, name: SkillType | str) -> bool:
        try:
            return self.get(name).yields_outputs
        except SkillNotFoundError:
            return False
