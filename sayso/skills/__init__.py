from sayso.skills.models import (
    ActionDescriptor,
    ActionSummary,
    CreateDocAction,
    CreateFolderAction,
    Platform,
    SendMessageAction,
    SendResult,
    SkillType,
    parse_action,
)
from sayso.skills.registry import SkillDefinition, SkillRegistry

__all__ = [
    "ActionDescriptor",
    "ActionSummary",
    "CreateDocAction",
    "CreateFolderAction",
    "Platform",
    "SendMessageAction",
    "SendResult",
    "SkillDefinition",
    "SkillRegistry",
    "SkillType",
    "parse_action",
]
