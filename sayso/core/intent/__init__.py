"""Intent layer -- task planning and per-skill action resolution."""

from sayso.core.intent.planner import TaskPlanner, build_planning_message
from sayso.core.intent.resolver import SkillResolver

__all__ = ["SkillResolver", "TaskPlanner", "build_planning_message"]
