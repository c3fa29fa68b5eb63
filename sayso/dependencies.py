"""FastAPI dependency functions for injection into endpoint handlers.

Long-lived objects (the skill registry, platform clients holding HTTP
connection pools) are created during the app lifespan and stored on
``app.state``.  The rest is assembled per call from those pieces; the
objects involved are thin and cheap to build.
"""

from __future__ import annotations

from fastapi import Request

from sayso.config import settings
from sayso.core.intent.planner import TaskPlanner
from sayso.core.intent.resolver import SkillResolver
from sayso.core.llm.client import LLMClient
from sayso.engine.executor import TaskExecutorAdapter
from sayso.engine.scheduler import DependencyScheduler
from sayso.executors.dispatcher import ActionExecutor
from sayso.executors.feishu import FeishuExecutor
from sayso.executors.folder_matcher import FolderMatcher
from sayso.executors.slack import SlackExecutor
from sayso.services.asr import ASRService
from sayso.skills.registry import SkillRegistry
from sayso.utils.logging import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Skills registry (initialised during app lifespan)
# ---------------------------------------------------------------------------

def get_skills_registry(request: Request) -> SkillRegistry:
    """Return the global skills registry stored on ``app.state``."""
    return request.app.state.skills_registry


# ---------------------------------------------------------------------------
# LLM client
# ---------------------------------------------------------------------------

def _resolve_api_key() -> str:
    """Pick the API key for the configured provider.

    Resolution order:
      1. Provider-specific key (``ANTHROPIC_API_KEY``, ``OPENAI_API_KEY``,
         ``DEEPSEEK_API_KEY``)
      2. Generic ``LLM_API_KEY``
    """
    provider_keys: dict[str, str] = {
        "anthropic": settings.anthropic_api_key,
        "openai": settings.openai_api_key,
        "deepseek": settings.deepseek_api_key,
    }
    return provider_keys.get(settings.llm_provider) or settings.llm_api_key


def get_llm_client() -> LLMClient:
    """Build the LLM client.  Misconfiguration raises :class:`LLMError`."""
    return LLMClient(
        settings.llm_provider,
        _resolve_api_key(),
        settings.llm_model,
        base_url=settings.llm_base_url or None,
    )


# ---------------------------------------------------------------------------
# Executors
# ---------------------------------------------------------------------------

def get_action_executor(request: Request) -> ActionExecutor:
    state = request.app.state
    matcher = FolderMatcher(get_llm_client()) if settings.folder_match_with_llm else None
    feishu = FeishuExecutor(
        getattr(state, "feishu_client", None),
        enabled=settings.feishu_enabled,
        domain=settings.feishu_domain,
        folder_matcher=matcher,
    )
    slack = SlackExecutor(getattr(state, "slack_client", None), enabled=settings.slack_enabled)
    return ActionExecutor(feishu, slack)


# ---------------------------------------------------------------------------
# ASR service
# ---------------------------------------------------------------------------

def get_asr_service(request: Request) -> ASRService:
    """Wire planner, schedulers and executors for one request."""
    registry = get_skills_registry(request)
    llm = get_llm_client()
    action_executor = get_action_executor(request)
    resolver = SkillResolver(llm, registry)
    limit = settings.task_concurrency_limit or None

    preview = DependencyScheduler(TaskExecutorAdapter(resolver, registry), limit)
    if settings.eager_output_execution:
        scheduler = DependencyScheduler(
            TaskExecutorAdapter(resolver, registry, action_executor=action_executor),
            limit,
        )
    else:
        scheduler = preview

    return ASRService(
        TaskPlanner(llm),
        scheduler,
        action_executor,
        preview_scheduler=preview,
    )
