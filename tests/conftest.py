import asyncio

import pytest

from sayso.core.task.models import TaskPlan
from sayso.skills.models import ActionSummary, parse_action
from sayso.utils.exceptions import (
    ActionValidationError,
    PlatformAPIError,
    SkillNotFoundError,
)


class FakeLLM:
    """Returns canned JSON answers in order and records every call."""

    def __init__(self, *responses, error=None):
        self.responses = list(responses)
        self.error = error
        self.calls = []

    async def complete_json(self, system, user):
        self.calls.append((system, user))
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)


class FakeResolver:
    """Resolves tasks without an LLM.

    The resolved text becomes the doc title / folder name / message text, so
    tests can see what substitution produced.  ``events`` records start and
    end of every call to check wave ordering.
    """

    def __init__(self):
        self.calls = []
        self.events = []
        self.fail_on = set()
        self.crash_on = set()
        self.delays = {}

    async def resolve(self, skill, text, platform=None):
        name = getattr(skill, "value", skill)
        self.calls.append((name, text, platform))
        self.events.append(("start", text))
        await asyncio.sleep(self.delays.get(text, 0))
        self.events.append(("end", text))

        if text in self.fail_on:
            raise ActionValidationError(name, f"cannot resolve '{text}'")
        if text in self.crash_on:
            raise RuntimeError("resolver crashed")

        if name == "create_doc":
            return parse_action({"type": "feishu_create_doc", "params": {"title": text}})
        if name == "create_folder":
            return parse_action({"type": "feishu_create_folder", "params": {"name": text}})
        if name == "send_message":
            return parse_action({
                "type": "send_message",
                "params": {
                    "platform": platform or "feishu",
                    "content": {"text": text},
                    "targets": ["ou_alice"],
                },
            })
        raise SkillNotFoundError(name)

    def called_texts(self):
        return [text for _, text, _ in self.calls]


class FakeActionExecutor:
    """Pretends to execute actions; document URLs are derived from the title."""

    def __init__(self):
        self.executed = []
        self.fail_types = set()

    async def execute(self, action, request=None):
        self.executed.append(action)
        if action.type in self.fail_types:
            raise PlatformAPIError("feishu", action.type, "boom")
        if action.type == "feishu_create_doc":
            return ActionSummary(
                type="feishu_doc",
                target=action.params.title,
                id=f"doc-{action.params.title}",
                url=f"https://x/{action.params.title}",
                note="Saved in folder 'My Space'",
            )
        if action.type == "feishu_create_folder":
            return ActionSummary(
                type="feishu_folder",
                target=action.params.name,
                id=f"fld-{action.params.name}",
                url=f"https://x/folder/{action.params.name}",
            )
        return ActionSummary(
            type="feishu_message",
            target=action.params.targets[0] if action.params.targets else "",
            id=f"msg-{len(self.executed)}",
        )


@pytest.fixture
def fake_llm():
    return FakeLLM


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def action_executor():
    return FakeActionExecutor()


@pytest.fixture
def make_plan():
    """Build a plan from ``(id, skill, input, depends_on)`` tuples."""

    def _make(*tasks, summary="test plan"):
        return TaskPlan.model_validate({
            "summary": summary,
            "tasks": [
                {"id": tid, "skill": skill, "input": text, "depends_on": list(deps)}
                for tid, skill, text, deps in tasks
            ],
        })

    return _make
