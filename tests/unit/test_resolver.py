"""Tests for skill resolution into typed actions."""
import pytest

from sayso.core.intent.resolver import SkillResolver
from sayso.skills.models import CreateDocAction, Platform, SendMessageAction
from sayso.skills.prompts import CREATE_DOC_PROMPT
from sayso.utils.exceptions import ActionValidationError, LLMError, SkillNotFoundError


class TestSkillResolver:
    @pytest.mark.asyncio
    async def test_create_doc(self, fake_llm):
        llm = fake_llm({
            "type": "feishu_create_doc",
            "params": {
                "title": "Weekly report",
                "folder_name": "Reports",
                "collaborators": [{"member_id": "Alice", "perm": "edit"}, {"member_id": "Bob", "perm": ""}],
            },
        })
        action = await SkillResolver(llm).resolve("create_doc", "Create the weekly report in Reports")

        assert isinstance(action, CreateDocAction)
        assert action.params.title == "Weekly report"
        assert action.params.collaborators[0].perm == "edit"
        assert action.params.collaborators[1].perm == "full_access"
        assert action.params.collaborators[1].member_type == "openid"
        assert llm.calls[0] == (CREATE_DOC_PROMPT, "Create the weekly report in Reports")

    @pytest.mark.asyncio
    async def test_missing_type_defaults_to_skill_action(self, fake_llm):
        llm = fake_llm({"params": {"name": "Q3"}})
        action = await SkillResolver(llm).resolve("create_folder", "make a Q3 folder")
        assert action.type == "feishu_create_folder"
        assert action.params.name == "Q3"

    @pytest.mark.asyncio
    async def test_platform_hint_fills_missing_platform(self, fake_llm):
        llm = fake_llm({"type": "send_message", "params": {"content": "hi", "targets": "C123"}})
        action = await SkillResolver(llm).resolve("send_message", "say hi", platform="slack")

        assert isinstance(action, SendMessageAction)
        assert action.params.platform is Platform.SLACK
        assert action.params.content.text == "hi"
        assert action.params.targets == ["C123"]

    @pytest.mark.asyncio
    async def test_explicit_platform_wins_over_hint(self, fake_llm):
        llm = fake_llm({"type": "send_message", "params": {"platform": "Feishu", "targets": ["ou_1"]}})
        action = await SkillResolver(llm).resolve("send_message", "say hi", platform="slack")
        assert action.params.platform is Platform.FEISHU

    @pytest.mark.asyncio
    async def test_link_card_keeps_placeholder(self, fake_llm):
        llm = fake_llm({"type": "send_message", "params": {
            "message_type": "link_card",
            "content": {"text": "Please take a look at the document", "url": "{{doc_url}}"},
            "targets": ["Alice"],
        }})
        action = await SkillResolver(llm).resolve("send_message", "Send the link to Alice (needs {{doc_url}})")
        assert action.params.content.url == "{{doc_url}}"

    @pytest.mark.asyncio
    async def test_wrong_action_type(self, fake_llm):
        llm = fake_llm({"type": "send_message", "params": {}})
        with pytest.raises(ActionValidationError, match="expected action type 'feishu_create_doc'"):
            await SkillResolver(llm).resolve("create_doc", "x")

    @pytest.mark.asyncio
    async def test_missing_required_field(self, fake_llm):
        llm = fake_llm({"type": "feishu_create_doc", "params": {"content": "body only"}})
        with pytest.raises(ActionValidationError, match="params.title"):
            await SkillResolver(llm).resolve("create_doc", "x")

    @pytest.mark.asyncio
    async def test_params_must_be_object(self, fake_llm):
        llm = fake_llm({"type": "feishu_create_folder", "params": ["Q3"]})
        with pytest.raises(ActionValidationError, match="params must be a JSON object"):
            await SkillResolver(llm).resolve("create_folder", "x")

    @pytest.mark.asyncio
    async def test_unknown_skill_skips_llm(self, fake_llm):
        llm = fake_llm()
        with pytest.raises(SkillNotFoundError):
            await SkillResolver(llm).resolve("translate", "x")
        assert llm.calls == []

    @pytest.mark.asyncio
    async def test_llm_error_propagates(self, fake_llm):
        llm = fake_llm(error=LLMError("openai", "rate limited"))
        with pytest.raises(LLMError):
            await SkillResolver(llm).resolve("create_doc", "x")
