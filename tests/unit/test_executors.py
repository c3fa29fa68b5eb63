"""Tests for the platform executors, the dispatcher and the folder matcher."""
import json

import pytest

from sayso.api.v1.schemas.asr import ASRRequest
from sayso.clients.feishu import FolderInfo, UserInfo
from sayso.clients.slack import SlackPostResult
from sayso.executors.dispatcher import ActionExecutor
from sayso.executors.feishu import FeishuExecutor, build_feishu_message, requester_identity
from sayso.executors.folder_matcher import FolderMatcher, match_folder_by_name
from sayso.executors.slack import SlackExecutor
from sayso.executors.summary import summarize_sends
from sayso.skills.models import SendResult, parse_action
from sayso.utils.exceptions import (
    ActionNotSupportedError,
    InvalidActionParamsError,
    PlatformAPIError,
    PlatformDisabledError,
)

FOLDERS = [
    FolderInfo(token="root", name="My Space"),
    FolderInfo(token="f-reports", name="Weekly Reports", parent_token="root"),
    FolderInfo(token="f-design", name="Design", parent_token="root"),
]


class FakeFeishuClient:
    def __init__(self):
        self.calls = []
        self.users = {}
        self.folders = list(FOLDERS)
        self.fail = set()

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        if name in self.fail:
            raise PlatformAPIError("feishu", name, "boom")

    def called(self, name):
        return [c for c in self.calls if c[0] == name]

    async def get_tenant_access_token(self):
        self._record("auth")
        return "t-1"

    async def get_root_folder_token(self, token):
        self._record("get_root_folder_token")
        return "root"

    async def get_folder_tree(self, token, max_depth=2):
        self._record("get_folder_tree")
        return self.folders

    async def create_doc(self, token, folder_token, title):
        self._record("create_doc", folder_token, title)
        return "doc-1"

    async def create_folder(self, token, parent_token, name):
        self._record("create_folder", parent_token, name)
        return "fld-1"

    async def add_collaborator(self, token, doc_token, member_id, *, member_type="openid", perm="full_access"):
        self._record("add_collaborator", member_id, member_type=member_type, perm=perm)

    async def search_user_by_name(self, token, name):
        self._record("search_user_by_name", name)
        return self.users.get(name)

    async def send_message(self, token, receive_id, receive_id_type, msg_type, content):
        self._record("send_message", receive_id, receive_id_type, msg_type, content)
        if receive_id in self.fail:
            raise PlatformAPIError("feishu", "send message", "bot not in chat")
        return f"om-{receive_id}"


class FakeSlackClient:
    def __init__(self):
        self.posted = []
        self.opened = []
        self.fail_open = set()

    async def open_conversation(self, user_id):
        self.opened.append(user_id)
        if user_id in self.fail_open:
            raise PlatformAPIError("slack", "conversations.open", "user_not_found")
        return f"D-{user_id}"

    async def post_message(self, channel, text, blocks=None):
        self.posted.append((channel, text, blocks))
        return SlackPostResult(ts="1700.1", channel=channel)


def doc_action(**params):
    params.setdefault("title", "Weekly report")
    return parse_action({"type": "feishu_create_doc", "params": params})


def message_action(**params):
    return parse_action({"type": "send_message", "params": params})


@pytest.fixture
def feishu_client():
    return FakeFeishuClient()


@pytest.fixture
def feishu(feishu_client):
    return FeishuExecutor(feishu_client, domain="acme.feishu.cn")


class TestRequesterIdentity:
    def test_context_open_id_wins(self):
        request = ASRRequest(text="x", user_id="u_9", context={"feishu_open_id": "ou_1"})
        assert requester_identity(request) == ("openid", "ou_1")

    def test_context_user_id(self):
        request = ASRRequest(text="x", context={"feishu_user_id": "u_1"})
        assert requester_identity(request) == ("userid", "u_1")

    def test_request_user_id_kind_is_inferred(self):
        assert requester_identity(ASRRequest(text="x", user_id="ou_abc")) == ("openid", "ou_abc")
        assert requester_identity(ASRRequest(text="x", user_id="u_abc")) == ("userid", "u_abc")

    def test_unknown(self):
        assert requester_identity(ASRRequest(text="x")) is None
        assert requester_identity(None) is None


class TestFeishuCreateDoc:
    @pytest.mark.asyncio
    async def test_explicit_folder_token_skips_lookup(self, feishu, feishu_client):
        summary = await feishu.create_doc(doc_action(folder_token="f-given"))

        assert feishu_client.called("get_folder_tree") == []
        assert feishu_client.called("create_doc")[0][1] == ("f-given", "Weekly report")
        assert summary.type == "feishu_doc"
        assert summary.id == "doc-1"
        assert summary.url == "https://acme.feishu.cn/docx/doc-1"
        assert summary.note == ""

    @pytest.mark.asyncio
    async def test_folder_name_matches_by_substring(self, feishu, feishu_client):
        summary = await feishu.create_doc(doc_action(folder_name="Reports"))

        assert feishu_client.called("create_doc")[0][1][0] == "f-reports"
        assert summary.note == "Saved in folder 'Weekly Reports'"

    @pytest.mark.asyncio
    async def test_matcher_used_when_name_does_not_match(self, feishu_client, fake_llm):
        llm = fake_llm({"token": "f-design", "name": "Design"})
        executor = FeishuExecutor(feishu_client, folder_matcher=FolderMatcher(llm))

        summary = await executor.create_doc(doc_action(title="Logo draft", folder_name="Marketing"))

        assert feishu_client.called("create_doc")[0][1][0] == "f-design"
        assert summary.note == "Saved in folder 'Design'"
        assert "Logo draft" in llm.calls[0][1]

    @pytest.mark.asyncio
    async def test_falls_back_to_root(self, feishu, feishu_client):
        summary = await feishu.create_doc(doc_action())

        assert feishu_client.called("create_doc")[0][1][0] == "root"
        assert summary.note == "Saved in folder 'My Space'"

    @pytest.mark.asyncio
    async def test_unavailable_tree_still_creates_in_root(self, feishu, feishu_client):
        feishu_client.fail = {"get_folder_tree"}
        await feishu.create_doc(doc_action(folder_name="Reports"))

        assert feishu_client.called("create_doc")[0][1][0] == "root"

    @pytest.mark.asyncio
    async def test_no_domain_means_no_url(self, feishu_client):
        summary = await FeishuExecutor(feishu_client).create_doc(doc_action())
        assert summary.url == ""
        assert summary.id == "doc-1"

    @pytest.mark.asyncio
    async def test_requester_and_collaborators_added(self, feishu, feishu_client):
        feishu_client.users = {"Bob": UserInfo(name="Bob", user_id="u_bob")}
        action = doc_action(collaborators=[
            {"member_id": "ou_carol", "perm": "edit"},
            {"member_id": "Bob", "perm": "view"},
            {"member_id": "Nobody"},
        ])
        request = ASRRequest(text="x", user_id="ou_me")

        await feishu.create_doc(action, request)

        added = [(c[1][0], c[2]["member_type"], c[2]["perm"]) for c in feishu_client.called("add_collaborator")]
        assert added == [
            ("ou_me", "openid", "full_access"),
            ("ou_carol", "openid", "edit"),
            ("u_bob", "userid", "view"),
        ]

    @pytest.mark.asyncio
    async def test_collaborator_failure_does_not_fail_the_doc(self, feishu, feishu_client):
        feishu_client.fail = {"add_collaborator"}
        summary = await feishu.create_doc(doc_action(), ASRRequest(text="x", user_id="ou_me"))
        assert summary.id == "doc-1"

    @pytest.mark.asyncio
    async def test_create_failure_propagates(self, feishu, feishu_client):
        feishu_client.fail = {"create_doc"}
        with pytest.raises(PlatformAPIError):
            await feishu.create_doc(doc_action())


class TestFeishuCreateFolder:
    @pytest.mark.asyncio
    async def test_parent_by_name(self, feishu, feishu_client):
        action = parse_action({
            "type": "feishu_create_folder",
            "params": {"name": "Q3", "folder_name": "Weekly Reports"},
        })
        summary = await feishu.create_folder(action)

        assert feishu_client.called("create_folder")[0][1] == ("f-reports", "Q3")
        assert summary.type == "feishu_folder"
        assert summary.url == "https://acme.feishu.cn/drive/folder/fld-1"
        assert summary.note == "Created under 'Weekly Reports'"

    @pytest.mark.asyncio
    async def test_root_parent(self, feishu, feishu_client):
        action = parse_action({"type": "feishu_create_folder", "params": {"name": "Q3"}})
        summary = await feishu.create_folder(action)

        assert feishu_client.called("create_folder")[0][1] == ("root", "Q3")
        assert summary.note == "Created under 'My Space'"


class TestFeishuSendMessage:
    @pytest.mark.asyncio
    async def test_open_id_target(self, feishu, feishu_client):
        summary = await feishu.send_message(message_action(content="hi", targets=["ou_bob"]))

        _, args, _ = feishu_client.called("send_message")[0]
        assert args[:3] == ("ou_bob", "open_id", "text")
        assert summary.type == "feishu_message"
        assert summary.target == "ou_bob"
        assert summary.id == "om-ou_bob"

    @pytest.mark.asyncio
    async def test_chat_target(self, feishu, feishu_client):
        await feishu.send_message(message_action(content="hi", targets=["oc_team"], target_type="chat"))
        assert feishu_client.called("send_message")[0][1][1] == "chat_id"

    @pytest.mark.asyncio
    async def test_name_target_is_looked_up(self, feishu, feishu_client):
        feishu_client.users = {"Bob": UserInfo(name="Bob", user_id="u_bob")}
        summary = await feishu.send_message(message_action(content="hi", targets=["Bob"]))

        assert feishu_client.called("send_message")[0][1][:2] == ("u_bob", "user_id")
        assert summary.target == "Bob"

    @pytest.mark.asyncio
    async def test_unknown_name(self, feishu, feishu_client):
        summary = await feishu.send_message(message_action(content="hi", targets=["Ghost"]))

        assert feishu_client.called("send_message") == []
        assert summary.note == "user not found: Ghost"
        assert summary.id == ""

    @pytest.mark.asyncio
    async def test_no_targets_goes_to_requester(self, feishu, feishu_client):
        request = ASRRequest(text="x", context={"feishu_open_id": "ou_me"})
        await feishu.send_message(message_action(content="note to self"), request)

        assert feishu_client.called("send_message")[0][1][:2] == ("ou_me", "open_id")

    @pytest.mark.asyncio
    async def test_no_targets_and_no_requester(self, feishu):
        with pytest.raises(InvalidActionParamsError, match="targets is required"):
            await feishu.send_message(message_action(content="hi"), ASRRequest(text="x"))

    @pytest.mark.asyncio
    async def test_batch_reports_partial_delivery(self, feishu, feishu_client):
        feishu_client.fail = {"ou_b"}
        action = message_action(content="hi", targets=["ou_a", "ou_b", "ou_c"], target_type="batch")

        summary = await feishu.send_message(action)

        assert summary.target == "2/3 targets"
        assert summary.note == "failed: ou_b"

    @pytest.mark.asyncio
    async def test_disabled(self, feishu_client):
        executor = FeishuExecutor(feishu_client, enabled=False)
        with pytest.raises(PlatformDisabledError):
            await executor.send_message(message_action(content="hi", targets=["ou_a"]))
        assert feishu_client.calls == []

    @pytest.mark.asyncio
    async def test_missing_client_is_disabled(self):
        with pytest.raises(PlatformDisabledError):
            await FeishuExecutor(None).create_doc(doc_action())


class TestBuildFeishuMessage:
    def test_text_appends_url(self):
        msg_type, content = build_feishu_message(
            message_action(content={"text": "See", "url": "https://x/1"}).params
        )
        assert msg_type == "text"
        assert json.loads(content) == {"text": "See https://x/1"}

    def test_text_does_not_repeat_url(self):
        _, content = build_feishu_message(
            message_action(content={"text": "See https://x/1", "url": "https://x/1"}).params
        )
        assert json.loads(content) == {"text": "See https://x/1"}

    def test_rich_text_and_card(self):
        rich = message_action(message_type="rich_text", content={"title": "T", "text": "b"}).params
        card = message_action(message_type="link_card", content={"title": "T", "url": "https://x"}).params
        assert build_feishu_message(rich)[0] == "post"
        assert build_feishu_message(card)[0] == "interactive"


class TestSlackExecutor:
    @pytest.mark.asyncio
    async def test_user_gets_dm(self):
        client = FakeSlackClient()
        summary = await SlackExecutor(client).send_message(
            message_action(platform="slack", content="hi", targets=["U1"])
        )

        assert client.opened == ["U1"]
        assert client.posted == [("D-U1", "hi", None)]
        assert summary.type == "slack_message"
        assert summary.target == "U1"
        assert summary.id == "1700.1"

    @pytest.mark.asyncio
    async def test_chat_posts_directly(self):
        client = FakeSlackClient()
        await SlackExecutor(client).send_message(
            message_action(platform="slack", content="hi", targets=["C1"], target_type="chat")
        )
        assert client.opened == []
        assert client.posted[0][0] == "C1"

    @pytest.mark.asyncio
    async def test_default_channel_from_context(self):
        client = FakeSlackClient()
        request = ASRRequest(text="x", context={"slack_channel": "C-general"})
        await SlackExecutor(client).send_message(message_action(platform="slack", content="hi"), request)
        assert client.posted[0][0] == "C-general"

    @pytest.mark.asyncio
    async def test_no_targets_no_channel(self):
        with pytest.raises(InvalidActionParamsError):
            await SlackExecutor(FakeSlackClient()).send_message(message_action(platform="slack", content="hi"))

    @pytest.mark.asyncio
    async def test_batch_with_failed_dm(self):
        client = FakeSlackClient()
        client.fail_open = {"U2"}
        summary = await SlackExecutor(client).send_message(
            message_action(platform="slack", content="hi", targets=["U1", "U2"], target_type="batch")
        )
        assert summary.target == "1/2 targets"
        assert summary.note == "failed: U2"

    @pytest.mark.asyncio
    async def test_link_card_uses_blocks(self):
        client = FakeSlackClient()
        await SlackExecutor(client).send_message(message_action(
            platform="slack",
            message_type="link_card",
            content={"title": "Doc", "url": "https://x/1"},
            targets=["C1"],
            target_type="chat",
        ))
        _, text, blocks = client.posted[0]
        assert text == "Doc"
        assert blocks[-1]["type"] == "actions"

    @pytest.mark.asyncio
    async def test_disabled(self):
        with pytest.raises(PlatformDisabledError):
            await SlackExecutor(None).send_message(message_action(platform="slack", targets=["U1"]))


class TestSummarizeSends:
    def test_single_failure_note(self):
        summary = summarize_sends("feishu_message", [
            SendResult(target_id="ou_a", success=False, error="bot not in chat"),
        ])
        assert summary.target == "ou_a"
        assert summary.note == "bot not in chat"

    def test_all_delivered(self):
        summary = summarize_sends("slack_message", [
            SendResult(target_id="U1", success=True, msg_id="1"),
            SendResult(target_id="U2", success=True, msg_id="2"),
        ])
        assert summary.target == "2/2 targets"
        assert summary.note == ""


class TestActionExecutor:
    @pytest.fixture
    def dispatcher(self, feishu):
        return ActionExecutor(feishu, SlackExecutor(FakeSlackClient()))

    @pytest.mark.asyncio
    async def test_routes_by_type_and_platform(self, dispatcher):
        doc = await dispatcher.execute(doc_action())
        feishu_msg = await dispatcher.execute(message_action(content="hi", targets=["ou_a"]))
        slack_msg = await dispatcher.execute(message_action(platform="slack", content="hi", targets=["U1"]))

        assert doc.type == "feishu_doc"
        assert feishu_msg.type == "feishu_message"
        assert slack_msg.type == "slack_message"

    @pytest.mark.asyncio
    async def test_unsupported_action(self, dispatcher):
        class Bogus:
            type = "feishu_create_sheet"

        with pytest.raises(ActionNotSupportedError):
            await dispatcher.execute(Bogus())


class TestFolderMatcher:
    @pytest.mark.asyncio
    async def test_empty_and_single(self, fake_llm):
        matcher = FolderMatcher(fake_llm())
        assert await matcher.match("x", []) == ("", "")
        assert await matcher.match("x", FOLDERS[:1]) == ("root", "My Space")

    @pytest.mark.asyncio
    async def test_root_answer(self, fake_llm):
        matcher = FolderMatcher(fake_llm({"token": "root"}))
        assert await matcher.match("x", FOLDERS) == ("root", "My Space")

    @pytest.mark.asyncio
    async def test_unknown_token_falls_back(self, fake_llm):
        matcher = FolderMatcher(fake_llm({"token": "f-nope"}))
        assert await matcher.match("x", FOLDERS) == ("root", "My Space")

    @pytest.mark.asyncio
    async def test_model_error_falls_back(self, fake_llm):
        matcher = FolderMatcher(fake_llm(error=RuntimeError("timeout")))
        assert await matcher.match("x", FOLDERS) == ("root", "My Space")

    def test_name_match(self):
        assert match_folder_by_name("Design", FOLDERS) == ("f-design", "Design")
        assert match_folder_by_name("Weekly", FOLDERS) == ("f-reports", "Weekly Reports")
        assert match_folder_by_name("Finance", FOLDERS) == ("", "")
