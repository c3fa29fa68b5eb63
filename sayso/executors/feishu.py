"""Executes Feishu actions: documents, folders and IM messages."""

from __future__ import annotations

from sayso.clients.feishu import (
    ROOT_FOLDER_NAME,
    FeishuClient,
    FolderInfo,
    build_interactive_card,
    build_post_content,
    build_text_content,
)
from sayso.executors.folder_matcher import FolderMatcher, match_folder_by_name
from sayso.executors.summary import summarize_sends
from sayso.skills.models import (
    ActionSummary,
    CreateDocAction,
    CreateFolderAction,
    SendMessageAction,
    SendMessageParams,
    SendResult,
)
from sayso.utils.exceptions import InvalidActionParamsError, PlatformAPIError, PlatformDisabledError
from sayso.utils.logging import get_logger

logger = get_logger("executors.feishu")

FOLDER_TREE_DEPTH = 2


def _is_open_id(value: str) -> bool:
    return len(value) > 3 and value.startswith("ou_")


def _is_chat_id(value: str) -> bool:
    return len(value) > 3 and value.startswith("oc_")


def requester_identity(request) -> tuple[str, str] | None:
    """Return ``(member_type, member_id)`` for the requesting user, if known.

    ``member_type`` uses the permission API spelling (``openid`` / ``userid``).
    """
    if request is None:
        return None
    context = request.context or {}
    if context.get("feishu_open_id"):
        return "openid", context["feishu_open_id"]
    if context.get("feishu_user_id"):
        return "userid", context["feishu_user_id"]
    if request.user_id:
        return ("openid" if _is_open_id(request.user_id) else "userid"), request.user_id
    return None


class FeishuExecutor:
    """Carries out Feishu actions through a :class:`FeishuClient`.

    Parameters
    ----------
    client:
        The platform client.  May be ``None`` when the integration is
        disabled.
    enabled:
        When ``False`` every call raises :class:`PlatformDisabledError`.
    domain:
        Tenant domain (``example.feishu.cn``) used to build resource URLs.
        Without it summaries carry ids only.
    folder_matcher:
        Optional :class:`FolderMatcher` consulted when a document names no
        usable folder.
    """

    def __init__(
        self,
        client: FeishuClient | None,
        *,
        enabled: bool = True,
        domain: str = "",
        folder_matcher: FolderMatcher | None = None,
    ) -> None:
        self.client = client
        self.enabled = enabled and client is not None
        self.domain = domain
        self.folder_matcher = folder_matcher

    async def _token(self) -> str:
        if not self.enabled:
            raise PlatformDisabledError("feishu")
        return await self.client.get_tenant_access_token()

    async def _folder_tree(self, token: str) -> list[FolderInfo]:
        try:
            return await self.client.get_folder_tree(token, FOLDER_TREE_DEPTH)
        except PlatformAPIError as exc:
            logger.warning("folder_tree_unavailable", error=str(exc))
            return []

    # ----- Documents ---------------------------------------------------------

    async def create_doc(self, action: CreateDocAction, request=None) -> ActionSummary:
        token = await self._token()
        params = action.params

        folder_token, folder_name = params.folder_token, ""
        folders: list[FolderInfo] = []
        if not folder_token:
            folders = await self._folder_tree(token)
        if not folder_token and params.folder_name and folders:
            folder_token, folder_name = match_folder_by_name(params.folder_name, folders)
        if not folder_token and self.folder_matcher is not None and folders:
            folder_token, folder_name = await self.folder_matcher.match(params.title, folders)
        if not folder_token:
            try:
                folder_token = await self.client.get_root_folder_token(token)
                folder_name = ROOT_FOLDER_NAME
            except PlatformAPIError as exc:
                logger.warning("root_folder_unavailable", error=str(exc))

        doc_token = await self.client.create_doc(token, folder_token, params.title)
        logger.info("feishu_doc_created", title=params.title, doc_token=doc_token, folder=folder_name)

        await self._add_collaborators(token, doc_token, action, request)

        summary = ActionSummary(type="feishu_doc", target=params.title, id=doc_token)
        if self.domain:
            summary.url = f"https://{self.domain}/docx/{doc_token}"
        if folder_name:
            summary.note = f"Saved in folder '{folder_name}'"
        return summary

    async def _add_collaborators(self, token: str, doc_token: str, action: CreateDocAction, request) -> None:
        members: list[tuple[str, str, str]] = []
        requester = requester_identity(request)
        if requester is not None:
            members.append((requester[0], requester[1], "full_access"))

        for collaborator in action.params.collaborators:
            member_type, member_id = collaborator.member_type, collaborator.member_id
            if not member_id:
                continue
            if not _is_open_id(member_id):
                try:
                    user = await self.client.search_user_by_name(token, member_id)
                except PlatformAPIError as exc:
                    logger.warning("collaborator_lookup_failed", name=member_id, error=str(exc))
                    continue
                if user is None or not user.user_id:
                    logger.warning("collaborator_not_found", name=member_id)
                    continue
                member_type, member_id = "userid", user.user_id
            members.append((member_type, member_id, collaborator.perm))

        for member_type, member_id, perm in members:
            try:
                await self.client.add_collaborator(
                    token, doc_token, member_id, member_type=member_type, perm=perm
                )
            except PlatformAPIError as exc:
                logger.warning(
                    "collaborator_add_failed",
                    doc_token=doc_token,
                    member_id=member_id,
                    error=str(exc),
                )

    # ----- Folders -----------------------------------------------------------

    async def create_folder(self, action: CreateFolderAction, request=None) -> ActionSummary:
        token = await self._token()
        params = action.params
        if not params.name:
            raise InvalidActionParamsError(action.type, "name is required")

        parent_token, parent_name = params.folder_token, ""
        if not parent_token and params.folder_name:
            folders = await self._folder_tree(token)
            parent_token, parent_name = match_folder_by_name(params.folder_name, folders)
        if not parent_token:
            parent_token = await self.client.get_root_folder_token(token)
            parent_name = ROOT_FOLDER_NAME

        folder_token = await self.client.create_folder(token, parent_token, params.name)
        logger.info("feishu_folder_created", name=params.name, folder_token=folder_token)

        summary = ActionSummary(type="feishu_folder", target=params.name, id=folder_token)
        if self.domain:
            summary.url = f"https://{self.domain}/drive/folder/{folder_token}"
        if parent_name:
            summary.note = f"Created under '{parent_name}'"
        return summary

    # ----- Messages ----------------------------------------------------------

    async def send_message(self, action: SendMessageAction, request=None) -> ActionSummary:
        token = await self._token()
        params = action.params
        msg_type, content = build_feishu_message(params)

        results: list[SendResult] = []
        if not params.targets:
            fallback = self._default_recipient(request)
            if params.target_type == "chat" or fallback is None:
                raise InvalidActionParamsError(action.type, "targets is required")
            receive_id, receive_id_type = fallback
            results.append(
                await self._send(token, receive_id, receive_id, receive_id_type, msg_type, content)
            )
        elif params.target_type == "batch":
            for target in params.targets:
                results.append(await self._send_to_target(token, target, "user", msg_type, content))
        else:
            results.append(
                await self._send_to_target(token, params.targets[0], params.target_type, msg_type, content)
            )

        return summarize_sends("feishu_message", results)

    @staticmethod
    def _default_recipient(request) -> tuple[str, str] | None:
        identity = requester_identity(request)
        if identity is None:
            return None
        member_type, member_id = identity
        return member_id, ("open_id" if member_type == "openid" else "user_id")

    async def _send_to_target(
        self,
        token: str,
        target: str,
        target_type: str,
        msg_type: str,
        content: str,
    ) -> SendResult:
        if target_type == "chat" or _is_chat_id(target):
            return await self._send(token, target, target, "chat_id", msg_type, content)
        if _is_open_id(target):
            return await self._send(token, target, target, "open_id", msg_type, content)

        try:
            user = await self.client.search_user_by_name(token, target)
        except PlatformAPIError as exc:
            return SendResult(target_id=target, success=False, error=str(exc))
        if user is None:
            return SendResult(target_id=target, success=False, error=f"user not found: {target}")
        if user.open_id:
            return await self._send(token, target, user.open_id, "open_id", msg_type, content)
        return await self._send(token, target, user.user_id, "user_id", msg_type, content)

    async def _send(
        self,
        token: str,
        target: str,
        receive_id: str,
        receive_id_type: str,
        msg_type: str,
        content: str,
    ) -> SendResult:
        try:
            msg_id = await self.client.send_message(token, receive_id, receive_id_type, msg_type, content)
        except PlatformAPIError as exc:
            logger.warning("feishu_send_failed", target=target, error=str(exc))
            return SendResult(target_id=target, success=False, error=str(exc))
        return SendResult(target_id=target, success=True, msg_id=msg_id)


def build_feishu_message(params: SendMessageParams) -> tuple[str, str]:
    """Return ``(msg_type, content)`` for the Feishu IM API."""
    c = params.content
    if params.message_type == "rich_text":
        return "post", build_post_content(c.title, c.text, c.url)
    if params.message_type == "link_card":
        return "interactive", build_interactive_card(c.title, c.text, c.url, c.description)
    text = c.text
    if c.url and c.url not in text:
        text = f"{text} {c.url}".strip()
    return "text", build_text_content(text)
