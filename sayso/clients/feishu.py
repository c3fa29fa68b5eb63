"""Feishu (Lark) open platform client.

Thin async wrapper over the handful of open APIs the executors need:
tenant authentication, docx / drive creation, permissions, the employee
directory and IM messages.  Every call checks the HTTP status before the
body is parsed, then checks the ``code`` field of the JSON envelope; any
problem is raised as :class:`PlatformAPIError`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

import httpx

from sayso.utils.exceptions import PlatformAPIError
from sayso.utils.logging import get_logger

FEISHU_API_BASE = "https://open.feishu.cn/open-apis"
ROOT_FOLDER_NAME = "My Space"
LINK_BUTTON_TEXT = "View link"

logger = get_logger("clients.feishu")


@dataclass
class FolderInfo:
    """A drive entry.  ``type`` is ``folder``, ``docx``, ``sheet`` ..."""

    token: str
    name: str
    type: str = "folder"
    parent_token: str = ""


@dataclass
class UserInfo:
    """A directory entry.  ``user_id`` is the tenant-scoped employee id."""

    name: str
    open_id: str = ""
    user_id: str = ""
    email: str = ""


class FeishuClient:
    """Async client for the Feishu open platform.

    Parameters
    ----------
    app_id, app_secret:
        Credentials of the internal app, exchanged for a tenant token.
    timeout:
        Per-request timeout in seconds for the owned HTTP client.
    http_client:
        Optional pre-built :class:`httpx.AsyncClient` (tests pass one backed
        by :class:`httpx.MockTransport`).  A client passed in is not closed
        by :meth:`aclose`.
    """

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        *,
        timeout: float = 30.0,
        base_url: str = FEISHU_API_BASE,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.app_id = app_id
        self.app_secret = app_secret
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    # ----- Transport ---------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        api: str,
        *,
        token: str | None = None,
        payload: dict | None = None,
        params: dict | None = None,
    ) -> dict:
        headers = {"Content-Type": "application/json; charset=utf-8"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            resp = await self._http.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                json=payload,
                params=params,
            )
        except httpx.HTTPError as exc:
            raise PlatformAPIError("feishu", api, str(exc)) from exc

        if not resp.is_success:
            raise PlatformAPIError(
                "feishu", api, f"http status {resp.status_code}, body: {resp.text[:500]}"
            )

        try:
            body = resp.json()
        except ValueError as exc:
            raise PlatformAPIError(
                "feishu", api, f"invalid JSON body: {resp.text[:500]}"
            ) from exc

        if body.get("code", 0) != 0:
            raise PlatformAPIError(
                "feishu", api, f"code={body.get('code')} msg={body.get('msg', '')}"
            )
        return body

    # ----- Authentication ----------------------------------------------------

    async def get_tenant_access_token(self) -> str:
        body = await self._request(
            "POST",
            "/auth/v3/tenant_access_token/internal",
            "auth",
            payload={"app_id": self.app_id, "app_secret": self.app_secret},
        )
        token = body.get("tenant_access_token", "")
        if not token:
            raise PlatformAPIError("feishu", "auth", "empty tenant_access_token")
        return token

    # ----- Documents and drive ----------------------------------------------

    async def create_doc(self, token: str, folder_token: str, title: str) -> str:
        """Create an empty docx document and return its ``document_id``."""
        body = await self._request(
            "POST",
            "/docx/v1/documents",
            "create doc",
            token=token,
            payload={"folder_token": folder_token, "title": title},
        )
        return body.get("data", {}).get("document", {}).get("document_id", "")

    async def create_folder(self, token: str, parent_token: str, name: str) -> str:
        """Create a folder under *parent_token* and return the new token."""
        body = await self._request(
            "POST",
            "/drive/v1/files/create_folder",
            "create folder",
            token=token,
            payload={"name": name, "folder_token": parent_token},
        )
        return body.get("data", {}).get("token", "")

    async def add_collaborator(
        self,
        token: str,
        doc_token: str,
        member_id: str,
        *,
        member_type: str = "openid",
        perm: str = "full_access",
        doc_type: str = "docx",
    ) -> None:
        await self._request(
            "POST",
            f"/drive/v1/permissions/{doc_token}/members",
            "add collaborator",
            token=token,
            params={"type": doc_type, "need_notification": "true"},
            payload={"member_type": member_type, "member_id": member_id, "perm": perm},
        )

    async def get_root_folder_token(self, token: str) -> str:
        body = await self._request(
            "GET",
            "/drive/explorer/v2/root_folder/meta",
            "get root folder",
            token=token,
        )
        return body.get("data", {}).get("token", "")

    async def list_folder_children(self, token: str, folder_token: str) -> list[FolderInfo]:
        body = await self._request(
            "GET",
            "/drive/v1/files",
            "list folder",
            token=token,
            params={"folder_token": folder_token},
        )
        return [
            FolderInfo(
                token=f.get("token", ""),
                name=f.get("name", ""),
                type=f.get("type", ""),
                parent_token=f.get("parent_token", ""),
            )
            for f in body.get("data", {}).get("files") or []
        ]

    async def get_folder_tree(self, token: str, max_depth: int = 2) -> list[FolderInfo]:
        """Return the root folder followed by every sub-folder up to *max_depth*.

        Sub-folders that cannot be listed are skipped.
        """
        root_token = await self.get_root_folder_token(token)
        folders = [FolderInfo(token=root_token, name=ROOT_FOLDER_NAME)]
        await self._collect_folders(token, root_token, 1, max_depth, folders)
        return folders

    async def _collect_folders(
        self,
        token: str,
        folder_token: str,
        depth: int,
        max_depth: int,
        result: list[FolderInfo],
    ) -> None:
        if depth > max_depth:
            return
        try:
            children = await self.list_folder_children(token, folder_token)
        except PlatformAPIError as exc:
            logger.warning("folder_list_failed", folder_token=folder_token, error=str(exc))
            return
        for child in children:
            if child.type == "folder":
                result.append(child)
                await self._collect_folders(token, child.token, depth + 1, max_depth, result)

    # ----- Directory ---------------------------------------------------------

    async def search_users(self, token: str, query: str) -> list[UserInfo]:
        body = await self._request(
            "POST",
            "/directory/v1/employees/search",
            "search user",
            token=token,
            params={"page_size": 20},
            payload={"query": query},
        )
        users = []
        for employee in body.get("data", {}).get("employees") or []:
            base = employee.get("base_info", {})
            users.append(UserInfo(
                name=base.get("name", {}).get("name", {}).get("default_value", ""),
                user_id=base.get("employee_id", ""),
                email=base.get("email", ""),
            ))
        return users

    async def search_user_by_name(self, token: str, name: str) -> UserInfo | None:
        """Return the exact-name match if any, else the first hit, else ``None``."""
        users = await self.search_users(token, name)
        if not users:
            return None
        for user in users:
            if user.name == name:
                return user
        return users[0]

    # ----- Messaging ---------------------------------------------------------

    async def send_message(
        self,
        token: str,
        receive_id: str,
        receive_id_type: str,
        msg_type: str,
        content: str,
    ) -> str:
        """Send one IM message and return its ``message_id``.

        *content* is the JSON-encoded body produced by one of the
        ``build_*_content`` helpers.
        """
        body = await self._request(
            "POST",
            "/im/v1/messages",
            "send message",
            token=token,
            params={"receive_id_type": receive_id_type},
            payload={"receive_id": receive_id, "msg_type": msg_type, "content": content},
        )
        return (body.get("data") or {}).get("message_id", "")


# ---------------------------------------------------------------------------
# Message body builders
# ---------------------------------------------------------------------------


def build_text_content(text: str) -> str:
    return json.dumps({"text": text}, ensure_ascii=False)


def build_post_content(title: str, text: str, url: str) -> str:
    """Rich-text ``post`` body: the text followed by a clickable link."""
    paragraph = []
    if text:
        paragraph.append({"tag": "text", "text": text})
    if url:
        paragraph.append({"tag": "a", "text": url, "href": url})
    post = {"zh_cn": {"title": title, "content": [paragraph]}}
    return json.dumps(post, ensure_ascii=False)


def build_interactive_card(title: str, text: str, url: str, description: str) -> str:
    """Link card: header, text blocks and a primary button opening *url*."""
    elements: list[dict] = []
    for block in (text, description):
        if block:
            elements.append({
                "tag": "div",
                "text": {"tag": "plain_text", "content": block},
            })
    if url:
        elements.append({
            "tag": "action",
            "actions": [{
                "tag": "button",
                "text": {"tag": "plain_text", "content": LINK_BUTTON_TEXT},
                "type": "primary",
                "url": url,
            }],
        })
    card = {
        "config": {"wide_screen_mode": True},
        "header": {"title": {"tag": "plain_text", "content": title}},
        "elements": elements,
    }
    return json.dumps(card, ensure_ascii=False)
