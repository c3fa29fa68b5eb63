"""Slack Web API client (``chat.postMessage`` and ``conversations.open``)."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from sayso.utils.exceptions import PlatformAPIError

SLACK_API_BASE = "https://slack.com/api"
LINK_BUTTON_TEXT = "View link"


@dataclass
class SlackPostResult:
    """``ts`` doubles as the message id."""

    ts: str
    channel: str


class SlackClient:
    """Async client for the Slack Web API.

    Parameters
    ----------
    bot_token:
        The ``xoxb-`` bot token.
    http_client:
        Optional pre-built :class:`httpx.AsyncClient`; not closed by
        :meth:`aclose` when passed in.
    """

    def __init__(
        self,
        bot_token: str,
        *,
        timeout: float = 30.0,
        base_url: str = SLACK_API_BASE,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.bot_token = bot_token
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def _call(self, method: str, payload: dict) -> dict:
        try:
            resp = await self._http.post(
                f"{self.base_url}/{method}",
                headers={
                    "Content-Type": "application/json; charset=utf-8",
                    "Authorization": f"Bearer {self.bot_token}",
                },
                json=payload,
            )
        except httpx.HTTPError as exc:
            raise PlatformAPIError("slack", method, str(exc)) from exc

        if not resp.is_success:
            raise PlatformAPIError(
                "slack", method, f"http status {resp.status_code}, body: {resp.text[:500]}"
            )
        try:
            body = resp.json()
        except ValueError as exc:
            raise PlatformAPIError("slack", method, f"invalid JSON body: {resp.text[:500]}") from exc

        if not body.get("ok"):
            raise PlatformAPIError("slack", method, body.get("error") or "unknown_error")
        return body

    async def post_message(
        self,
        channel: str,
        text: str,
        blocks: list[dict] | None = None,
    ) -> SlackPostResult:
        payload: dict = {"channel": channel, "text": text}
        if blocks:
            payload["blocks"] = blocks
        body = await self._call("chat.postMessage", payload)
        return SlackPostResult(ts=body.get("ts", ""), channel=body.get("channel", channel))

    async def open_conversation(self, user_id: str) -> str:
        """Open (or reuse) a DM with *user_id* and return its channel id."""
        body = await self._call("conversations.open", {"users": user_id})
        return (body.get("channel") or {}).get("id", "")


def build_rich_text_blocks(title: str, text: str, url: str, description: str) -> list[dict]:
    """Block Kit layout: optional header, text sections and a link button."""
    blocks: list[dict] = []
    if title:
        blocks.append({"type": "header", "text": {"type": "plain_text", "text": title}})
    for section in (text, description):
        if section:
            blocks.append({"type": "section", "text": {"type": "mrkdwn", "text": section}})
    if url:
        blocks.append({
            "type": "actions",
            "elements": [{
                "type": "button",
                "text": {"type": "plain_text", "text": LINK_BUTTON_TEXT},
                "url": url,
                "action_id": "link_button",
            }],
        })
    return blocks
