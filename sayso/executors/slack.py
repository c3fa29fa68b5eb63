"""Executes Slack ``send_message`` actions."""

from __future__ import annotations

from sayso.clients.slack import SlackClient, build_rich_text_blocks
from sayso.executors.summary import summarize_sends
from sayso.skills.models import ActionSummary, SendMessageAction, SendMessageParams, SendResult
from sayso.utils.exceptions import InvalidActionParamsError, PlatformAPIError, PlatformDisabledError
from sayso.utils.logging import get_logger

logger = get_logger("executors.slack")


class SlackExecutor:
    """Delivers messages through a :class:`SlackClient`.

    ``user`` and ``batch`` targets get a DM (opened with
    ``conversations.open``); ``chat`` targets are posted to directly.  With
    no targets the message goes to the request's ``slack_channel``.
    """

    def __init__(self, client: SlackClient | None, *, enabled: bool = True) -> None:
        self.client = client
        self.enabled = enabled and client is not None

    async def send_message(self, action: SendMessageAction, request=None) -> ActionSummary:
        if not self.enabled:
            raise PlatformDisabledError("slack")

        params = action.params
        text, blocks = build_slack_message(params)

        results: list[SendResult] = []
        if not params.targets:
            channel = (request.context or {}).get("slack_channel", "") if request is not None else ""
            if not channel:
                raise InvalidActionParamsError(action.type, "targets is required")
            results.append(await self._send_to_channel(channel, text, blocks))
        elif params.target_type == "batch":
            for target in params.targets:
                results.append(await self._send_to_user(target, text, blocks))
        elif params.target_type == "chat":
            results.append(await self._send_to_channel(params.targets[0], text, blocks))
        else:
            results.append(await self._send_to_user(params.targets[0], text, blocks))

        return summarize_sends("slack_message", results)

    async def _send_to_user(self, user_id: str, text: str, blocks: list[dict]) -> SendResult:
        try:
            channel = await self.client.open_conversation(user_id)
        except PlatformAPIError as exc:
            logger.warning("slack_open_conversation_failed", user_id=user_id, error=str(exc))
            return SendResult(
                target_id=user_id, success=False, error=f"open conversation failed: {exc}"
            )
        result = await self._send_to_channel(channel, text, blocks)
        return result.model_copy(update={"target_id": user_id})

    async def _send_to_channel(self, channel: str, text: str, blocks: list[dict]) -> SendResult:
        try:
            posted = await self.client.post_message(channel, text, blocks or None)
        except PlatformAPIError as exc:
            logger.warning("slack_post_failed", channel=channel, error=str(exc))
            return SendResult(target_id=channel, success=False, error=str(exc))
        return SendResult(target_id=channel, success=True, msg_id=posted.ts)


def build_slack_message(params: SendMessageParams) -> tuple[str, list[dict]]:
    """Return the fallback ``text`` and the Block Kit ``blocks`` (maybe empty)."""
    c = params.content
    if params.message_type in ("rich_text", "link_card"):
        return c.text or c.title or c.url, build_rich_text_blocks(c.title, c.text, c.url, c.description)
    text = c.text
    if c.url and c.url not in text:
        text = f"{text} {c.url}".strip()
    return text, []
