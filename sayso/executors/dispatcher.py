"""Routes actions to the platform executor that can carry them out."""

from __future__ import annotations

from sayso.executors.feishu import FeishuExecutor
from sayso.executors.slack import SlackExecutor
from sayso.skills.models import ActionDescriptor, ActionSummary, Platform
from sayso.utils.exceptions import ActionNotSupportedError
from sayso.utils.logging import get_logger

logger = get_logger("executors.dispatcher")


class ActionExecutor:
    """Executes a single action and returns its summary.

    ``send_message`` is routed by ``params.platform``; document and folder
    actions always go to Feishu.
    """

    def __init__(self, feishu: FeishuExecutor, slack: SlackExecutor) -> None:
        self.feishu = feishu
        self.slack = slack

    async def execute(self, action: ActionDescriptor, request=None) -> ActionSummary:
        logger.info("action_execute", action_type=action.type)

        if action.type == "feishu_create_doc":
            summary = await self.feishu.create_doc(action, request)
        elif action.type == "feishu_create_folder":
            summary = await self.feishu.create_folder(action, request)
        elif action.type == "send_message":
            if action.params.platform == Platform.SLACK:
                summary = await self.slack.send_message(action, request)
            else:
                summary = await self.feishu.send_message(action, request)
        else:
            raise ActionNotSupportedError(getattr(action, "type", type(action).__name__))

        logger.info(
            "action_complete",
            action_type=action.type,
            summary_type=summary.type,
            target=summary.target,
        )
        return summary
