"""Async HTTP clients for the chat / document platforms."""

from sayso.clients.feishu import FeishuClient, FolderInfo, UserInfo
from sayso.clients.slack import SlackClient, SlackPostResult

__all__ = [
    "FeishuClient",
    "FolderInfo",
    "SlackClient",
    "SlackPostResult",
    "UserInfo",
]
