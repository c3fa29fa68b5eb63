"""Action executors -- the only code that touches external platforms."""

from sayso.executors.dispatcher import ActionExecutor
from sayso.executors.feishu import FeishuExecutor
from sayso.executors.folder_matcher import FolderMatcher
from sayso.executors.slack import SlackExecutor

__all__ = ["ActionExecutor", "FeishuExecutor", "FolderMatcher", "SlackExecutor"]
