"""LLM-assisted choice of the drive folder a new document belongs in."""

from __future__ import annotations

from sayso.clients.feishu import ROOT_FOLDER_NAME, FolderInfo
from sayso.utils.logging import get_logger

logger = get_logger("executors.folder_matcher")

FOLDER_MATCH_SYSTEM_PROMPT: str = (
    "You are a filing assistant. Reply with JSON only."
)

FOLDER_MATCH_USER_TEMPLATE: str = """Pick the best folder for a new document.

Document title: {title}

Available folders:
{folder_list}
If no folder clearly fits, answer with the root folder (token "root").

Return JSON: {{"token": "folder token", "name": "folder name"}}"""


class FolderMatcher:
    """Chooses a folder for a document title from a folder tree.

    Never raises: any model failure or an answer naming an unknown token
    falls back to the root folder (or the first folder when the tree has
    no recognisable root).
    """

    def __init__(self, llm_client):
        self.llm = llm_client

    async def match(self, title: str, folders: list[FolderInfo]) -> tuple[str, str]:
        """Return ``(token, name)`` of the chosen folder."""
        if not folders:
            return "", ""
        if len(folders) == 1:
            return folders[0].token, folders[0].name

        fallback = _root_of(folders)
        folder_list = "".join(
            f"{i}. token: {f.token}, name: {f.name}\n" for i, f in enumerate(folders, 1)
        )
        user_msg = FOLDER_MATCH_USER_TEMPLATE.format(title=title, folder_list=folder_list)

        try:
            data = await self.llm.complete_json(FOLDER_MATCH_SYSTEM_PROMPT, user_msg)
        except Exception as exc:
            logger.warning("folder_match_failed_falling_back", error=str(exc))
            return fallback

        token = str(data.get("token") or "")
        if token == "root":
            return fallback
        for folder in folders:
            if folder.token == token:
                logger.debug("folder_matched", title=title, folder=folder.name)
                return folder.token, folder.name

        logger.warning("folder_match_unknown_token", token=token)
        return fallback


def _root_of(folders: list[FolderInfo]) -> tuple[str, str]:
    for folder in folders:
        if folder.name == ROOT_FOLDER_NAME or not folder.parent_token:
            return folder.token, folder.name
    return folders[0].token, folders[0].name


def match_folder_by_name(name: str, folders: list[FolderInfo]) -> tuple[str, str]:
    """Exact name match first, then substring containment either way."""
    for folder in folders:
        if folder.name == name:
            return folder.token, folder.name
    for folder in folders:
        if folder.name and (name in folder.name or folder.name in name):
            return folder.token, folder.name
    return "", ""
