"""Typed action descriptors produced by skill resolution.

Every action is a tagged union member discriminated by ``type``.  The skill
resolver validates raw model output into one of these, so everything
downstream (scheduler, executors) only ever sees well-formed actions.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class SkillType(str, Enum):
    """Capability tags the planner may assign to a task."""

    CREATE_DOC = "create_doc"
    CREATE_FOLDER = "create_folder"
    SEND_MESSAGE = "send_message"


class Platform(str, Enum):
    FEISHU = "feishu"
    SLACK = "slack"


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


class Collaborator(BaseModel):
    """A document collaborator.  ``member_id`` may be a plain user name."""

    model_config = ConfigDict(frozen=True)

    member_id: str
    member_type: str = "openid"
    perm: Literal["full_access", "edit", "view"] = "full_access"

    @field_validator("member_type", "perm", mode="before")
    @classmethod
    def _empty_to_default(cls, value, info):
        if value in (None, ""):
            return "openid" if info.field_name == "member_type" else "full_access"
        return value


class CreateDocParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    content: str = ""
    folder_name: str = ""
    folder_token: str = ""
    collaborators: list[Collaborator] = []


class CreateFolderParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    folder_name: str = ""
    folder_token: str = ""


class MessageContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    title: str = ""
    url: str = ""
    description: str = ""


class SendMessageParams(BaseModel):
    """Unified message parameters for every messaging platform."""

    model_config = ConfigDict(frozen=True)

    platform: Platform = Platform.FEISHU
    message_type: Literal["text", "rich_text", "link_card"] = "text"
    content: MessageContent = MessageContent()
    target_type: Literal["user", "chat", "batch"] = "user"
    targets: list[str] = []

    @field_validator("content", mode="before")
    @classmethod
    def _text_as_content(cls, value):
        if isinstance(value, str):
            return {"text": value}
        return value

    @field_validator("targets", mode="before")
    @classmethod
    def _single_target(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value else []
        return value

    @field_validator("platform", mode="before")
    @classmethod
    def _normalise_platform(cls, value):
        if isinstance(value, str):
            return value.strip().lower() or Platform.FEISHU.value
        return value


# ---------------------------------------------------------------------------
# Actions (tagged union)
# ---------------------------------------------------------------------------


class CreateDocAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["feishu_create_doc"] = "feishu_create_doc"
    params: CreateDocParams


class CreateFolderAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["feishu_create_folder"] = "feishu_create_folder"
    params: CreateFolderParams


class SendMessageAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["send_message"] = "send_message"
    params: SendMessageParams


ActionDescriptor = Annotated[
    Union[CreateDocAction, CreateFolderAction, SendMessageAction],
    Field(discriminator="type"),
]

_ACTION_ADAPTER: TypeAdapter = TypeAdapter(ActionDescriptor)


def parse_action(data: dict) -> ActionDescriptor:
    """Validate *data* into one of the action models.

    Raises :class:`pydantic.ValidationError` on unknown types or bad params.
    """
    return _ACTION_ADAPTER.validate_python(data)


# ---------------------------------------------------------------------------
# Execution results
# ---------------------------------------------------------------------------


class ActionSummary(BaseModel):
    """Brief description of an executed action."""

    type: str  # feishu_doc, feishu_folder, feishu_message, slack_message
    target: str = ""
    id: str = ""
    url: str = ""
    note: str = ""


class SendResult(BaseModel):
    """Outcome of delivering one message to one target."""

    target_id: str
    success: bool
    error: str = ""
    msg_id: str = ""
