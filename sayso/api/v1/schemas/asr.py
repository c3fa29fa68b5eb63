"""Request/response schemas for the ASR processing endpoint."""

from pydantic import BaseModel, Field

from sayso.skills.models import ActionSummary


class Contact(BaseModel):
    """A known contact, used to map spoken names to platform ids."""

    name: str
    open_id: str = ""
    user_id: str = ""
    email: str = ""


class ASRRequest(BaseModel):
    """Transcribed speech plus who said it.

    ``context`` keys understood by the executors:

    * ``feishu_open_id`` -- default Feishu recipient / collaborator
      (preferred over ``user_id``)
    * ``feishu_user_id`` -- Feishu user id, used when no open id is known
    * ``slack_channel`` -- default Slack channel when a message names no target
    """

    text: str = Field(..., min_length=1, max_length=10000, description="Transcribed text")
    user_id: str | None = Field(default=None, description="Requesting user")
    context: dict[str, str] = Field(default_factory=dict)
    contacts: list[Contact] = Field(default_factory=list)


class ASRResponse(BaseModel):
    task_id: str
    success: bool = False
    message: str = ""
    actions: list[ActionSummary] = Field(default_factory=list)


class ASRErrorResponse(BaseModel):
    """Body of a non-2xx answer from ``/asr/process``."""

    task_id: str
    error: str
    result: ASRResponse
