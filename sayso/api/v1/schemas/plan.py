"""Request/response schemas for the dry-run planning endpoint."""

from pydantic import BaseModel, Field

from sayso.api.v1.schemas.asr import Contact
from sayso.core.task.models import PlanOutcome, TaskPlan


class PlanRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=10000)
    user_id: str | None = None
    contacts: list[Contact] = Field(default_factory=list)


class PlanResponse(BaseModel):
    """The plan and the actions it resolves to.  Nothing is executed."""

    plan: TaskPlan
    outcome: PlanOutcome
