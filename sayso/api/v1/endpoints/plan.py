"""Dry-run planning endpoint -- shows the plan and resolved actions only."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from sayso.api.v1.schemas.common import ErrorResponse
from sayso.api.v1.schemas.plan import PlanRequest, PlanResponse
from sayso.dependencies import get_asr_service

router = APIRouter()


@router.post(
    "/plan",
    response_model=PlanResponse,
    responses={422: {"model": ErrorResponse, "description": "Planning failed"}},
    summary="Preview the task plan",
    description=(
        "Plans the request and resolves every task into an action without "
        "touching any platform."
    ),
)
async def preview_plan(
    request: PlanRequest,
    service=Depends(get_asr_service),
) -> PlanResponse:
    plan, outcome = await service.preview(request.text, request.user_id, request.contacts)
    return PlanResponse(plan=plan, outcome=outcome)
