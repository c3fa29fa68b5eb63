"""ASR processing endpoint -- executes the actions behind one utterance."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from sayso.api.v1.schemas.asr import ASRErrorResponse, ASRRequest, ASRResponse
from sayso.dependencies import get_asr_service
from sayso.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/asr/process",
    response_model=ASRResponse,
    responses={500: {"model": ASRErrorResponse, "description": "Planning or execution failed"}},
    summary="Process transcribed speech",
    description=(
        "Plans the request into tasks, resolves each task into an action "
        "and executes the actions on Feishu / Slack.  Summaries of the "
        "executed actions are returned even when a later action fails."
    ),
)
async def process_asr(
    request: ASRRequest,
    service=Depends(get_asr_service),
):
    result = await service.process(request)
    if not result.success:
        body = ASRErrorResponse(task_id=result.task_id, error=result.message, result=result)
        return JSONResponse(status_code=500, content=body.model_dump(mode="json"))
    return result
