"""Global error-handling middleware.

Catches application-specific exceptions and translates them into
structured JSON error responses with appropriate HTTP status codes.
"""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from sayso.utils.exceptions import (
    ActionExecutionError,
    ActionNotSupportedError,
    ActionValidationError,
    InvalidActionParamsError,
    LLMError,
    PlanningError,
    PlatformAPIError,
    PlatformDisabledError,
    SaysoError,
    SkillNotFoundError,
)
from sayso.utils.logging import get_logger

logger = get_logger(__name__)

# Most specific classes first; the first isinstance match wins.
_STATUS_MAP: list[tuple[type, int]] = [
    (SkillNotFoundError, 404),
    (ActionNotSupportedError, 400),
    (InvalidActionParamsError, 422),
    (ActionValidationError, 422),
    (PlanningError, 422),
    (LLMError, 502),
    (PlatformAPIError, 502),
    (PlatformDisabledError, 503),
    (ActionExecutionError, 500),
]


def status_for(exc: SaysoError) -> int:
    for exc_type, status_code in _STATUS_MAP:
        if isinstance(exc, exc_type):
            return status_code
    return 500


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Wraps every request and converts known exceptions to JSON errors.

    Unknown exceptions are logged and returned as HTTP 500.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)

        except SaysoError as exc:
            status_code = status_for(exc)
            logger.warning(
                "handled_error",
                error_type=type(exc).__name__,
                status_code=status_code,
                detail=str(exc),
                path=request.url.path,
            )
            return JSONResponse(
                status_code=status_code,
                content={"error": type(exc).__name__, "detail": str(exc)},
            )

        except Exception as exc:
            logger.error(
                "unhandled_error",
                error_type=type(exc).__name__,
                detail=str(exc),
                path=request.url.path,
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error": "InternalServerError",
                    "detail": "An unexpected error occurred.  Please try again later.",
                },
            )
