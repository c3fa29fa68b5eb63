from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sayso import __version__
from sayso.api.v1.endpoints import health
from sayso.api.v1.middleware.error_handler import ErrorHandlerMiddleware
from sayso.api.v1.middleware.logging_middleware import LoggingMiddleware
from sayso.api.v1.router import v1_router
from sayso.clients.feishu import FeishuClient
from sayso.clients.slack import SlackClient
from sayso.config import settings
from sayso.skills.registry import SkillRegistry
from sayso.utils.logging import get_logger, setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(debug=settings.debug, json_logs=settings.log_json, level=settings.log_level)
    logger = get_logger("startup")
    logger.info("Starting sayso agent", version=__version__, env=settings.app_env)

    registry = SkillRegistry.default()
    app.state.skills_registry = registry
    logger.info("Skills registry initialized", skill_count=len(registry.list_all()))

    app.state.feishu_client = None
    app.state.slack_client = None
    if settings.feishu_enabled:
        app.state.feishu_client = FeishuClient(
            settings.feishu_app_id,
            settings.feishu_app_secret,
            timeout=settings.http_timeout_seconds,
        )
    if settings.slack_enabled:
        app.state.slack_client = SlackClient(
            settings.slack_bot_token,
            timeout=settings.http_timeout_seconds,
        )
    logger.info(
        "Platforms configured",
        feishu=settings.feishu_enabled,
        slack=settings.slack_enabled,
    )

    yield

    for client in (app.state.feishu_client, app.state.slack_client):
        if client is not None:
            await client.aclose()
    logger.info("Shutting down")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Sayso Agent",
        description="Voice-command agent: plans spoken requests into Feishu / Slack actions",
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware is applied in reverse order -- outermost first.
    # 1. CORS (outermost -- handles preflight before anything else)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # 2. Error handler (catches exceptions from inner layers)
    app.add_middleware(ErrorHandlerMiddleware)
    # 3. Request/response logger (innermost -- logs timing around handler)
    app.add_middleware(LoggingMiddleware)

    app.include_router(v1_router, prefix="/api/v1")
    app.include_router(health.router, tags=["health"])

    return app


app = create_app()
