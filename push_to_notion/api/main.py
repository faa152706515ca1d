"""
Push to Notion - FastAPI Application

Receives Slack interactivity requests for the "Push to Notion" message
shortcut and files the message as a page in a Notion database.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
import uvicorn
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from push_to_notion import __version__
from push_to_notion.api.middleware import RequestIDMiddleware
from push_to_notion.api.routes import health, slack
from push_to_notion.config import get_settings
from push_to_notion.kernel.http.errors import register_exception_handlers

_LOG_LEVEL_MAP = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _get_log_level() -> int:
    """Get numeric log level from settings."""
    level_str = get_settings().log_level.lower()
    return _LOG_LEVEL_MAP.get(level_str, logging.INFO)


structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
        if get_settings().log_format == "json"
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()

    logger.info(
        "Starting Push to Notion",
        version=__version__,
        environment=settings.environment,
        allowed_database_count=len(settings.allowed_database_set),
    )
    if not settings.slack_bot_token or not settings.notion_token:
        logger.warning("Slack or Notion token not configured")

    yield

    logger.info("Shutting down Push to Notion")


app = FastAPI(
    title="Push to Notion",
    description="Slack message shortcut that creates Notion pages",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(RequestIDMiddleware)
register_exception_handlers(app)

app.include_router(health.router, tags=["Health"])
app.include_router(slack.router)

app.mount("/metrics", make_asgi_app())


def run() -> None:
    """Console entry point."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
