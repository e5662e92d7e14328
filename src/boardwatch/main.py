"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI

from boardwatch.config import get_settings
from boardwatch.github.webhooks import router as webhooks_router
from boardwatch.services import Services, build_services

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = structlog.get_logger()

VERSION = "0.1.0"


def configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper())
    logging.basicConfig(level=level)
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


def create_app(services: Services | None = None) -> FastAPI:
    """Build the application.

    With ``services`` given (as in tests) they are used as-is; otherwise
    settings and collaborators are created once when the app starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """Application startup and shutdown."""
        if services is None:
            settings = get_settings()
            configure_logging(settings.boardwatch_log_level)
            logger.info(
                "boardwatch.starting",
                repository=settings.github_repository,
                project_id=settings.github_project_id,
            )
            app.state.services = build_services(settings)
            logger.info("boardwatch.db_initialized", path=str(settings.database_path))

        yield

        logger.info("boardwatch.shutdown")

    app = FastAPI(
        title="boardwatch",
        description="GitHub Projects status notifications and scheduled moves",
        version=VERSION,
        lifespan=lifespan,
    )
    if services is not None:
        app.state.services = services

    app.include_router(webhooks_router)

    @app.get("/health")
    async def health() -> dict:
        """Health check endpoint."""
        return {"status": "ok", "version": VERSION}

    return app


app = create_app()
