"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sprintlens.api.dependencies import (
    close_orchestrator,
    close_state_store,
    init_orchestrator,
    init_state_store,
)
from sprintlens.api.models import APIResponse
from sprintlens.api.routes import reports, templates
from sprintlens.config import Settings
from sprintlens.logging import setup_logging
from sprintlens.mailer import EmailSender
from sprintlens.orchestrator import (
    InvalidTemplateConfigError,
    ReportGenerationError,
    ReportOrchestrator,
    RunNotReadyError,
)
from sprintlens.state_store import (
    ReportRunNotFoundError,
    SprintNotFoundError,
    StateStoreError,
    TaskNotFoundError,
    TemplateNotFoundError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGES: dict[type[StateStoreError], str] = {
    SprintNotFoundError: "Sprint not found",
    TaskNotFoundError: "Task not found",
    TemplateNotFoundError: "Template not found",
    ReportRunNotFoundError: "Report run not found",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings

    # Startup
    setup_logging(log_dir=settings.log_dir, level=settings.log_level)
    store = init_state_store(app.state.db_path)
    sender = EmailSender(
        api_key=settings.email_api_key,
        sender=settings.email_from,
        base_url=settings.email_api_url,
    )
    init_orchestrator(ReportOrchestrator(state_store=store, email_sender=sender))
    logger.info(
        "SprintLens API started (db=%s, email=%s)",
        app.state.db_path,
        "enabled" if sender.enabled else "dev",
    )

    yield
    # Shutdown
    close_orchestrator()
    close_state_store()


def create_app(db_path: str | None = None, settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_path: Database path override (takes precedence over settings).
        settings: Settings to use instead of reading the environment.
    """
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="SprintLens API",
        description="REST API for SprintLens - Sprint report generation",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings
    app.state.db_path = db_path or settings.db_path

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(SprintNotFoundError)
    @app.exception_handler(TaskNotFoundError)
    @app.exception_handler(TemplateNotFoundError)
    @app.exception_handler(ReportRunNotFoundError)
    async def not_found_handler(_request: Request, exc: StateStoreError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=APIResponse[None](
                data=None, error=NOT_FOUND_MESSAGES.get(type(exc), "Not found")
            ).model_dump(),
        )

    @app.exception_handler(InvalidTemplateConfigError)
    async def invalid_config_handler(
        _request: Request, exc: InvalidTemplateConfigError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=APIResponse[None](data=None, error=str(exc)).model_dump(),
        )

    @app.exception_handler(RunNotReadyError)
    async def run_not_ready_handler(_request: Request, _exc: RunNotReadyError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=APIResponse[None](data=None, error="Report run is not ready").model_dump(),
        )

    @app.exception_handler(ReportGenerationError)
    async def generation_error_handler(
        _request: Request, exc: ReportGenerationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=APIResponse[None](data=None, error=str(exc)).model_dump(),
        )

    @app.exception_handler(StateStoreError)
    async def state_store_error_handler(_request: Request, _exc: StateStoreError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=APIResponse[None](data=None, error="Internal server error").model_dump(),
        )

    # Include routers
    app.include_router(templates.router, prefix="/api/v1")
    app.include_router(reports.router, prefix="/api/v1")

    return app
