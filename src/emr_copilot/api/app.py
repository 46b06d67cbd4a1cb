"""FastAPI application with lifespan management."""

from __future__ import annotations

import importlib.metadata
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncGenerator

from fastapi import FastAPI

from emr_copilot.api.middleware.error_handler import register_error_handlers
from emr_copilot.api.routes import assist, extract, health, insert, messages, session
from emr_copilot.api.state import ApiState
from emr_copilot.core.config import APIConfig, AppSettings
from emr_copilot.core.startup_checks import validate_settings
from emr_copilot.extraction.extractor import ContentExtractor
from emr_copilot.generation.client import GenerationClient
from emr_copilot.hooks import setup_logging
from emr_copilot.messaging import CommandDispatcher
from emr_copilot.persistence.options_store import OptionsStore, create_options_store
from emr_copilot.services.assistant_service import AssistantService

if TYPE_CHECKING:
    from emr_copilot.inference.protocols import IInferenceBackend


def _get_version() -> str:
    """Read package version from installed metadata, with dev fallback."""
    try:
        return importlib.metadata.version("emr-copilot")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0-dev"


def build_state(
    settings: AppSettings,
    *,
    backend: IInferenceBackend | None = None,
    options_store: OptionsStore | None = None,
) -> ApiState:
    """Wire settings, options, generation client and services together."""
    store = options_store or create_options_store(settings.options)
    client = GenerationClient(settings, backend=backend, options_store=store)
    service = AssistantService(client, store, extractor=ContentExtractor(settings.extraction))
    return ApiState(
        settings=settings,
        options_store=store,
        service=service,
        dispatcher=CommandDispatcher(),
    )


def create_app(
    settings: AppSettings | None = None,
    *,
    backend: IInferenceBackend | None = None,
    options_store: OptionsStore | None = None,
) -> FastAPI:
    """Build the app. Tests pass a fake backend and an in-memory options store."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        effective = settings or AppSettings()
        setup_logging(effective.observability)
        state = build_state(effective, backend=backend, options_store=options_store)
        validate_settings(effective, state.options_store.load())
        app.state.settings = effective
        app.state.copilot = state
        yield

    api_config = settings.api if settings else APIConfig()
    app = FastAPI(
        title=api_config.title,
        description=api_config.description,
        version=_get_version(),
        lifespan=lifespan,
    )
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(extract.router, prefix="/api")
    app.include_router(assist.router, prefix="/api")
    app.include_router(insert.router, prefix="/api")
    app.include_router(messages.router, prefix="/api")
    app.include_router(session.router, prefix="/api")
    return app


app = create_app()
