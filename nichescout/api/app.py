"""FastAPI application factory and entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI

from nichescout import __version__
from nichescout.api.middleware import CorrelationIdMiddleware, add_exception_handlers
from nichescout.api.routes import auth, ideas, niches, pipeline, system
from nichescout.config import Settings
from nichescout.db import KeyValueStore
from nichescout.logging import configure_logging
from nichescout.service import ResearchService

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = structlog.get_logger()

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the store and build the service on startup, close on shutdown."""
    settings = Settings()
    settings.ensure_data_dir()

    configure_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
    )

    store = KeyValueStore(settings.db_path)
    store.init_schema()

    app.state.store = store
    app.state.settings = settings
    app.state.service = ResearchService.from_settings(store, settings)

    logger.info("NicheScout API started", host=settings.api_host, port=settings.api_port)
    yield

    store.close()
    logger.info("NicheScout API shut down")


def include_routes(app: FastAPI) -> None:
    app.include_router(system.router, prefix=API_PREFIX)
    app.include_router(pipeline.router, prefix=API_PREFIX)
    app.include_router(ideas.router, prefix=API_PREFIX)
    app.include_router(niches.router, prefix=API_PREFIX)
    app.include_router(auth.router, prefix=API_PREFIX)


def create_app() -> FastAPI:
    """Application factory."""
    app = FastAPI(
        title="NicheScout",
        description="AI market research pipeline API",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(CorrelationIdMiddleware)
    add_exception_handlers(app)

    # Prometheus metrics endpoint
    from prometheus_client import make_asgi_app

    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

    include_routes(app)
    return app


def main() -> None:
    """Entry point for `nichescout-api` command."""
    import uvicorn

    settings = Settings()
    uvicorn.run(
        "nichescout.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )
