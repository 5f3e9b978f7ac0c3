"""devjournal REST API — FastAPI application factory."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from devjournal.api.deps import dispose_engine, init_session_factory
from devjournal.api.errors import register_error_handlers
from devjournal.api.middleware.rate_limit import rate_limit
from devjournal.api.middleware.request_id import RequestIDMiddleware
from devjournal.api.routers import (
    activities,
    analytics,
    auth,
    github,
    journal,
    settings,
    webhooks,
)
from devjournal.core.logging import setup_logging

log = structlog.get_logger("devjournal.api")


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: init DB. Shutdown: dispose engine."""
    factory = init_session_factory()
    log.info("app.started", store_available=factory is not None)
    yield
    await dispose_engine()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    setup_logging()

    app = FastAPI(
        title="devjournal",
        docs_url="/api/v1/docs",
        openapi_url="/api/v1/openapi.json",
        lifespan=_lifespan,
    )

    register_error_handlers(app)

    cors_origins = os.environ.get("DEVJOURNAL_CORS_ORIGINS", "http://localhost:3000")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in cors_origins.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health", tags=["ops"])
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    api_limit = [Depends(rate_limit("api"))]
    app.include_router(
        auth.router,
        prefix="/api/v1/auth",
        tags=["auth"],
        dependencies=[Depends(rate_limit("auth"))],
    )
    app.include_router(
        webhooks.router,
        prefix="/api/v1/webhooks",
        tags=["webhooks"],
        dependencies=[Depends(rate_limit("webhook"))],
    )
    app.include_router(github.router, prefix="/api/v1/github", tags=["github"])
    app.include_router(
        activities.router, prefix="/api/v1/activities", tags=["activities"], dependencies=api_limit
    )
    app.include_router(
        journal.router, prefix="/api/v1/journal", tags=["journal"], dependencies=api_limit
    )
    app.include_router(
        settings.router, prefix="/api/v1/settings", tags=["settings"], dependencies=api_limit
    )
    app.include_router(
        analytics.router, prefix="/api/v1/analytics", tags=["analytics"], dependencies=api_limit
    )

    return app
