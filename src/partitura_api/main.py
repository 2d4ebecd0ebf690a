"""Partitura FastAPI application entry point."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .common.exceptions import register_exception_handlers
from .common.logging import log_context, setup_logging
from .common.middleware import register_middleware
from .db import DatabaseConfig, db
from .routers import api_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)
API_PREFIX = "/api"


def create_lifespan(settings: Settings):
    """Open the database on startup and dispose of it on shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        db.init(DatabaseConfig.from_settings(settings))
        if settings.database_auto_create:
            await db.create_all()
        logger.info(
            "app.startup",
            extra=log_context(
                version=settings.app_version,
                auto_create=settings.database_auto_create,
                sheet_authorization=settings.sheet_authorization,
            ),
        )
        try:
            yield
        finally:
            await db.dispose()
            logger.info("app.shutdown")

    return lifespan


def create_app(settings: Settings | None = None) -> FastAPI:
    """Return a configured FastAPI application."""

    settings = settings or get_settings()
    setup_logging(settings)

    docs_url = settings.docs_url if settings.api_docs_enabled else None
    redoc_url = settings.redoc_url if settings.api_docs_enabled else None
    openapi_url = settings.openapi_url if settings.api_docs_enabled else None

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=docs_url,
        redoc_url=redoc_url,
        openapi_url=openapi_url,
        lifespan=create_lifespan(settings),
    )

    app.state.settings = settings
    if settings.sheet_authorization == "none":
        logger.warning(
            "Sheet authorization disabled; any caller may modify or delete sheets.",
            extra=log_context(sheet_authorization=settings.sheet_authorization),
        )

    register_middleware(app, settings)
    register_exception_handlers(app)
    app.include_router(api_router, prefix=API_PREFIX)
    return app


def route_table(app: FastAPI) -> list[tuple[list[str], str]]:
    """``(methods, path)`` pairs in registration order, read from the OpenAPI paths.

    Included routers are already flattened there, whatever the router internals.
    """
    return [
        ([method.upper() for method in operations], path)
        for path, operations in app.openapi().get("paths", {}).items()
    ]


__all__ = [
    "API_PREFIX",
    "create_app",
    "create_lifespan",
    "route_table",
]
