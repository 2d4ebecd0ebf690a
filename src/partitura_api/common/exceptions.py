"""Exception handlers that turn errors into ``{"detail", "code"}`` JSON bodies."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from partitura_api.common.errors import CatalogError
from partitura_api.common.logging import log_context

logger = logging.getLogger("partitura_api.errors")


def _request_fields(request: Request, **fields) -> dict:
    return log_context(method=request.method, path=request.url.path, **fields)


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    logger.warning(
        "catalog.error",
        extra=_request_fields(
            request,
            status_code=exc.status_code,
            code=exc.code,
            error=type(exc).__name__,
        ),
    )
    return JSONResponse({"detail": exc.message, "code": exc.code}, status_code=exc.status_code)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Pass ``HTTPException`` through unchanged; only server errors are logged."""
    if exc.status_code >= 500:
        logger.error(
            "http.error",
            extra=_request_fields(request, status_code=exc.status_code, detail=exc.detail),
        )
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code, headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled.error", extra=_request_fields(request, error=type(exc).__name__))
    return JSONResponse({"detail": "Internal server error"}, status_code=500)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "catalog_error_handler",
    "http_exception_handler",
    "register_exception_handlers",
    "unhandled_exception_handler",
]
