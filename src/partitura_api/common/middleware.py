"""HTTP middleware: CORS and per-request correlation."""

from __future__ import annotations

import logging
import time
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from partitura_api.settings import Settings

from .logging import bind_request_context, clear_request_context, log_context

logger = logging.getLogger("partitura_api.request")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a correlation ID for the request and log its outcome.

    A client-supplied ``X-Request-ID`` is reused; otherwise one is generated.
    The ID is echoed on the response so callers can match log lines.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.correlation_id = correlation_id
        bind_request_context(correlation_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            # The exception handler logs the traceback.
            logger.error("request.error", extra=self._fields(request, started, None))
            raise
        else:
            logger.info(
                "request.complete", extra=self._fields(request, started, response.status_code)
            )
        finally:
            clear_request_context()

        response.headers[REQUEST_ID_HEADER] = correlation_id
        return response

    @staticmethod
    def _fields(request: Request, started: float, status_code: int | None) -> dict:
        return log_context(
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=round((time.perf_counter() - started) * 1000.0, 2),
        )


def register_middleware(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(RequestContextMiddleware)

    if settings.server_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.server_cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )


__all__ = ["REQUEST_ID_HEADER", "RequestContextMiddleware", "register_middleware"]
