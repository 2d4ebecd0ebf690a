"""Service layer for the health module."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from partitura_api.common.logging import log_context
from partitura_api.settings import Settings

from .schemas import HealthCheckResponse, HealthComponentStatus

logger = logging.getLogger(__name__)


class HealthService:
    """Compute liveness/readiness responses."""

    def __init__(self, *, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings

    async def _database_component(self) -> HealthComponentStatus:
        try:
            await self._session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error(
                "health.database.unavailable",
                extra=log_context(exception_type=type(exc).__name__),
            )
            return HealthComponentStatus(
                name="database", status="unavailable", detail=type(exc).__name__
            )
        return HealthComponentStatus(name="database", status="available")

    async def status(self) -> HealthCheckResponse:
        database = await self._database_component()
        overall = "ok" if database.status == "available" else "error"
        logger.debug("health.status", extra=log_context(status=overall))
        return HealthCheckResponse(
            status=overall,
            version=self._settings.app_version,
            timestamp=datetime.now(tz=UTC),
            components=[database],
        )


__all__ = ["HealthService"]
