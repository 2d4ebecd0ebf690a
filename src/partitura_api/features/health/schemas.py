"""Pydantic schemas for the health module."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from partitura_api.common.schema import BaseSchema


class HealthComponentStatus(BaseSchema):
    """Health of a single dependency such as the database."""

    name: str = Field(..., description="Component identifier.")
    status: Literal["available", "unavailable"] = Field(..., description="Component status flag.")
    detail: str | None = Field(default=None, description="Optional note about the component.")


class HealthCheckResponse(BaseSchema):
    """Payload returned by ``GET /api/health``."""

    status: Literal["ok", "error"] = Field(..., description="Overall health indicator.")
    version: str = Field(..., description="Running application version.")
    timestamp: datetime = Field(..., description="UTC time the check executed.")
    components: list[HealthComponentStatus] = Field(default_factory=list)


__all__ = ["HealthCheckResponse", "HealthComponentStatus"]
