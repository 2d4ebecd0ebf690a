"""Service factories used by API routers.

Routers import their per-request service constructors from here; each
factory shares the request's single ``AsyncSession`` so one HTTP call is one
transaction.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from partitura_api.db import get_db_session
from partitura_api.settings import Settings, get_settings


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with, falling back to the process default."""
    settings = getattr(request.app.state, "settings", None)
    return settings if isinstance(settings, Settings) else get_settings()


SessionDep = Annotated[AsyncSession, Depends(get_db_session)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]

ACTOR_HEADER = "X-User-Id"


def get_actor_id(
    actor_id: Annotated[
        int | None,
        Header(
            alias=ACTOR_HEADER,
            description="Identifier of the acting user, consulted by the owner policy.",
        ),
    ] = None,
) -> int | None:
    return actor_id


ActorIdDep = Annotated[int | None, Depends(get_actor_id)]


def get_users_service(session: SessionDep):
    from partitura_api.features.users.service import UsersService

    return UsersService(session=session)


def get_sheets_service(session: SessionDep, settings: SettingsDep):
    from partitura_api.features.sheets.service import SheetsService

    return SheetsService(session=session, settings=settings)


def get_health_service(session: SessionDep, settings: SettingsDep):
    from partitura_api.features.health.service import HealthService

    return HealthService(session=session, settings=settings)


__all__ = [
    "ACTOR_HEADER",
    "ActorIdDep",
    "SessionDep",
    "SettingsDep",
    "get_actor_id",
    "get_app_settings",
    "get_health_service",
    "get_sheets_service",
    "get_users_service",
]
