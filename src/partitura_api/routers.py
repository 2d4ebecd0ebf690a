"""API router composition for the Partitura application."""

from __future__ import annotations

from fastapi import APIRouter

from .features.health.router import router as health_router
from .features.sheets.router import router as sheets_router
from .features.users.router import router as users_router

api_router = APIRouter()
api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(users_router)
api_router.include_router(sheets_router)

__all__ = ["api_router"]
