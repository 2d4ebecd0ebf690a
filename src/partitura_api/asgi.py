"""ASGI module for servers that need an application object (``partitura_api.asgi:app``)."""

from __future__ import annotations

from .main import create_app

app = create_app()

__all__ = ["app"]
