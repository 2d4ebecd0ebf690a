"""Programmatic Alembic runner used by ``partitura-api migrate``."""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config

from partitura_api.settings import Settings, get_settings

from .database import DatabaseConfig, build_sync_url, ensure_sqlite_parent_dir

__all__ = [
    "build_alembic_config",
    "run_migrations",
]


def build_alembic_config(settings: Settings | None = None) -> Config:
    settings = settings or get_settings()
    alembic_ini = Path(settings.alembic_ini_path)
    if not alembic_ini.exists():
        raise FileNotFoundError(f"Alembic config not found at {alembic_ini}")

    sync_url = build_sync_url(DatabaseConfig.from_settings(settings))
    ensure_sqlite_parent_dir(sync_url)

    alembic_cfg = Config(str(alembic_ini))
    alembic_cfg.set_main_option("script_location", str(alembic_ini.parent / "migrations"))
    alembic_cfg.set_main_option("sqlalchemy.url", sync_url)
    # Keep the application logging setup intact.
    alembic_cfg.attributes["configure_logger"] = False
    return alembic_cfg


def run_migrations(settings: Settings | None = None, *, revision: str = "head") -> None:
    command.upgrade(build_alembic_config(settings), revision)
