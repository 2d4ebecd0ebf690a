"""Alembic environment for the Partitura schema.

The URL comes from ``sqlalchemy.url`` (set by ``partitura-api migrate``) and
falls back to ``PARTITURA_DATABASE_URL`` via the application settings.
SQLite runs in batch mode so ``ALTER TABLE`` migrations work there too.
"""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool
from sqlalchemy.engine import make_url

import partitura_api.models  # noqa: F401
from partitura_api.db.base import metadata
from partitura_api.db.database import DatabaseConfig, build_sync_url
from partitura_api.settings import get_settings

config = context.config

if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name)

target_metadata = metadata


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or build_sync_url(
        DatabaseConfig.from_settings(get_settings())
    )


def _configure(**options) -> None:
    url = _database_url()
    context.configure(
        target_metadata=target_metadata,
        render_as_batch=make_url(url).get_backend_name() == "sqlite",
        **options,
    )


def run_migrations_offline() -> None:
    _configure(url=_database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(_database_url(), poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            if connection.dialect.name == "sqlite":
                connection.exec_driver_sql("PRAGMA foreign_keys=ON")
            _configure(connection=connection)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
