"""Engine and session management.

One engine per process, opened by the app lifespan. Each request gets one
``AsyncSession`` that commits when the handler returns and rolls back when it
raises, so every HTTP call is a single transaction.

SQLite is the default backend (``aiosqlite``); PostgreSQL works through
``asyncpg``. Settings may name either the sync or the async driver.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from partitura_api.settings import DEFAULT_SQLITE_PATH, Settings

# backend name -> (async driver, sync driver)
_DRIVERS: dict[str, tuple[str, str]] = {
    "sqlite": ("sqlite+aiosqlite", "sqlite"),
    "postgresql": ("postgresql+asyncpg", "postgresql"),
}


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    url: str
    echo: bool = False

    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30

    sqlite_journal_mode: str = "WAL"
    sqlite_synchronous: str = "NORMAL"
    sqlite_busy_timeout_ms: int = 30_000

    @classmethod
    def from_settings(cls, settings: Settings) -> DatabaseConfig:
        return cls(
            url=settings.database_url or f"sqlite:///{DEFAULT_SQLITE_PATH.as_posix()}",
            echo=settings.database_echo,
            sqlite_busy_timeout_ms=settings.database_sqlite_busy_timeout_ms,
        )


def _backend(url: URL) -> str:
    name = url.get_backend_name()
    if name not in _DRIVERS:
        raise ValueError(f"Unsupported database backend {name!r}; use SQLite or PostgreSQL.")
    return name


def _with_driver(cfg: DatabaseConfig, *, use_async: bool) -> str:
    url = make_url(cfg.url)
    async_driver, sync_driver = _DRIVERS[_backend(url)]
    driver = async_driver if use_async else sync_driver
    return url.set(drivername=driver).render_as_string(hide_password=False)


def build_sync_url(cfg: DatabaseConfig) -> str:
    """URL with the blocking driver, for Alembic."""
    return _with_driver(cfg, use_async=False)


def build_async_url(cfg: DatabaseConfig) -> str:
    return _with_driver(cfg, use_async=True)


def _sqlite_file(url: URL) -> Path | None:
    """Filesystem path of a file-backed SQLite URL; ``None`` for in-memory databases."""
    database = (url.database or "").strip()
    if not database or database == ":memory:" or database.startswith("file:"):
        return None
    return Path(database)


def ensure_sqlite_parent_dir(url: str | URL) -> None:
    url = make_url(url)
    if url.get_backend_name() != "sqlite":
        return
    path = _sqlite_file(url)
    if path is not None:
        path.expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def _engine_options(url: URL, cfg: DatabaseConfig) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": cfg.echo, "pool_pre_ping": True}
    if _backend(url) != "sqlite":
        options.update(
            pool_size=cfg.pool_size,
            max_overflow=cfg.max_overflow,
            pool_timeout=cfg.pool_timeout,
        )
        return options

    options["connect_args"] = {
        "check_same_thread": False,
        "timeout": cfg.sqlite_busy_timeout_ms / 1000,
    }
    if _sqlite_file(url) is None:
        # Every session must see the same in-memory database.
        options["poolclass"] = StaticPool
    else:
        # A single writer connection avoids "database is locked" under load.
        options.update(pool_size=1, max_overflow=0, pool_timeout=max(1, cfg.pool_timeout))
    return options


def _unicode_lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def _install_sqlite_hooks(engine: AsyncEngine, cfg: DatabaseConfig, *, file_backed: bool) -> None:
    pragmas = ["foreign_keys=ON", f"busy_timeout={int(cfg.sqlite_busy_timeout_ms)}"]
    if file_backed:
        pragmas += [
            f"journal_mode={cfg.sqlite_journal_mode}",
            f"synchronous={cfg.sqlite_synchronous}",
        ]

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_conn, _record) -> None:
        # SQLite's own lower() folds ASCII only; case-insensitive filters need Unicode.
        dbapi_conn.create_function("lower", 1, _unicode_lower, deterministic=True)
        cursor = dbapi_conn.cursor()
        try:
            for pragma in pragmas:
                cursor.execute(f"PRAGMA {pragma}")
        finally:
            cursor.close()


class Database:
    """Process-wide engine and sessionmaker.

    ``init`` is idempotent for an identical config; ``dispose`` resets the
    object so a later ``init`` can open a different database (tests do this).
    """

    def __init__(self) -> None:
        self._cfg: DatabaseConfig | None = None
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call db.init(...) at startup.")
        return self._engine

    @property
    def sessionmaker(self) -> async_sessionmaker[AsyncSession]:
        if self._sessionmaker is None:
            raise RuntimeError("Database not initialized. Call db.init(...) at startup.")
        return self._sessionmaker

    def init(self, cfg: DatabaseConfig) -> None:
        if self._engine is not None and self._cfg == cfg:
            return

        url = make_url(build_async_url(cfg))
        engine = create_async_engine(url, **_engine_options(url, cfg))
        if _backend(url) == "sqlite":
            ensure_sqlite_parent_dir(url)
            _install_sqlite_hooks(engine, cfg, file_backed=_sqlite_file(url) is not None)

        self._cfg = cfg
        self._engine = engine
        self._sessionmaker = async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)

    async def create_all(self) -> None:
        """Create missing tables from the ORM metadata."""
        from partitura_api import models  # noqa: F401

        from .base import metadata

        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._cfg = None
        self._engine = None
        self._sessionmaker = None


db = Database()


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: one session, one transaction per request."""
    session = db.sessionmaker()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        # Cancellation must not leave the connection checked out.
        await asyncio.shield(session.close())


__all__ = [
    "Database",
    "DatabaseConfig",
    "build_async_url",
    "build_sync_url",
    "db",
    "ensure_sqlite_parent_dir",
    "get_db_session",
]
