"""DB package exports."""

from .base import NAMING_CONVENTION, Base, IntegerPrimaryKeyMixin, TimestampMixin, metadata, utc_now
from .database import (
    Database,
    DatabaseConfig,
    build_async_url,
    build_sync_url,
    db,
    ensure_sqlite_parent_dir,
    get_db_session,
)
from .types import UTCDateTime

__all__ = [
    "Base",
    "metadata",
    "NAMING_CONVENTION",
    "utc_now",
    "IntegerPrimaryKeyMixin",
    "TimestampMixin",
    "UTCDateTime",
    "Database",
    "DatabaseConfig",
    "db",
    "get_db_session",
    "build_sync_url",
    "build_async_url",
    "ensure_sqlite_parent_dir",
]
