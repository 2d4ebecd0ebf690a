"""Alembic migrations produce the schema the ORM expects."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import IntegrityError

from partitura_api.db.migrations import build_alembic_config, run_migrations
from partitura_api.settings import Settings


@pytest.fixture()
def migrated_url(tmp_path: Path) -> str:
    database_path = tmp_path / "migrated" / "partitura.sqlite"
    settings = Settings(_env_file=None, database_url=f"sqlite:///{database_path}")
    run_migrations(settings)
    return f"sqlite:///{database_path}"


def test_alembic_config_uses_sync_driver(tmp_path: Path) -> None:
    settings = Settings(
        _env_file=None, database_url=f"sqlite+aiosqlite:///{tmp_path / 'db' / 'x.sqlite'}"
    )

    cfg = build_alembic_config(settings)

    assert cfg.get_main_option("sqlalchemy.url").startswith("sqlite:///")
    assert cfg.get_main_option("script_location").endswith("migrations")
    assert (tmp_path / "db").is_dir()


def test_missing_alembic_ini_is_reported(tmp_path: Path) -> None:
    settings = Settings(_env_file=None, alembic_ini_path=tmp_path / "missing.ini")

    with pytest.raises(FileNotFoundError):
        build_alembic_config(settings)


def test_upgrade_creates_catalog_tables(migrated_url: str) -> None:
    engine = create_engine(migrated_url)
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names())
        ledger_indexes = {index["name"] for index in inspector.get_indexes("user_sheets")}
    finally:
        engine.dispose()

    assert {"users", "sheets", "user_sheets", "alembic_version"} <= tables
    assert "user_sheets_owner_sheet_id_key" in ledger_indexes


def test_migrated_schema_allows_one_owner_per_sheet(migrated_url: str) -> None:
    engine = create_engine(migrated_url)
    now = "2026-01-01 00:00:00"
    try:
        with engine.begin() as conn:
            for user_id in (1, 2):
                conn.execute(
                    text(
                        "INSERT INTO users (id, name, email, email_normalized, hashed_password,"
                        " created_at, updated_at) VALUES (:id, 'u', :email, :email, 'x', :ts, :ts)"
                    ),
                    {"id": user_id, "email": f"u{user_id}@example.com", "ts": now},
                )
            conn.execute(
                text(
                    "INSERT INTO sheets (id, title, artist, genre, instrument, pdf_content,"
                    " pdf_size, pdf_filename, pdf_content_type, is_public, created_at, updated_at)"
                    " VALUES (1, 't', 'a', 'g', 'i', x'25', 1, 'f.pdf', 'application/pdf', 1,"
                    " :ts, :ts)"
                ),
                {"ts": now},
            )
            conn.execute(
                text(
                    "INSERT INTO user_sheets (user_id, sheet_id, is_owner, is_favorite,"
                    " created_at, updated_at) VALUES (1, 1, 1, 0, :ts, :ts)"
                ),
                {"ts": now},
            )
            conn.execute(
                text(
                    "INSERT INTO user_sheets (user_id, sheet_id, is_owner, is_favorite,"
                    " created_at, updated_at) VALUES (2, 1, 0, 1, :ts, :ts)"
                ),
                {"ts": now},
            )

        with pytest.raises(IntegrityError), engine.begin() as conn:
            conn.execute(text("UPDATE user_sheets SET is_owner = 1 WHERE user_id = 2"))
    finally:
        engine.dispose()
