"""Shared pytest fixtures for Partitura API tests."""

from __future__ import annotations

import io
import os
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI, UploadFile
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import Headers

os.environ.setdefault("PARTITURA_TEST_FAST_HASH", "1")

from partitura_api.db import Database, DatabaseConfig, db  # noqa: E402
from partitura_api.features.sheets.schemas import SheetMetadata, SheetOut  # noqa: E402
from partitura_api.features.sheets.service import SheetsService  # noqa: E402
from partitura_api.features.users.schemas import UserCreate, UserOut  # noqa: E402
from partitura_api.features.users.service import UsersService  # noqa: E402
from partitura_api.main import create_app  # noqa: E402
from partitura_api.settings import Settings  # noqa: E402

TESTS_ROOT = Path(__file__).resolve().parent
PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n%%EOF\n"
DEFAULT_PASSWORD = "Secret123"


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Tag tests with ``unit``/``integration`` from their directory."""

    for item in items:
        parts = Path(item.path).resolve().relative_to(TESTS_ROOT).parts
        if parts and parts[0] in {"unit", "integration"}:
            item.add_marker(getattr(pytest.mark, parts[0]))


def make_upload(
    content: bytes = PDF_BYTES,
    *,
    filename: str | None = "score.pdf",
    content_type: str | None = "application/pdf",
) -> UploadFile:
    headers = Headers({"content-type": content_type}) if content_type else Headers({})
    return UploadFile(file=io.BytesIO(content), filename=filename, headers=headers)


@pytest.fixture()
def pdf_bytes() -> bytes:
    return PDF_BYTES


@pytest.fixture()
def upload_factory() -> Callable[..., UploadFile]:
    """Build a starlette ``UploadFile`` the way FastAPI hands one to a route."""

    return make_upload


@pytest.fixture()
def settings() -> Settings:
    """Settings bound to a private in-memory SQLite database."""

    return Settings(
        _env_file=None,
        database_url="sqlite:///:memory:",
        logging_level="INFO",
        sheet_authorization="none",
    )


@pytest_asyncio.fixture()
async def database(settings: Settings) -> AsyncIterator[Database]:
    db.init(DatabaseConfig.from_settings(settings))
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture()
async def session(database: Database) -> AsyncIterator[AsyncSession]:
    async with database.sessionmaker() as session:
        yield session
        await session.rollback()


@pytest.fixture()
def app(settings: Settings, database: Database) -> FastAPI:
    """Application wired to the test database; the lifespan is not run."""

    return create_app(settings)


@pytest_asyncio.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture()
def users_service(session: AsyncSession) -> UsersService:
    return UsersService(session=session)


@pytest.fixture()
def sheets_service(session: AsyncSession, settings: Settings) -> SheetsService:
    return SheetsService(session=session, settings=settings)


@pytest.fixture()
def create_user(users_service: UsersService) -> Callable[..., Awaitable[UserOut]]:
    counter = {"n": 0}

    async def _create(name: str | None = None, **overrides: Any) -> UserOut:
        counter["n"] += 1
        n = counter["n"]
        payload = UserCreate(
            name=name or f"Musician {n}",
            email=overrides.pop("email", f"musician{n}@example.com"),
            password=overrides.pop("password", DEFAULT_PASSWORD),
        )
        return await users_service.create_user(payload=payload)

    return _create


@pytest.fixture()
def create_sheet(sheets_service: SheetsService) -> Callable[..., Awaitable[SheetOut]]:
    async def _create(
        *,
        owner_id: int,
        title: str = "Sonata",
        artist: str = "Beethoven",
        genre: str = "Classical",
        instrument: str = "Piano",
        description: str | None = None,
        is_public: bool = True,
        upload: UploadFile | None = None,
    ) -> SheetOut:
        metadata = SheetMetadata(
            title=title,
            description=description,
            artist=artist,
            genre=genre,
            instrument=instrument,
            is_public=is_public,
            owner_id=owner_id,
        )
        return await sheets_service.create_sheet(
            metadata=metadata, upload=upload or make_upload()
        )

    return _create
