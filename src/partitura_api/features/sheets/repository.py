"""Catalog store: query helpers for ``Sheet`` records."""

from __future__ import annotations

from collections.abc import Iterable
from typing import cast

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from partitura_api.common.search import normalize_q
from partitura_api.models import Sheet

from .filters import SheetSearchCriteria, apply_sheet_criteria, public_only

_UNSET = object()


class SheetsRepository:
    """Persistence and listing helpers for the sheet table.

    Listing methods return rows without the PDF payload loaded. Ordering is
    newest first unless noted; ``by_advanced_criteria`` leaves it undefined.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def base_query(self) -> Select[tuple[Sheet]]:
        return select(Sheet)

    async def _all(self, stmt: Select[tuple[Sheet]]) -> list[Sheet]:
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    def _newest_first(stmt: Select[tuple[Sheet]]) -> Select[tuple[Sheet]]:
        return stmt.order_by(Sheet.created_at.desc(), Sheet.id.desc())

    # ---- single-row operations --------------------------------------------

    async def find(self, sheet_id: int, *, with_content: bool = False) -> Sheet | None:
        stmt = select(Sheet).where(Sheet.id == sheet_id)
        if with_content:
            stmt = stmt.options(undefer(Sheet.pdf_content)).execution_options(
                populate_existing=True
            )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists(self, sheet_id: int) -> bool:
        stmt = select(Sheet.id).where(Sheet.id == sheet_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def save(self, sheet: Sheet) -> Sheet:
        self._session.add(sheet)
        await self._session.flush()
        await self._session.refresh(sheet)
        return sheet

    async def update_sheet(
        self,
        sheet: Sheet,
        *,
        title: str | object = _UNSET,
        description: str | None | object = _UNSET,
        artist: str | object = _UNSET,
        genre: str | object = _UNSET,
        instrument: str | object = _UNSET,
        is_public: bool | object = _UNSET,
    ) -> Sheet:
        if title is not _UNSET:
            sheet.title = cast(str, title)
        if description is not _UNSET:
            sheet.description = cast(str | None, description)
        if artist is not _UNSET:
            sheet.artist = cast(str, artist)
        if genre is not _UNSET:
            sheet.genre = cast(str, genre)
        if instrument is not _UNSET:
            sheet.instrument = cast(str, instrument)
        if is_public is not _UNSET:
            sheet.is_public = cast(bool, is_public)
        await self._session.flush()
        await self._session.refresh(sheet)
        return sheet

    async def replace_content(
        self,
        sheet: Sheet,
        *,
        content: bytes,
        filename: str,
        content_type: str,
    ) -> Sheet:
        sheet.pdf_content = content
        sheet.pdf_size = len(content)
        sheet.pdf_filename = filename
        sheet.pdf_content_type = content_type
        await self._session.flush()
        await self._session.refresh(sheet)
        return sheet

    async def delete(self, sheet_id: int) -> int:
        result = await self._session.execute(delete(Sheet).where(Sheet.id == sheet_id))
        return int(result.rowcount or 0)

    # ---- listings ---------------------------------------------------------

    async def by_ids(self, sheet_ids: Iterable[int], *, public: bool | None = None) -> list[Sheet]:
        ids = list(sheet_ids)
        if not ids:
            return []
        stmt = self.base_query().where(Sheet.id.in_(ids))
        if public is not None:
            stmt = stmt.where(Sheet.is_public.is_(public))
        return await self._all(self._newest_first(stmt))

    async def by_public(self, is_public: bool = True) -> list[Sheet]:
        stmt = self.base_query().where(Sheet.is_public.is_(is_public))
        return await self._all(self._newest_first(stmt))

    async def by_genre(self, genre: str) -> list[Sheet]:
        # Equality listing: a blank value matches nothing rather than everything.
        if normalize_q(genre) is None:
            return []
        stmt = apply_sheet_criteria(self.base_query(), SheetSearchCriteria(genre=genre))
        return await self._all(self._newest_first(stmt))

    async def by_instrument(self, instrument: str) -> list[Sheet]:
        if normalize_q(instrument) is None:
            return []
        stmt = apply_sheet_criteria(self.base_query(), SheetSearchCriteria(instrument=instrument))
        return await self._all(self._newest_first(stmt))

    async def by_artist_substring(self, artist: str) -> list[Sheet]:
        stmt = apply_sheet_criteria(self.base_query(), SheetSearchCriteria(artist=artist))
        return await self._all(self._newest_first(stmt))

    async def by_free_text_substring(self, term: str) -> list[Sheet]:
        stmt = apply_sheet_criteria(self.base_query(), SheetSearchCriteria(text=term))
        return await self._all(self._newest_first(stmt))

    async def by_advanced_criteria(self, criteria: SheetSearchCriteria) -> list[Sheet]:
        return await self._all(apply_sheet_criteria(self.base_query(), criteria))

    async def recent_public(self, limit: int) -> list[Sheet]:
        stmt = self._newest_first(public_only(self.base_query())).limit(limit)
        return await self._all(stmt)

    # ---- distinct values --------------------------------------------------

    async def _distinct_public(self, column) -> list[str]:
        stmt = (
            select(column)
            .where(Sheet.is_public.is_(True))
            .distinct()
            .order_by(column.asc())
        )
        result = await self._session.execute(stmt)
        return [value for value in result.scalars().all() if value]

    async def distinct_genres(self) -> list[str]:
        return await self._distinct_public(Sheet.genre)

    async def distinct_instruments(self) -> list[str]:
        return await self._distinct_public(Sheet.instrument)

    async def distinct_artists(self) -> list[str]:
        return await self._distinct_public(Sheet.artist)


__all__ = ["SheetsRepository"]
