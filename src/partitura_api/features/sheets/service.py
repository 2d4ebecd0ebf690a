"""Sheet catalog service: creation, mutation, listings and favorites.

Every listing follows the same shape: fetch candidate rows from the catalog
store, resolve all owners with one ledger call, then assemble views. A row
whose owner cannot be resolved is logged and left out of the result instead
of failing the request.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from partitura_api.common.logging import log_context
from partitura_api.features.files.validation import FileValidator, format_file_size
from partitura_api.features.ledger.resolver import OwnerResolver
from partitura_api.features.ledger.service import RelationshipLedger
from partitura_api.features.users.exceptions import UserNotFoundError
from partitura_api.features.users.repository import UsersRepository
from partitura_api.models import Sheet
from partitura_api.settings import Settings

from .authorization import SheetAction, SheetAuthorizationPolicy, build_policy
from .exceptions import SheetNotFoundError
from .filters import SheetSearchCriteria
from .repository import SheetsRepository
from .schemas import AdvancedSearchQuery, SheetMetadata, SheetOut, SheetUpdate
from .sorting import resolve_sort_key, sort_sheets

logger = logging.getLogger(__name__)

PDF_URL_TEMPLATE = "/api/sheets/{sheet_id}/pdf"


@dataclass(frozen=True, slots=True)
class SheetContent:
    """Stored payload of a sheet, ready to stream back to a client."""

    sheet_id: int
    content: bytes
    filename: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)


class SheetsService:
    """Coordinates the catalog store, the relationship ledger and uploads."""

    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        policy: SheetAuthorizationPolicy | None = None,
        resolver: OwnerResolver | None = None,
    ) -> None:
        self._session = session
        self._settings = settings
        self._sheets = SheetsRepository(session)
        self._users = UsersRepository(session)
        self._ledger = RelationshipLedger(session=session)
        self._resolver = resolver or OwnerResolver(self._ledger)
        self._validator = FileValidator.from_settings(settings)
        self._policy = policy or build_policy(settings.sheet_authorization)

    # ---- helpers ------------------------------------------------------------

    @staticmethod
    def to_view(sheet: Sheet, owner_id: int) -> SheetOut:
        return SheetOut(
            id=sheet.id,
            title=sheet.title,
            description=sheet.description,
            artist=sheet.artist,
            genre=sheet.genre,
            instrument=sheet.instrument,
            pdf_filename=sheet.pdf_filename,
            pdf_size=sheet.pdf_size,
            pdf_size_label=format_file_size(sheet.pdf_size),
            pdf_content_type=sheet.pdf_content_type,
            pdf_download_url=PDF_URL_TEMPLATE.format(sheet_id=sheet.id),
            is_public=sheet.is_public,
            owner_id=owner_id,
            created_at=sheet.created_at,
            updated_at=sheet.updated_at,
        )

    async def _assemble(self, sheets: Sequence[Sheet], *, listing: str) -> list[SheetOut]:
        owners = await self._resolver.resolve(sheet.id for sheet in sheets)

        views: list[SheetOut] = []
        for sheet in sheets:
            owner_id = owners.get(sheet.id)
            if owner_id is None:
                logger.warning(
                    "sheets.owner.unresolved",
                    extra=log_context(sheet_id=sheet.id, listing=listing),
                )
                continue
            views.append(self.to_view(sheet, owner_id))

        logger.debug(
            "sheets.list.assembled",
            extra=log_context(listing=listing, candidates=len(sheets), returned=len(views)),
        )
        return views

    async def _require_sheet(self, sheet_id: int, *, with_content: bool = False) -> Sheet:
        sheet = await self._sheets.find(sheet_id, with_content=with_content)
        if sheet is None:
            raise SheetNotFoundError(sheet_id)
        return sheet

    async def _require_owned_sheet(self, sheet_id: int) -> tuple[Sheet, int]:
        sheet = await self._require_sheet(sheet_id)
        owner_id = await self._ledger.find_owner_of(sheet_id)
        if owner_id is None:
            logger.warning("sheets.owner.unresolved", extra=log_context(sheet_id=sheet_id))
            raise SheetNotFoundError(sheet_id)
        return sheet, owner_id

    async def _ensure_user(self, user_id: int) -> None:
        if not await self._users.exists(user_id):
            raise UserNotFoundError(user_id)

    async def _ensure_sheet(self, sheet_id: int) -> None:
        if not await self._sheets.exists(sheet_id):
            raise SheetNotFoundError(sheet_id)

    # ---- single sheet -------------------------------------------------------

    async def create_sheet(self, *, metadata: SheetMetadata, upload: UploadFile) -> SheetOut:
        logger.debug(
            "sheets.create.start",
            extra=log_context(owner_id=metadata.owner_id, upload_filename=upload.filename),
        )
        await self._ensure_user(metadata.owner_id)
        payload = await self._validator.validate_upload(upload)

        sheet = await self._sheets.save(
            Sheet(
                title=metadata.title,
                description=metadata.description,
                artist=metadata.artist,
                genre=metadata.genre,
                instrument=metadata.instrument,
                pdf_content=payload.content,
                pdf_size=payload.size,
                pdf_filename=payload.filename,
                pdf_content_type=payload.content_type,
                is_public=metadata.is_public,
            )
        )
        await self._ledger.create_owner_relation(user_id=metadata.owner_id, sheet_id=sheet.id)

        logger.info(
            "sheets.create.success",
            extra=log_context(
                sheet_id=sheet.id,
                owner_id=metadata.owner_id,
                pdf_size=payload.size,
                is_public=sheet.is_public,
            ),
        )
        return self.to_view(sheet, metadata.owner_id)

    async def get_sheet(self, *, sheet_id: int) -> SheetOut:
        sheet, owner_id = await self._require_owned_sheet(sheet_id)
        return self.to_view(sheet, owner_id)

    async def get_sheet_content(self, *, sheet_id: int) -> SheetContent:
        await self._require_owned_sheet(sheet_id)
        sheet = await self._require_sheet(sheet_id, with_content=True)
        return SheetContent(
            sheet_id=sheet.id,
            content=sheet.pdf_content,
            filename=sheet.pdf_filename,
            content_type=sheet.pdf_content_type,
        )

    async def update_sheet(
        self,
        *,
        sheet_id: int,
        payload: SheetUpdate,
        actor_id: int | None = None,
    ) -> SheetOut:
        sheet, owner_id = await self._require_owned_sheet(sheet_id)
        self._policy.authorize(
            action=SheetAction.UPDATE, sheet_id=sheet_id, owner_id=owner_id, actor_id=actor_id
        )

        changes = payload.changes()
        if changes:
            sheet = await self._sheets.update_sheet(sheet, **changes)

        logger.info(
            "sheets.update.success",
            extra=log_context(sheet_id=sheet_id, fields=",".join(sorted(changes))),
        )
        return self.to_view(sheet, owner_id)

    async def replace_sheet_file(
        self,
        *,
        sheet_id: int,
        upload: UploadFile,
        actor_id: int | None = None,
    ) -> SheetOut:
        sheet, owner_id = await self._require_owned_sheet(sheet_id)
        self._policy.authorize(
            action=SheetAction.REPLACE_FILE,
            sheet_id=sheet_id,
            owner_id=owner_id,
            actor_id=actor_id,
        )

        payload = await self._validator.validate_upload(upload)
        sheet = await self._sheets.replace_content(
            sheet,
            content=payload.content,
            filename=payload.filename,
            content_type=payload.content_type,
        )

        logger.info(
            "sheets.file.replace.success",
            extra=log_context(sheet_id=sheet_id, pdf_size=payload.size),
        )
        return self.to_view(sheet, owner_id)

    async def delete_sheet(self, *, sheet_id: int, actor_id: int | None = None) -> None:
        await self._ensure_sheet(sheet_id)
        owner_id = await self._ledger.find_owner_of(sheet_id)
        self._policy.authorize(
            action=SheetAction.DELETE, sheet_id=sheet_id, owner_id=owner_id, actor_id=actor_id
        )

        relations = await self._ledger.delete_all_for_sheet(sheet_id)
        await self._sheets.delete(sheet_id)

        logger.info(
            "sheets.delete.success",
            extra=log_context(sheet_id=sheet_id, relations_removed=relations),
        )

    # ---- listings -----------------------------------------------------------

    async def list_public(self) -> list[SheetOut]:
        return await self._assemble(await self._sheets.by_public(True), listing="public")

    async def search(self, *, term: str) -> list[SheetOut]:
        sheets = await self._sheets.by_free_text_substring(term)
        return await self._assemble(sheets, listing="search")

    async def list_by_genre(self, *, genre: str) -> list[SheetOut]:
        return await self._assemble(await self._sheets.by_genre(genre), listing="genre")

    async def list_by_instrument(self, *, instrument: str) -> list[SheetOut]:
        sheets = await self._sheets.by_instrument(instrument)
        return await self._assemble(sheets, listing="instrument")

    async def list_by_artist(self, *, artist: str) -> list[SheetOut]:
        sheets = await self._sheets.by_artist_substring(artist)
        return await self._assemble(sheets, listing="artist")

    async def list_recent(self) -> list[SheetOut]:
        sheets = await self._sheets.recent_public(self._settings.recent_limit)
        return await self._assemble(sheets, listing="recent")

    async def advanced_search(self, *, query: AdvancedSearchQuery) -> list[SheetOut]:
        criteria = SheetSearchCriteria(
            text=query.search_term,
            artist=query.artist,
            genre=query.genre,
            instrument=query.instrument,
        )
        sort_key = resolve_sort_key(query.sort_by)
        logger.debug(
            "sheets.search.advanced.start",
            extra=log_context(sort_by=sort_key, unfiltered=criteria.is_empty()),
        )

        candidates = await self._sheets.by_advanced_criteria(criteria)
        ordered = sort_sheets(candidates, sort_key)
        results = await self._assemble(ordered, listing="advanced")

        logger.info(
            "sheets.search.advanced.success",
            extra=log_context(sort_by=sort_key, candidates=len(candidates), count=len(results)),
        )
        return results

    async def list_owned(self, *, user_id: int) -> list[SheetOut]:
        await self._ensure_user(user_id)
        sheets = await self._sheets.by_ids(await self._ledger.list_owned(user_id))
        return await self._assemble(sheets, listing="owned")

    async def list_user_public(self, *, user_id: int) -> list[SheetOut]:
        await self._ensure_user(user_id)
        owned = await self._ledger.list_owned(user_id)
        sheets = await self._sheets.by_ids(owned, public=True)
        return await self._assemble(sheets, listing="user_public")

    async def list_favorites(self, *, user_id: int) -> list[SheetOut]:
        await self._ensure_user(user_id)
        sheets = await self._sheets.by_ids(await self._ledger.list_favorites(user_id))
        return await self._assemble(sheets, listing="favorites")

    async def available_genres(self) -> list[str]:
        return await self._sheets.distinct_genres()

    async def available_instruments(self) -> list[str]:
        return await self._sheets.distinct_instruments()

    async def available_artists(self) -> list[str]:
        return await self._sheets.distinct_artists()

    # ---- favorites ----------------------------------------------------------

    async def add_favorite(self, *, user_id: int, sheet_id: int) -> None:
        await self._ensure_user(user_id)
        await self._ensure_sheet(sheet_id)
        await self._ledger.set_favorite(user_id=user_id, sheet_id=sheet_id)

    async def remove_favorite(self, *, user_id: int, sheet_id: int) -> None:
        await self._ensure_user(user_id)
        await self._ensure_sheet(sheet_id)
        await self._ledger.clear_favorite(user_id=user_id, sheet_id=sheet_id)

    async def is_favorite(self, *, user_id: int, sheet_id: int) -> bool:
        await self._ensure_user(user_id)
        await self._ensure_sheet(sheet_id)
        return await self._ledger.is_favorite(user_id=user_id, sheet_id=sheet_id)


__all__ = ["PDF_URL_TEMPLATE", "SheetContent", "SheetsService"]
