"""Relationship ledger: ownership and favorite flags per (user, sheet).

Every sheet has exactly one record with ``is_owner`` set, written in the same
transaction that creates the sheet. Favorites reuse the same record, so an
owner who favorites their sheet still has a single row.

The ledger trusts its callers for existence checks on users and sheets; the
sheet service performs those before delegating here.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from partitura_api.common.logging import log_context
from partitura_api.models import UserSheet

from .exceptions import (
    DuplicateRelationshipError,
    OwnedSheetFavoriteError,
    RelationshipNotFoundError,
)
from .repository import UserSheetsRepository

logger = logging.getLogger(__name__)


class RelationshipLedger:
    """Owns the invariants of the ``user_sheets`` table."""

    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._repo = UserSheetsRepository(session)

    async def create_owner_relation(self, *, user_id: int, sheet_id: int) -> UserSheet:
        existing_owner = await self._repo.get_owner_record(sheet_id)
        if existing_owner is not None:
            raise DuplicateRelationshipError(
                user_id=user_id, sheet_id=sheet_id, reason="sheet already has an owner"
            )
        if await self._repo.get(user_id=user_id, sheet_id=sheet_id) is not None:
            raise DuplicateRelationshipError(
                user_id=user_id, sheet_id=sheet_id, reason="relation already exists"
            )

        record = await self._repo.create(
            user_id=user_id, sheet_id=sheet_id, is_owner=True, is_favorite=False
        )
        logger.info(
            "ledger.owner.create",
            extra=log_context(user_id=user_id, sheet_id=sheet_id),
        )
        return record

    async def find_owner_of(self, sheet_id: int) -> int | None:
        record = await self._repo.get_owner_record(sheet_id)
        return record.user_id if record is not None else None

    async def resolve_owners(self, sheet_ids: set[int]) -> dict[int, int]:
        """Return ``{sheet_id: owner_id}`` with one query; unowned ids are absent."""
        owners = await self._repo.owners_for(sheet_ids)
        logger.debug(
            "ledger.owners.resolve",
            extra=log_context(requested=len(sheet_ids), resolved=len(owners)),
        )
        return owners

    async def set_favorite(self, *, user_id: int, sheet_id: int) -> UserSheet:
        """Mark the sheet as a favorite; idempotent, never touches ``is_owner``."""
        record = await self._repo.get(user_id=user_id, sheet_id=sheet_id)
        if record is None:
            record = await self._repo.insert_if_absent(user_id=user_id, sheet_id=sheet_id)
        if record is None:
            # Lost the insert race; the winner's row is the one to update.
            record = await self._repo.get(user_id=user_id, sheet_id=sheet_id)
            if record is None:
                raise RelationshipNotFoundError(user_id=user_id, sheet_id=sheet_id)
        if not record.is_favorite:
            record = await self._repo.mark_favorite(record)

        logger.info(
            "ledger.favorite.set",
            extra=log_context(user_id=user_id, sheet_id=sheet_id, is_owner=record.is_owner),
        )
        return record

    async def clear_favorite(self, *, user_id: int, sheet_id: int) -> None:
        record = await self._repo.get(user_id=user_id, sheet_id=sheet_id)
        if record is None:
            raise RelationshipNotFoundError(user_id=user_id, sheet_id=sheet_id)
        if record.is_owner:
            logger.warning(
                "ledger.favorite.clear.owner_rejected",
                extra=log_context(user_id=user_id, sheet_id=sheet_id),
            )
            raise OwnedSheetFavoriteError(user_id=user_id, sheet_id=sheet_id)

        await self._repo.delete(record)
        logger.info(
            "ledger.favorite.clear",
            extra=log_context(user_id=user_id, sheet_id=sheet_id),
        )

    async def is_favorite(self, *, user_id: int, sheet_id: int) -> bool:
        record = await self._repo.get(user_id=user_id, sheet_id=sheet_id)
        return bool(record is not None and record.is_favorite)

    async def list_favorites(self, user_id: int) -> set[int]:
        return await self._repo.sheet_ids_for_user(user_id, favorite=True)

    async def list_owned(self, user_id: int) -> set[int]:
        return await self._repo.sheet_ids_for_user(user_id, owned=True)

    async def delete_all_for_sheet(self, sheet_id: int) -> int:
        removed = await self._repo.delete_for_sheet(sheet_id)
        logger.info(
            "ledger.sheet.purge",
            extra=log_context(sheet_id=sheet_id, removed=removed),
        )
        return removed


__all__ = ["RelationshipLedger"]
