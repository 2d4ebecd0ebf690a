"""Query helpers for ``UserSheet`` relationship records."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from partitura_api.models import UserSheet


class UserSheetsRepository:
    """Persistence helpers for the user/sheet ledger table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, *, user_id: int, sheet_id: int) -> UserSheet | None:
        stmt = select(UserSheet).where(
            UserSheet.user_id == user_id,
            UserSheet.sheet_id == sheet_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_owner_record(self, sheet_id: int) -> UserSheet | None:
        stmt = select(UserSheet).where(
            UserSheet.sheet_id == sheet_id,
            UserSheet.is_owner.is_(True),
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def owners_for(self, sheet_ids: Iterable[int]) -> dict[int, int]:
        """Map sheet id to owner id for every owned sheet in ``sheet_ids``."""

        ids = list(sheet_ids)
        if not ids:
            return {}
        stmt = select(UserSheet.sheet_id, UserSheet.user_id).where(
            UserSheet.sheet_id.in_(ids),
            UserSheet.is_owner.is_(True),
        )
        result = await self._session.execute(stmt)
        return {sheet_id: user_id for sheet_id, user_id in result.all()}

    async def sheet_ids_for_user(
        self,
        user_id: int,
        *,
        owned: bool | None = None,
        favorite: bool | None = None,
    ) -> set[int]:
        stmt = select(UserSheet.sheet_id).where(UserSheet.user_id == user_id)
        if owned is not None:
            stmt = stmt.where(UserSheet.is_owner.is_(owned))
        if favorite is not None:
            stmt = stmt.where(UserSheet.is_favorite.is_(favorite))
        result = await self._session.execute(stmt)
        return set(result.scalars().all())

    async def create(
        self,
        *,
        user_id: int,
        sheet_id: int,
        is_owner: bool,
        is_favorite: bool,
    ) -> UserSheet:
        record = UserSheet(
            user_id=user_id,
            sheet_id=sheet_id,
            is_owner=is_owner,
            is_favorite=is_favorite,
        )
        self._session.add(record)
        await self._session.flush()
        await self._session.refresh(record)
        return record

    async def insert_if_absent(self, *, user_id: int, sheet_id: int) -> UserSheet | None:
        """Insert a favorite record under a savepoint.

        Returns ``None`` when a record for the pair already exists, for example
        one written by a concurrent request after the caller's read.
        """
        record = UserSheet(user_id=user_id, sheet_id=sheet_id, is_owner=False, is_favorite=True)
        try:
            async with self._session.begin_nested():
                self._session.add(record)
                await self._session.flush()
        except IntegrityError:
            return None
        await self._session.refresh(record)
        return record

    async def mark_favorite(self, record: UserSheet) -> UserSheet:
        record.is_favorite = True
        await self._session.flush()
        await self._session.refresh(record)
        return record

    async def delete(self, record: UserSheet) -> None:
        await self._session.delete(record)
        await self._session.flush()

    async def delete_for_sheet(self, sheet_id: int) -> int:
        stmt = delete(UserSheet).where(UserSheet.sheet_id == sheet_id)
        result = await self._session.execute(stmt)
        return int(result.rowcount or 0)

    async def delete_for_user(self, user_id: int) -> int:
        stmt = delete(UserSheet).where(UserSheet.user_id == user_id)
        result = await self._session.execute(stmt)
        return int(result.rowcount or 0)

    async def count_owned(self, user_id: int) -> int:
        return len(await self.sheet_ids_for_user(user_id, owned=True))


__all__ = ["UserSheetsRepository"]
