"""Query helpers for working with ``User`` records."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from partitura_api.models import User, canonical_email

_UNSET = object()


class UsersRepository:
    """Persistence helpers for the user table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: int) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email_normalized == canonical_email(email))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists(self, user_id: int) -> bool:
        stmt = select(User.id).where(User.id == user_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def create(
        self,
        *,
        name: str,
        email: str,
        hashed_password: str,
        bio: str | None = None,
    ) -> User:
        user = User(name=name, email=email, hashed_password=hashed_password, bio=bio)
        self._session.add(user)
        await self._session.flush()
        await self._session.refresh(user)
        return user

    async def update_user(
        self,
        user: User,
        *,
        name: str | object = _UNSET,
        email: str | object = _UNSET,
        hashed_password: str | object = _UNSET,
        bio: str | None | object = _UNSET,
    ) -> User:
        if name is not _UNSET:
            user.name = cast(str, name)
        if email is not _UNSET:
            user.email = cast(str, email)
        if hashed_password is not _UNSET:
            user.hashed_password = cast(str, hashed_password)
        if bio is not _UNSET:
            user.bio = cast(str | None, bio)
        await self._session.flush()
        await self._session.refresh(user)
        return user

    async def delete(self, user: User) -> None:
        await self._session.delete(user)
        await self._session.flush()


__all__ = ["UsersRepository"]
