"""Business logic for user operations."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from partitura_api.common.logging import log_context
from partitura_api.core.security.hashing import hash_password
from partitura_api.features.ledger.repository import UserSheetsRepository
from partitura_api.models import User, canonical_email

from .exceptions import (
    DuplicateEmailError,
    InvalidPasswordError,
    UserNotFoundError,
    UserOwnsSheetsError,
)
from .repository import UsersRepository
from .schemas import ProfileUpdate, UserCreate, UserOut, UserProfile, UserUpdate

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def check_password_policy(password: str) -> None:
    """Require a minimum length plus a digit, a lowercase and an uppercase letter."""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidPasswordError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
        )
    if not any(ch.isdigit() for ch in password):
        raise InvalidPasswordError("Password must contain at least one digit.")
    if not any(ch.islower() for ch in password):
        raise InvalidPasswordError("Password must contain at least one lowercase letter.")
    if not any(ch.isupper() for ch in password):
        raise InvalidPasswordError("Password must contain at least one uppercase letter.")


class UsersService:
    """CRUD and profile helpers for user accounts."""

    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._repo = UsersRepository(session)

    async def require_user(self, user_id: int) -> User:
        user = await self._repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def create_user(self, *, payload: UserCreate) -> UserOut:
        logger.debug("users.create.start", extra=log_context(email=payload.email))

        if await self._repo.get_by_email(payload.email) is not None:
            logger.warning("users.create.conflict", extra=log_context(email=payload.email))
            raise DuplicateEmailError(payload.email)

        check_password_policy(payload.password)
        try:
            user = await self._repo.create(
                name=payload.name.strip(),
                email=payload.email,
                hashed_password=hash_password(payload.password),
            )
        except IntegrityError as exc:
            # A concurrent registration won the unique email index.
            logger.warning(
                "users.create.integrity_conflict", extra=log_context(email=payload.email)
            )
            raise DuplicateEmailError(payload.email) from exc

        logger.info("users.create.success", extra=log_context(user_id=user.id))
        return UserOut.model_validate(user)

    async def get_user(self, *, user_id: int) -> UserOut:
        user = await self.require_user(user_id)
        return UserOut.model_validate(user)

    async def get_profile(self, *, user_id: int) -> UserProfile:
        user = await self.require_user(user_id)
        return UserProfile.model_validate(user)

    async def update_user(self, *, user_id: int, payload: UserUpdate) -> UserOut:
        logger.debug("users.update.start", extra=log_context(user_id=user_id))
        user = await self.require_user(user_id)

        updates = payload.model_dump(exclude_unset=True, exclude_none=True)
        repo_kwargs: dict[str, object] = {}

        if "email" in updates and canonical_email(updates["email"]) != user.email_normalized:
            if await self._repo.get_by_email(updates["email"]) is not None:
                logger.warning(
                    "users.update.conflict",
                    extra=log_context(user_id=user_id, email=updates["email"]),
                )
                raise DuplicateEmailError(updates["email"])
            repo_kwargs["email"] = updates["email"]
        if "name" in updates:
            repo_kwargs["name"] = updates["name"].strip()
        if "password" in updates:
            check_password_policy(updates["password"])
            repo_kwargs["hashed_password"] = hash_password(updates["password"])

        if repo_kwargs:
            try:
                user = await self._repo.update_user(user, **repo_kwargs)
            except IntegrityError as exc:
                logger.warning(
                    "users.update.integrity_conflict",
                    extra=log_context(user_id=user_id, email=updates.get("email")),
                )
                raise DuplicateEmailError(str(updates.get("email"))) from exc

        logger.info(
            "users.update.success",
            extra=log_context(user_id=user_id, fields=",".join(sorted(repo_kwargs))),
        )
        return UserOut.model_validate(user)

    async def update_profile(self, *, user_id: int, payload: ProfileUpdate) -> UserOut:
        user = await self.require_user(user_id)
        updates = payload.changes()
        if "name" in updates:
            updates["name"] = str(updates["name"]).strip()
        if updates:
            user = await self._repo.update_user(user, **updates)
        logger.info(
            "users.profile.update.success",
            extra=log_context(user_id=user_id, fields=",".join(sorted(updates))),
        )
        return UserOut.model_validate(user)

    async def delete_user(self, *, user_id: int) -> None:
        user = await self.require_user(user_id)

        # A sheet without its owner row would break the one-owner invariant.
        relations = UserSheetsRepository(self._session)
        owned = await relations.count_owned(user_id)
        if owned:
            logger.warning(
                "users.delete.owner_rejected",
                extra=log_context(user_id=user_id, owned=owned),
            )
            raise UserOwnsSheetsError(user_id=user_id, owned=owned)

        favorites_removed = await relations.delete_for_user(user_id)
        await self._repo.delete(user)
        logger.info(
            "users.delete.success",
            extra=log_context(user_id=user_id, favorites_removed=favorites_removed),
        )


__all__ = ["MIN_PASSWORD_LENGTH", "UsersService", "check_password_policy"]
