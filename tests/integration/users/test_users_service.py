from __future__ import annotations

import base64
import hashlib

import pytest
from sqlalchemy import func, select

from partitura_api.features.users.exceptions import (
    DuplicateEmailError,
    InvalidPasswordError,
    UserNotFoundError,
    UserOwnsSheetsError,
)
from partitura_api.features.users.repository import UsersRepository
from partitura_api.features.users.schemas import ProfileUpdate, UserCreate, UserUpdate
from partitura_api.models import User, UserSheet


def _matches(password: str, hashed: str) -> bool:
    scheme, n, r, p, salt, key = hashed.split("$")
    assert scheme == "scrypt"
    expected = base64.urlsafe_b64decode(key + "=" * (-len(key) % 4))
    derived = hashlib.scrypt(
        password.encode(),
        salt=base64.urlsafe_b64decode(salt + "=" * (-len(salt) % 4)),
        n=int(n),
        r=int(r),
        p=int(p),
        dklen=len(expected),
    )
    return derived == expected


@pytest.mark.asyncio
async def test_create_user_hashes_password(session, users_service) -> None:
    created = await users_service.create_user(
        payload=UserCreate(name="  Clara  ", email="Clara@Example.com", password="Secret123")
    )

    stored = await session.get(User, created.id)
    assert created.name == "Clara"
    assert stored is not None
    assert stored.email_normalized == "clara@example.com"
    assert stored.hashed_password != "Secret123"
    assert _matches("Secret123", stored.hashed_password)
    assert not _matches("Secret124", stored.hashed_password)


@pytest.mark.asyncio
async def test_duplicate_email_ignores_case(users_service, create_user) -> None:
    await create_user(email="robert@example.com")

    with pytest.raises(DuplicateEmailError):
        await users_service.create_user(
            payload=UserCreate(name="Robert", email="ROBERT@example.com", password="Secret123")
        )


@pytest.mark.parametrize("password", ["Short1A", "nodigitsHere", "ALLUPPER123", "alllower123"])
@pytest.mark.asyncio
async def test_weak_passwords_are_rejected(users_service, password: str) -> None:
    with pytest.raises(InvalidPasswordError):
        await users_service.create_user(
            payload=UserCreate(name="Weak", email="weak@example.com", password=password)
        )


@pytest.mark.asyncio
async def test_update_user_checks_email_and_password(users_service, create_user) -> None:
    first = await create_user(email="first@example.com")
    second = await create_user(email="second@example.com")

    with pytest.raises(DuplicateEmailError):
        await users_service.update_user(
            user_id=second.id, payload=UserUpdate(email="FIRST@example.com")
        )
    with pytest.raises(InvalidPasswordError):
        await users_service.update_user(user_id=second.id, payload=UserUpdate(password="weak"))

    same = await users_service.update_user(
        user_id=first.id, payload=UserUpdate(email="First@example.com", name="Renamed")
    )
    assert same.email == "first@example.com"
    assert same.name == "Renamed"


@pytest.mark.asyncio
async def test_profile_round_trip(users_service, create_user) -> None:
    user = await create_user("Fanny")

    updated = await users_service.update_profile(
        user_id=user.id, payload=ProfileUpdate(bio="Pianist and composer.")
    )
    profile = await users_service.get_profile(user_id=user.id)

    assert updated.bio == "Pianist and composer."
    assert profile.name == "Fanny"
    assert profile.bio == "Pianist and composer."
    assert "email" not in profile.model_dump()


@pytest.mark.asyncio
async def test_profile_bio_can_be_cleared_but_name_cannot(users_service, create_user) -> None:
    user = await create_user("Fanny")
    await users_service.update_profile(
        user_id=user.id, payload=ProfileUpdate(bio="Pianist and composer.")
    )

    cleared = await users_service.update_profile(
        user_id=user.id, payload=ProfileUpdate.model_validate({"bio": None, "name": None})
    )
    untouched = await users_service.update_profile(
        user_id=user.id, payload=ProfileUpdate(name=" Fanny H. ")
    )

    assert cleared.bio is None
    assert cleared.name == "Fanny"
    assert untouched.name == "Fanny H."
    assert untouched.bio is None


@pytest.mark.asyncio
async def test_missing_user_raises_not_found(users_service) -> None:
    with pytest.raises(UserNotFoundError):
        await users_service.get_user(user_id=42)
    with pytest.raises(UserNotFoundError):
        await users_service.delete_user(user_id=42)


@pytest.mark.asyncio
async def test_delete_user_who_owns_sheets_is_rejected(
    users_service, create_user, create_sheet
) -> None:
    owner = await create_user()
    await create_sheet(owner_id=owner.id)

    with pytest.raises(UserOwnsSheetsError):
        await users_service.delete_user(user_id=owner.id)
    assert (await users_service.get_user(user_id=owner.id)).id == owner.id


@pytest.mark.asyncio
async def test_delete_user_removes_favorites(
    session, users_service, sheets_service, create_user, create_sheet
) -> None:
    owner = await create_user()
    fan = await create_user()
    sheet = await create_sheet(owner_id=owner.id)
    await sheets_service.add_favorite(user_id=fan.id, sheet_id=sheet.id)

    await users_service.delete_user(user_id=fan.id)

    remaining = await session.execute(
        select(func.count()).select_from(UserSheet).where(UserSheet.user_id == fan.id)
    )
    assert remaining.scalar_one() == 0
    with pytest.raises(UserNotFoundError):
        await users_service.get_user(user_id=fan.id)
    assert (await sheets_service.get_sheet(sheet_id=sheet.id)).owner_id == owner.id


@pytest.mark.asyncio
async def test_registration_losing_email_race_is_duplicate_email(
    monkeypatch: pytest.MonkeyPatch, users_service, create_user
) -> None:
    await create_user(email="race@example.com")

    async def not_yet_visible(self, email: str) -> User | None:
        return None

    monkeypatch.setattr(UsersRepository, "get_by_email", not_yet_visible)

    with pytest.raises(DuplicateEmailError):
        await users_service.create_user(
            payload=UserCreate(name="Late", email="RACE@example.com", password="Secret123")
        )


@pytest.mark.asyncio
async def test_email_change_losing_race_is_duplicate_email(
    monkeypatch: pytest.MonkeyPatch, users_service, create_user
) -> None:
    await create_user(email="taken@example.com")
    mover = await create_user(email="mover@example.com")

    async def not_yet_visible(self, email: str) -> User | None:
        return None

    monkeypatch.setattr(UsersRepository, "get_by_email", not_yet_visible)

    with pytest.raises(DuplicateEmailError):
        await users_service.update_user(
            user_id=mover.id, payload=UserUpdate(email="taken@example.com")
        )
