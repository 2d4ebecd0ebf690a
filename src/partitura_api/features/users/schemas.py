"""Pydantic schemas for user payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field

from partitura_api.common.schema import BaseSchema


class UserCreate(BaseSchema):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr = Field(max_length=255)
    password: str = Field(min_length=1, max_length=128)


class UserUpdate(BaseSchema):
    """Partial update; omitted fields are left untouched."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, min_length=1, max_length=128)


class ProfileUpdate(BaseSchema):
    """Profile edit; ``bio`` may be cleared with ``null``, ``name`` ignores it."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    bio: str | None = Field(default=None, max_length=2000)

    def changes(self) -> dict[str, object]:
        provided = self.model_dump(include=self.model_fields_set)
        return {key: value for key, value in provided.items() if value is not None or key == "bio"}


class UserProfile(BaseSchema):
    """Public view of a user."""

    id: int
    name: str
    bio: str | None = None
    created_at: datetime


class UserOut(UserProfile):
    email: str
    updated_at: datetime


__all__ = ["ProfileUpdate", "UserCreate", "UserOut", "UserProfile", "UserUpdate"]
