"""ORM model for catalog users."""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from partitura_api.db import Base, IntegerPrimaryKeyMixin, TimestampMixin


def canonical_email(value: str) -> str:
    return value.strip().lower()


class User(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    """A person who can own and favorite sheets."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    email_normalized: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    bio: Mapped[str | None] = mapped_column(Text(), nullable=True)

    @validates("email")
    def _sync_email_normalized(self, _key: str, value: str) -> str:
        self.email_normalized = canonical_email(value)
        return value.strip()


__all__ = ["User", "canonical_email"]
