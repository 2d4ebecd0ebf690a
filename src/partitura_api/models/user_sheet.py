"""ORM model for the user/sheet relationship ledger."""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Index, Integer, UniqueConstraint, false, text
from sqlalchemy.orm import Mapped, mapped_column

from partitura_api.db import Base, IntegerPrimaryKeyMixin, TimestampMixin


class UserSheet(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    """One record per (user, sheet) pair carrying both flags.

    Invariants:
    * a user has at most one record per sheet;
    * at most one record per sheet has ``is_owner`` set (partial unique index).
    """

    __tablename__ = "user_sheets"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    sheet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sheets.id", ondelete="CASCADE"),
        nullable=False,
    )
    is_owner: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    is_favorite: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    __table_args__ = (
        UniqueConstraint("user_id", "sheet_id", name="user_sheets_user_id_sheet_id_key"),
        Index("user_sheets_sheet_id_idx", "sheet_id"),
        Index(
            "user_sheets_owner_sheet_id_key",
            "sheet_id",
            unique=True,
            sqlite_where=text("is_owner = 1"),
            postgresql_where=text("is_owner"),
        ),
    )


__all__ = ["UserSheet"]
