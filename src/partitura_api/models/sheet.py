"""ORM model for catalog sheets."""

from __future__ import annotations

from sqlalchemy import Boolean, Index, Integer, LargeBinary, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from partitura_api.db import Base, IntegerPrimaryKeyMixin, TimestampMixin

DEFAULT_PDF_CONTENT_TYPE = "application/pdf"


class Sheet(IntegerPrimaryKeyMixin, TimestampMixin, Base):
    """A catalog entry: metadata plus the stored PDF payload.

    Ownership lives in ``user_sheets``; the row itself carries no owner column.
    """

    __tablename__ = "sheets"

    title: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    artist: Mapped[str] = mapped_column(String(100), nullable=False)
    genre: Mapped[str] = mapped_column(String(50), nullable=False)
    instrument: Mapped[str] = mapped_column(String(50), nullable=False)

    # Listings never need the payload; load it only on explicit access.
    pdf_content: Mapped[bytes] = mapped_column(LargeBinary(), nullable=False, deferred=True)
    pdf_size: Mapped[int] = mapped_column(Integer, nullable=False)
    pdf_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    pdf_content_type: Mapped[str] = mapped_column(
        String(100), nullable=False, default=DEFAULT_PDF_CONTENT_TYPE
    )

    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    __table_args__ = (
        Index("sheets_is_public_created_at_idx", "is_public", "created_at"),
        Index("sheets_genre_idx", "genre"),
        Index("sheets_instrument_idx", "instrument"),
    )


__all__ = ["DEFAULT_PDF_CONTENT_TYPE", "Sheet"]
