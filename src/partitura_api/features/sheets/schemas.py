"""Pydantic schemas for sheet payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from partitura_api.common.schema import BaseSchema

from .sorting import DEFAULT_SORT


class SheetMetadata(BaseSchema):
    """Metadata supplied alongside the PDF when a sheet is created."""

    title: str = Field(min_length=1, max_length=150)
    description: str | None = None
    artist: str = Field(min_length=1, max_length=100)
    genre: str = Field(min_length=1, max_length=50)
    instrument: str = Field(min_length=1, max_length=50)
    is_public: bool = False
    owner_id: int


class SheetUpdate(BaseSchema):
    """Partial metadata update.

    Only fields present in the payload are applied; ``description`` may be
    cleared by sending ``null``. The other fields ignore ``null``.
    """

    title: str | None = Field(default=None, min_length=1, max_length=150)
    description: str | None = None
    artist: str | None = Field(default=None, min_length=1, max_length=100)
    genre: str | None = Field(default=None, min_length=1, max_length=50)
    instrument: str | None = Field(default=None, min_length=1, max_length=50)
    is_public: bool | None = None

    def changes(self) -> dict[str, object]:
        provided = self.model_dump(include=self.model_fields_set)
        return {
            key: value
            for key, value in provided.items()
            if value is not None or key == "description"
        }


class AdvancedSearchQuery(BaseSchema):
    search_term: str | None = None
    artist: str | None = None
    genre: str | None = None
    instrument: str | None = None
    sort_by: str = DEFAULT_SORT


class SheetOut(BaseSchema):
    """Sheet view assembled from the sheet row plus its resolved owner."""

    id: int
    title: str
    description: str | None = None
    artist: str
    genre: str
    instrument: str
    pdf_filename: str
    pdf_size: int
    pdf_size_label: str
    pdf_content_type: str
    pdf_download_url: str
    is_public: bool
    owner_id: int
    created_at: datetime
    updated_at: datetime


__all__ = [
    "AdvancedSearchQuery",
    "SheetMetadata",
    "SheetOut",
    "SheetUpdate",
]
