"""Predicate builders for sheet listings and advanced search."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Select

from partitura_api.common.search import (
    any_contains_predicate,
    contains_predicate,
    equals_ignore_case,
    normalize_q,
)
from partitura_api.models import Sheet

TEXT_SEARCH_COLUMNS = (Sheet.title, Sheet.artist, Sheet.description)


@dataclass(frozen=True, slots=True)
class SheetSearchCriteria:
    """AND-combined filters; ``None`` or blank values are not applied.

    ``text`` matches title, artist or description (substring); ``artist`` is a
    substring match; ``genre`` and ``instrument`` are equality matches. All
    comparisons ignore case.
    """

    text: str | None = None
    artist: str | None = None
    genre: str | None = None
    instrument: str | None = None
    public: bool | None = True

    def normalized(self) -> SheetSearchCriteria:
        return SheetSearchCriteria(
            text=normalize_q(self.text),
            artist=normalize_q(self.artist),
            genre=normalize_q(self.genre),
            instrument=normalize_q(self.instrument),
            public=self.public,
        )

    def is_empty(self) -> bool:
        c = self.normalized()
        return not any((c.text, c.artist, c.genre, c.instrument))


def public_only(stmt: Select[tuple[Sheet]]) -> Select[tuple[Sheet]]:
    return stmt.where(Sheet.is_public.is_(True))


def apply_sheet_criteria(
    stmt: Select[tuple[Sheet]],
    criteria: SheetSearchCriteria,
) -> Select[tuple[Sheet]]:
    c = criteria.normalized()

    if c.public is not None:
        stmt = stmt.where(Sheet.is_public.is_(c.public))
    if c.text:
        stmt = stmt.where(any_contains_predicate(TEXT_SEARCH_COLUMNS, c.text))
    if c.artist:
        stmt = stmt.where(contains_predicate(Sheet.artist, c.artist))
    if c.genre:
        stmt = stmt.where(equals_ignore_case(Sheet.genre, c.genre))
    if c.instrument:
        stmt = stmt.where(equals_ignore_case(Sheet.instrument, c.instrument))
    return stmt


__all__ = [
    "SheetSearchCriteria",
    "TEXT_SEARCH_COLUMNS",
    "apply_sheet_criteria",
    "public_only",
]
