"""In-memory ordering for advanced search results."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Literal

from partitura_api.models import Sheet

SortKey = Literal["recent", "title", "artist"]

DEFAULT_SORT: SortKey = "recent"

# Ascending keys; the id tie-breaker keeps equal values in a stable order.
_ASCENDING: dict[str, Callable[[Sheet], Any]] = {
    "title": lambda sheet: (sheet.title, sheet.id),
    "artist": lambda sheet: (sheet.artist, sheet.id),
}


def resolve_sort_key(value: str | None) -> SortKey:
    """Map user input to a supported key; unknown or blank input means ``recent``."""
    candidate = (value or "").strip().lower()
    if candidate in _ASCENDING:
        return candidate  # type: ignore[return-value]
    return DEFAULT_SORT


def sort_sheets(sheets: Sequence[Sheet], sort_by: str | None) -> list[Sheet]:
    key = resolve_sort_key(sort_by)
    if key in _ASCENDING:
        return sorted(sheets, key=_ASCENDING[key])
    return sorted(sheets, key=lambda sheet: (sheet.created_at, sheet.id), reverse=True)


__all__ = ["DEFAULT_SORT", "SortKey", "resolve_sort_key", "sort_sheets"]
