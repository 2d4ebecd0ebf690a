"""Batch owner resolution for listings."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol


class OwnerSource(Protocol):
    async def resolve_owners(self, sheet_ids: set[int]) -> dict[int, int]: ...


class OwnerResolver:
    """Resolve owners for a whole result set with a single ledger call.

    Callers hand over every candidate id at once; nothing here loops over
    per-sheet lookups.
    """

    def __init__(self, source: OwnerSource) -> None:
        self._source = source

    async def resolve(self, sheet_ids: Iterable[int]) -> dict[int, int]:
        ids = set(sheet_ids)
        if not ids:
            return {}
        return await self._source.resolve_owners(ids)


__all__ = ["OwnerResolver", "OwnerSource"]
