"""Errors raised by the relationship ledger."""

from __future__ import annotations

from partitura_api.common.errors import ConflictError, InvalidOperationError, NotFoundError


class DuplicateRelationshipError(ConflictError):
    """Raised when an owner relation would duplicate an existing record."""

    code = "duplicate_relationship"

    def __init__(self, *, user_id: int, sheet_id: int, reason: str) -> None:
        super().__init__(
            f"Cannot create owner relation for user {user_id} on sheet {sheet_id}: {reason}."
        )
        self.user_id = user_id
        self.sheet_id = sheet_id
        self.reason = reason


class RelationshipNotFoundError(NotFoundError):
    """Raised when no record links the user to the sheet."""

    code = "relationship_not_found"

    def __init__(self, *, user_id: int, sheet_id: int) -> None:
        super().__init__(f"User {user_id} has no relation to sheet {sheet_id}.")
        self.user_id = user_id
        self.sheet_id = sheet_id


class OwnedSheetFavoriteError(InvalidOperationError):
    """Raised when an owner tries to drop their own sheet from favorites."""

    code = "owned_sheet_favorite"

    def __init__(self, *, user_id: int, sheet_id: int) -> None:
        super().__init__(
            f"Sheet {sheet_id} is owned by user {user_id} and cannot be removed from favorites."
        )
        self.user_id = user_id
        self.sheet_id = sheet_id


__all__ = [
    "DuplicateRelationshipError",
    "OwnedSheetFavoriteError",
    "RelationshipNotFoundError",
]
