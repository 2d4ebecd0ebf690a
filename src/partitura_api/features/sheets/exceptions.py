"""Errors raised by sheet operations."""

from __future__ import annotations

from partitura_api.common.errors import AuthorizationError, NotFoundError


class SheetNotFoundError(NotFoundError):
    """Raised when a sheet (or its owner relation) cannot be found."""

    code = "sheet_not_found"

    def __init__(self, sheet_id: int) -> None:
        super().__init__(f"Sheet {sheet_id} not found.")
        self.sheet_id = sheet_id


class SheetModificationForbiddenError(AuthorizationError):
    """Raised by the owner policy when the actor does not own the sheet."""

    code = "sheet_modification_forbidden"

    def __init__(self, *, sheet_id: int, actor_id: int | None, action: str) -> None:
        actor = "anonymous caller" if actor_id is None else f"user {actor_id}"
        super().__init__(f"{actor.capitalize()} may not {action} sheet {sheet_id}.")
        self.sheet_id = sheet_id
        self.actor_id = actor_id
        self.action = action


__all__ = ["SheetModificationForbiddenError", "SheetNotFoundError"]
