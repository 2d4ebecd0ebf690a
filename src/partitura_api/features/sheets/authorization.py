"""Authorization hook consulted before sheet mutations.

The service calls the configured policy for update, file replacement and
delete. ``AllowAllPolicy`` keeps the catalog open; ``OwnerOnlyPolicy``
requires the acting user to be the sheet's owner. Integrators can pass any
object implementing ``SheetAuthorizationPolicy`` instead.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from partitura_api.settings import SheetAuthorizationMode

from .exceptions import SheetModificationForbiddenError


class SheetAction(str, Enum):
    UPDATE = "update"
    REPLACE_FILE = "replace the file of"
    DELETE = "delete"


class SheetAuthorizationPolicy(Protocol):
    def authorize(
        self,
        *,
        action: SheetAction,
        sheet_id: int,
        owner_id: int | None,
        actor_id: int | None,
    ) -> None: ...


class AllowAllPolicy:
    def authorize(
        self,
        *,
        action: SheetAction,
        sheet_id: int,
        owner_id: int | None,
        actor_id: int | None,
    ) -> None:
        return None


class OwnerOnlyPolicy:
    def authorize(
        self,
        *,
        action: SheetAction,
        sheet_id: int,
        owner_id: int | None,
        actor_id: int | None,
    ) -> None:
        if actor_id is None or actor_id != owner_id:
            raise SheetModificationForbiddenError(
                sheet_id=sheet_id, actor_id=actor_id, action=action.value
            )


def build_policy(mode: SheetAuthorizationMode) -> SheetAuthorizationPolicy:
    if mode == "owner":
        return OwnerOnlyPolicy()
    return AllowAllPolicy()


__all__ = [
    "AllowAllPolicy",
    "OwnerOnlyPolicy",
    "SheetAction",
    "SheetAuthorizationPolicy",
    "build_policy",
]
