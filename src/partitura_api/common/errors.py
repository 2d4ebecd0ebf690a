"""Domain error taxonomy shared by every feature.

Feature modules subclass these bases; routers translate a base class into an
HTTP status, so adding a new error never requires touching the routers.
"""

from __future__ import annotations

from fastapi import status


class CatalogError(Exception):
    """Base class for expected, client-visible failures."""

    code = "catalog_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(CatalogError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(CatalogError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


class InvalidOperationError(CatalogError):
    """The target exists but its state forbids the requested change."""

    code = "invalid_operation"
    status_code = status.HTTP_409_CONFLICT


class ValidationError(CatalogError):
    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class AuthorizationError(CatalogError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


__all__ = [
    "AuthorizationError",
    "CatalogError",
    "ConflictError",
    "InvalidOperationError",
    "NotFoundError",
    "ValidationError",
]
