"""Errors raised by the user store and user operations."""

from __future__ import annotations

from partitura_api.common.errors import ConflictError, NotFoundError, ValidationError


class UserNotFoundError(NotFoundError):
    """Raised when a user lookup does not yield a result."""

    code = "user_not_found"

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} not found.")
        self.user_id = user_id


class DuplicateEmailError(ConflictError):
    """Raised when an email address is already registered."""

    code = "duplicate_email"

    def __init__(self, email: str) -> None:
        super().__init__(f"Email {email!r} is already registered.")
        self.email = email


class InvalidPasswordError(ValidationError):
    """Raised when a password fails the strength policy."""

    code = "invalid_password"


class UserOwnsSheetsError(ConflictError):
    """Raised when deleting a user who still owns sheets."""

    code = "user_owns_sheets"

    def __init__(self, *, user_id: int, owned: int) -> None:
        super().__init__(
            f"User {user_id} still owns {owned} sheet(s); delete or reassign them first."
        )
        self.user_id = user_id
        self.owned = owned


__all__ = [
    "DuplicateEmailError",
    "InvalidPasswordError",
    "UserNotFoundError",
    "UserOwnsSheetsError",
]
